"""Numeric helper functions shared across the application."""

from __future__ import annotations

import math
from typing import Optional


def decimalize(value: Optional[float]) -> Optional[float]:
    """Convert percentage-based inputs to decimals while preserving None."""
    if value is None:
        return None
    if value > 1.5:
        return float(value / 100.0)
    return float(value)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with ties going up (0.5 -> 1, 2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def format_currency(value: Optional[float], *, cents: bool = False) -> str:
    """Format numbers as currency for console and narrative output."""
    if value is None:
        return "N/A"
    if cents:
        text = f"${abs(value):,.2f}"
        return f"-{text}" if value < 0 and text != "$0.00" else text
    rounded = round_half_up(value)
    return f"-${-rounded:,}" if rounded < 0 else f"${rounded:,}"


__all__ = ["decimalize", "round_half_up", "format_currency"]
