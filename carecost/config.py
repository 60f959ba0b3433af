"""Environment-driven configuration defaults for the cost risk engine."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Final

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def _get_int(env_var: str, default: int) -> int:
    value = os.getenv(env_var)
    if value is None or not value.strip():
        return default
    return int(value.strip())


def _get_float(env_var: str, default: float) -> float:
    value = os.getenv(env_var)
    if value is None or not value.strip():
        return default
    return float(value.strip())


DEFAULT_ITERATIONS: Final[int] = _get_int("CARECOST_DEFAULT_ITERATIONS", 1000)
DEFAULT_SIGMA: Final[float] = _get_float("CARECOST_DEFAULT_SIGMA", 0.5)
DEFAULT_COINSURANCE_RATE: Final[float] = _get_float("CARECOST_COINSURANCE_RATE", 0.20)
OOP_PROXIMITY: Final[float] = _get_float("CARECOST_OOP_PROXIMITY", 0.95)
MAX_ITERATIONS: Final[int] = _get_int("CARECOST_MAX_ITERATIONS", 1_000_000)
WORKER_MAX_WORKERS: Final[int] = _get_int("CARECOST_WORKER_MAX_WORKERS", 1)

LOG_LEVEL: Final[str] = os.getenv("CARECOST_LOG_LEVEL", "WARNING").upper()
OUTPUT_ROOT: Final[Path] = Path(os.environ.get("CARECOST_OUTPUT_ROOT", PROJECT_ROOT / "output"))
