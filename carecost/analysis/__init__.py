"""Interpretation utilities for simulation results."""

from .interpretation import classify_risk, histogram_buckets, interpret_result

__all__ = ["classify_risk", "histogram_buckets", "interpret_result"]
