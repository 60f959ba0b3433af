"""Validation helpers for Monte Carlo simulations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np

from .monte_carlo import PERCENTILE_RANKS, SimulationOutcomes, build_percentile_table


@dataclass
class ValidationResult:
    """Basic container for validation outcomes."""

    status: str
    failed_checks: Sequence[str]
    warnings: Sequence[str]

    @property
    def passed(self) -> bool:
        return self.status == "PASS"

    def to_dict(self) -> Dict[str, object]:
        return {
            "status": self.status,
            "failed_checks": list(self.failed_checks),
            "warnings": list(self.warnings),
        }


def validate_outcomes(
    outcomes: SimulationOutcomes,
    *,
    out_of_pocket_max: float,
) -> ValidationResult:
    """Run sanity checks on simulated out-of-pocket costs."""
    failed: list[str] = []
    warnings: list[str] = []

    costs = np.asarray(outcomes.out_of_pocket, dtype=float)
    if costs.size == 0:
        failed.append("no_outcomes")
        return ValidationResult(status="FAIL", failed_checks=failed, warnings=warnings)

    if np.any(np.isnan(costs)) or np.any(np.isinf(costs)):
        failed.append("nan_or_inf_costs")
    if float(costs.min()) < 0.0:
        failed.append("negative_costs")
    if float(costs.max()) > out_of_pocket_max:
        failed.append("exceeds_oop_max")

    ladder = build_percentile_table(costs, percentiles=PERCENTILE_RANKS)
    if not ladder["out_of_pocket"].is_monotonic_increasing:
        failed.append("percentile_ordering")

    mean = float(costs.mean())
    std = float(costs.std())
    if std <= 0:
        warnings.append("zero_variance")
    elif mean > 0 and std > mean:
        warnings.append("high_volatility")

    count = outcomes.iterations
    if outcomes.near_oop_max / count > 0.5:
        warnings.append("oop_max_dominant")
    if outcomes.exceeded_deductible / count < 0.01:
        warnings.append("deductible_rarely_exceeded")

    status = "PASS" if not failed else "FAIL"
    return ValidationResult(status=status, failed_checks=failed, warnings=warnings)


__all__ = ["ValidationResult", "validate_outcomes"]
