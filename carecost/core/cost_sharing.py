"""Deductible / coinsurance / out-of-pocket-maximum cost-sharing rules."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

DEFAULT_COINSURANCE_RATE = 0.20


@dataclass(frozen=True)
class CostSharingBreakdown:
    """Itemised household responsibility for a single annual expense."""

    expense: float
    deductible_portion: float
    post_deductible: float
    coinsurance_portion: float
    uncapped_total: float
    out_of_pocket: float

    @property
    def capped(self) -> bool:
        """True when the out-of-pocket maximum bound the household cost."""
        return self.out_of_pocket < self.uncapped_total

    @property
    def insurer_paid(self) -> float:
        return self.expense - self.out_of_pocket


def cost_sharing_breakdown(
    expense: float,
    deductible: float,
    coinsurance_rate: float = DEFAULT_COINSURANCE_RATE,
    out_of_pocket_max: float = float("inf"),
) -> CostSharingBreakdown:
    """Apply the plan rules in order and return each intermediate amount."""
    deductible_portion = min(expense, deductible)
    post_deductible = max(0.0, expense - deductible)
    coinsurance_portion = post_deductible * coinsurance_rate
    uncapped_total = deductible_portion + coinsurance_portion
    return CostSharingBreakdown(
        expense=float(expense),
        deductible_portion=float(deductible_portion),
        post_deductible=float(post_deductible),
        coinsurance_portion=float(coinsurance_portion),
        uncapped_total=float(uncapped_total),
        out_of_pocket=float(min(uncapped_total, out_of_pocket_max)),
    )


def resolve_out_of_pocket(
    expense: float,
    deductible: float,
    coinsurance_rate: float,
    out_of_pocket_max: float,
) -> float:
    """Household out-of-pocket cost for one raw medical expense."""
    return cost_sharing_breakdown(expense, deductible, coinsurance_rate, out_of_pocket_max).out_of_pocket


def resolve_out_of_pocket_array(
    expenses: np.ndarray,
    deductible: float,
    coinsurance_rate: float,
    out_of_pocket_max: float,
) -> np.ndarray:
    """Vectorised :func:`resolve_out_of_pocket` over an array of expenses."""
    expenses = np.asarray(expenses, dtype=float)
    deductible_portion = np.minimum(expenses, deductible)
    coinsurance_portion = np.maximum(0.0, expenses - deductible) * coinsurance_rate
    return np.minimum(deductible_portion + coinsurance_portion, out_of_pocket_max)


__all__ = [
    "DEFAULT_COINSURANCE_RATE",
    "CostSharingBreakdown",
    "cost_sharing_breakdown",
    "resolve_out_of_pocket",
    "resolve_out_of_pocket_array",
]
