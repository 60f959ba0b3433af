"""Narrative interpretation and histogram views of simulation results."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np
import pandas as pd

from ..models.analysis import HistogramBucket, Interpretation, RiskLevel
from ..models.simulation import SimulationResult
from ..utils.numbers import format_currency, round_half_up

VERY_HIGH_OOP_PROBABILITY = 30
HIGH_OOP_PROBABILITY = 15
MODERATE_DEDUCTIBLE_PROBABILITY = 50
HSA_ELIGIBLE_DEDUCTIBLE = 1600

RISK_DESCRIPTIONS = {
    RiskLevel.LOW: "Your healthcare cost risk is low.",
    RiskLevel.MODERATE: "Your healthcare cost risk is moderate.",
    RiskLevel.HIGH: "Your healthcare cost risk is elevated.",
    RiskLevel.VERY_HIGH: "Your healthcare cost risk is significant.",
}


def classify_risk(result: SimulationResult) -> RiskLevel:
    if result.probability_hitting_oop_max >= VERY_HIGH_OOP_PROBABILITY:
        return RiskLevel.VERY_HIGH
    if result.probability_hitting_oop_max >= HIGH_OOP_PROBABILITY:
        return RiskLevel.HIGH
    if result.probability_exceeding_deductible >= MODERATE_DEDUCTIBLE_PROBABILITY:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def interpret_result(
    result: SimulationResult,
    *,
    deductible: float,
    out_of_pocket_max: float,
) -> Interpretation:
    """Build the risk level, summary, insights and recommendations for a run."""
    risk_level = classify_risk(result)
    bands = result.percentiles
    exceed = result.probability_exceeding_deductible
    hit = result.probability_hitting_oop_max

    insights: List[str] = [
        f"Your expected out-of-pocket cost is {format_currency(result.mean)} per year"
    ]
    if exceed > 50:
        insights.append(f"There's a {exceed}% chance you'll exceed your deductible")
    if hit > 10:
        insights.append(f"There's a {hit}% chance of reaching your out-of-pocket maximum")
    insights.append(
        f"Your costs could range from {format_currency(bands.p10)} to "
        f"{format_currency(bands.p90)} in most scenarios (80% confidence)"
    )

    recommendations: List[str] = []
    if risk_level in (RiskLevel.HIGH, RiskLevel.VERY_HIGH):
        recommendations.append("Consider a plan with a lower out-of-pocket maximum")
        recommendations.append(
            f"Build an emergency health fund of at least {format_currency(bands.p95)}"
        )
    if exceed > 70:
        recommendations.append("A higher premium plan with lower deductible may save money overall")
    if result.standard_deviation > result.mean * 0.5:
        recommendations.append("Your costs have high variability - consider supplemental insurance")
    if deductible >= HSA_ELIGIBLE_DEDUCTIBLE:
        recommendations.append("Consider opening an HSA to save pre-tax dollars for healthcare")

    summary = (
        f"{RISK_DESCRIPTIONS[risk_level]} Based on {result.simulation_count:,} simulations, "
        f"you can expect to pay between {format_currency(bands.p25)} and {format_currency(bands.p75)} "
        f"in out-of-pocket costs (50% confidence), with a median of {format_currency(result.median)}. "
        f"There's a {hit}% chance of reaching your {format_currency(out_of_pocket_max)} "
        "out-of-pocket maximum."
    )
    return Interpretation(
        risk_level=risk_level,
        summary=summary,
        insights=insights,
        recommendations=recommendations,
    )


def histogram_buckets(
    out_of_pocket: Sequence[float],
    out_of_pocket_max: float,
    *,
    bucket_count: int = 5,
) -> List[HistogramBucket]:
    """Bucket simulated costs into equal-width bands over ``[0, out_of_pocket_max]``."""
    if bucket_count <= 0:
        raise ValueError("bucket_count must be positive")
    costs = pd.Series(np.asarray(out_of_pocket, dtype=float))
    if costs.empty:
        return []
    if out_of_pocket_max <= 0:
        return [HistogramBucket(label="$0-$0", minimum=0, maximum=0, percentage=100)]

    edges = np.linspace(0.0, float(out_of_pocket_max), bucket_count + 1)
    codes = pd.cut(costs, bins=edges, include_lowest=True).cat.codes.to_numpy()
    counts = np.bincount(codes[codes >= 0], minlength=bucket_count)

    buckets: List[HistogramBucket] = []
    for index in range(bucket_count):
        low = round_half_up(edges[index])
        high = round_half_up(edges[index + 1])
        buckets.append(
            HistogramBucket(
                label=f"{format_currency(low)}-{format_currency(high)}",
                minimum=low,
                maximum=high,
                percentage=round_half_up(counts[index] / costs.size * 100.0),
            )
        )
    return buckets


__all__ = ["classify_risk", "interpret_result", "histogram_buckets", "HSA_ELIGIBLE_DEDUCTIBLE"]
