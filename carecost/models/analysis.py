"""Analysis data models built on top of simulation results."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .simulation import SimulationResult


class RiskLevel(str, Enum):
    """Overall healthcare cost risk classification."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very-high"


class Interpretation(BaseModel):
    """Human-readable reading of a simulation result."""

    model_config = ConfigDict(frozen=True)

    risk_level: RiskLevel
    summary: str
    insights: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class HistogramBucket(BaseModel):
    """Share of simulated outcomes falling in ``[minimum, maximum]``."""

    model_config = ConfigDict(frozen=True)

    label: str
    minimum: int
    maximum: int
    percentage: int = Field(..., ge=0, le=100)


class SimulationAnalysis(BaseModel):
    """Result, interpretation, histogram and diagnostics for one run."""

    model_config = ConfigDict(frozen=True)

    result: SimulationResult
    interpretation: Interpretation
    histogram: List[HistogramBucket]
    validation: Dict[str, Any] = Field(default_factory=dict)
    input_parameters: Dict[str, Any] = Field(default_factory=dict)


class PlanOption(BaseModel):
    """A candidate plan for side-by-side comparison."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    deductible: float = Field(..., ge=0)
    out_of_pocket_max: float = Field(..., ge=0)
    monthly_premium: float = Field(0.0, ge=0)

    @model_validator(mode="after")
    def _check_limits(self) -> "PlanOption":
        if self.out_of_pocket_max < self.deductible:
            raise ValueError("out_of_pocket_max must be greater than or equal to deductible")
        return self

    @property
    def annual_premium(self) -> float:
        return self.monthly_premium * 12


class PlanComparison(BaseModel):
    """Paired Monte Carlo comparison of two plans."""

    model_config = ConfigDict(frozen=True)

    plan_a: PlanOption
    plan_b: PlanOption
    plan_a_analysis: SimulationAnalysis
    plan_b_analysis: SimulationAnalysis
    expected_total_cost_difference: float
    better_plan_for_low_utilization: str
    better_plan_for_high_utilization: str
    break_even_cost: int


__all__ = [
    "RiskLevel",
    "Interpretation",
    "HistogramBucket",
    "SimulationAnalysis",
    "PlanOption",
    "PlanComparison",
]
