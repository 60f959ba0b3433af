"""Geographic cost reference data models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CostTier(str, Enum):
    """Qualitative healthcare cost tier relative to the national average."""

    VERY_LOW = "very_low"
    LOW = "low"
    AVERAGE = "average"
    HIGH = "high"
    VERY_HIGH = "very_high"


class StateCostSummary(BaseModel):
    """State-level cost index summary (1.0 = national average)."""

    model_config = ConfigDict(frozen=True)

    state: str = Field(..., min_length=2, max_length=2, description="Two-letter state code")
    state_name: str = Field(..., description="Human readable state name")
    average_cost_index: float = Field(..., gt=0, description="Average multiplier across the state")
    min_cost_index: float = Field(..., gt=0, description="Lowest county multiplier")
    max_cost_index: float = Field(..., gt=0, description="Highest county multiplier")
    tier: CostTier

    @field_validator("state", mode="before")
    @classmethod
    def _normalize_state(cls, value: str) -> str:
        return str(value).strip().upper()


class MetroCostEntry(BaseModel):
    """Metro-area cost index with its Medicare GPCI components."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Metro area (CBSA) name")
    fips: str = Field(..., description="FIPS code of the principal county")
    county: str = Field(..., description="Principal county name")
    state: str = Field(..., min_length=2, max_length=2)
    cost_index: float = Field(..., gt=0, description="Overall multiplier (1.0 = national average)")
    work_gpci: float = Field(..., gt=0, description="Work geographic practice cost index")
    pe_gpci: float = Field(..., gt=0, description="Practice expense GPCI")
    mp_gpci: float = Field(..., gt=0, description="Malpractice GPCI")
    wage_index: float = Field(..., gt=0, description="Medicare area wage index")
    tier: CostTier


class CostVarianceEstimate(BaseModel):
    """How a location shifts a national-average cost."""

    model_config = ConfigDict(frozen=True)

    adjusted_cost: int
    variance: float
    percentage_change: int
    multiplier: float
    tier: CostTier


__all__ = ["CostTier", "StateCostSummary", "MetroCostEntry", "CostVarianceEstimate"]
