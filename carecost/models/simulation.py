"""Simulation request/result data models and message conversion."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..config import DEFAULT_ITERATIONS, DEFAULT_SIGMA

PERCENTILE_RANKS = (5, 10, 25, 50, 75, 90, 95, 99)


class SimulationRequest(BaseModel):
    """Inputs for one Monte Carlo run.

    Field names are snake_case in Python; the camelCase aliases are the keys
    used on the message boundary with the background worker.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    base_cost: float = Field(
        ...,
        alias="baseCost",
        gt=0,
        allow_inf_nan=False,
        description="Nominal annual medical cost before location adjustment",
    )
    deductible: float = Field(..., ge=0, allow_inf_nan=False, description="Plan deductible")
    out_of_pocket_max: float = Field(
        ...,
        alias="outOfPocketMax",
        ge=0,
        allow_inf_nan=False,
        description="Plan out-of-pocket maximum (>= deductible)",
    )
    iterations: int = Field(DEFAULT_ITERATIONS, gt=0, description="Number of simulated years")
    seed: Optional[int] = Field(
        None, description="Generator seed; resolved from the engine clock when omitted"
    )
    sigma: float = Field(
        DEFAULT_SIGMA, gt=0, allow_inf_nan=False, description="Lognormal shape parameter"
    )
    coinsurance_rate: Optional[float] = Field(
        None,
        alias="coinsuranceRate",
        ge=0,
        le=1,
        description="Share of post-deductible cost paid by the household; engine default when None",
    )
    state_code: Optional[str] = Field(None, alias="stateCode", description="Two-letter state code")
    zip_code: Optional[str] = Field(None, alias="zipCode", description="ZIP code or ZIP-3 prefix")

    @field_validator("iterations", mode="before")
    @classmethod
    def _reject_bool_iterations(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("iterations must be an integer, not a boolean")
        return value

    @model_validator(mode="after")
    def _check_plan_limits(self) -> "SimulationRequest":
        if self.out_of_pocket_max < self.deductible:
            raise ValueError("outOfPocketMax must be greater than or equal to deductible")
        return self

    @property
    def has_location(self) -> bool:
        return bool(self.state_code or self.zip_code)

    def with_seed(self, seed: int) -> "SimulationRequest":
        """Return a copy carrying an explicit seed."""
        return self.model_copy(update={"seed": int(seed)})

    def to_message(self) -> Dict[str, Any]:
        """Serialise to the inbound worker message shape."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def from_message(cls, message: Mapping[str, Any]) -> "SimulationRequest":
        return cls.model_validate(dict(message))


class PercentileBands(BaseModel):
    """Nearest-rank percentiles of simulated out-of-pocket cost."""

    model_config = ConfigDict(frozen=True)

    p5: int
    p10: int
    p25: int
    p50: int
    p75: int
    p90: int
    p95: int
    p99: int

    @classmethod
    def from_ranks(cls, values: Mapping[int, int]) -> "PercentileBands":
        return cls(**{f"p{rank}": int(values[rank]) for rank in PERCENTILE_RANKS})

    def by_rank(self) -> Dict[int, int]:
        return {rank: getattr(self, f"p{rank}") for rank in PERCENTILE_RANKS}

    def __getitem__(self, rank: int) -> int:
        if rank not in PERCENTILE_RANKS:
            raise KeyError(f"Unsupported percentile rank {rank!r}")
        return getattr(self, f"p{rank}")


class SimulationResult(BaseModel):
    """Summary statistics of one simulation run (all money values rounded)."""

    model_config = ConfigDict(frozen=True)

    mean: int
    standard_deviation: int
    median: int
    percentiles: PercentileBands
    probability_exceeding_deductible: int = Field(..., ge=0, le=100)
    probability_hitting_oop_max: int = Field(..., ge=0, le=100)
    value_at_risk_95: int
    simulation_count: int = Field(..., gt=0)
    execution_time_ms: int = Field(..., ge=0)
    seed: int
    adjusted_base_cost: float = Field(..., gt=0)
    cost_multiplier: float = Field(1.0, gt=0)

    def to_message(self) -> Dict[str, Any]:
        """Flatten into the outbound worker message (no nested containers)."""
        message: Dict[str, Any] = {
            "mean": self.mean,
            "standardDeviation": self.standard_deviation,
            "median": self.median,
        }
        for rank, value in self.percentiles.by_rank().items():
            message[f"p{rank}"] = value
        message.update(
            {
                "probabilityExceedingDeductible": self.probability_exceeding_deductible,
                "probabilityHittingOOPMax": self.probability_hitting_oop_max,
                "valueAtRisk95": self.value_at_risk_95,
                "simulationCount": self.simulation_count,
                "executionTimeMs": self.execution_time_ms,
                "seed": self.seed,
                "adjustedBaseCost": self.adjusted_base_cost,
                "costMultiplier": self.cost_multiplier,
            }
        )
        return message

    @classmethod
    def from_message(cls, message: Mapping[str, Any]) -> "SimulationResult":
        return cls(
            mean=message["mean"],
            standard_deviation=message["standardDeviation"],
            median=message["median"],
            percentiles=PercentileBands.from_ranks(
                {rank: message[f"p{rank}"] for rank in PERCENTILE_RANKS}
            ),
            probability_exceeding_deductible=message["probabilityExceedingDeductible"],
            probability_hitting_oop_max=message["probabilityHittingOOPMax"],
            value_at_risk_95=message["valueAtRisk95"],
            simulation_count=message["simulationCount"],
            execution_time_ms=message["executionTimeMs"],
            seed=message["seed"],
            adjusted_base_cost=message["adjustedBaseCost"],
            cost_multiplier=message.get("costMultiplier", 1.0),
        )


__all__ = ["PERCENTILE_RANKS", "PercentileBands", "SimulationRequest", "SimulationResult"]
