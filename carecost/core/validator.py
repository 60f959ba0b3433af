"""Input validation utilities."""

from __future__ import annotations

import math
from typing import Any, List, Mapping, Union

import pydantic

from ..config import MAX_ITERATIONS
from ..models.simulation import SimulationRequest


class ValidationError(ValueError):
    """Raised when a simulation request violates the caller contract."""


def parse_request(payload: Union[SimulationRequest, Mapping[str, Any]]) -> SimulationRequest:
    """Coerce an inbound mapping into a :class:`SimulationRequest`."""
    if isinstance(payload, SimulationRequest):
        return payload
    try:
        return SimulationRequest.model_validate(dict(payload))
    except pydantic.ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'request'}: {error['msg']}"
            for error in exc.errors()
        )
        raise ValidationError(f"Invalid simulation request: {problems}") from exc


def validate_request(request: SimulationRequest, *, max_iterations: int = MAX_ITERATIONS) -> None:
    """Ensure a request can be simulated; raise :class:`ValidationError` otherwise."""
    problems: List[str] = []
    if not math.isfinite(request.base_cost) or request.base_cost <= 0:
        problems.append("baseCost must be a positive finite number")
    if not math.isfinite(request.deductible) or request.deductible < 0:
        problems.append("deductible must be a non-negative finite number")
    if not math.isfinite(request.out_of_pocket_max) or request.out_of_pocket_max < 0:
        problems.append("outOfPocketMax must be a non-negative finite number")
    elif request.out_of_pocket_max < request.deductible:
        problems.append("outOfPocketMax must be greater than or equal to deductible")
    if request.iterations <= 0:
        problems.append("iterations must be positive")
    elif request.iterations > max_iterations:
        problems.append(f"iterations must not exceed {max_iterations:,}")
    if not math.isfinite(request.sigma) or request.sigma <= 0:
        problems.append("sigma must be a positive finite number")
    if request.coinsurance_rate is not None and not 0.0 <= request.coinsurance_rate <= 1.0:
        problems.append("coinsuranceRate must be between 0 and 1")
    if problems:
        raise ValidationError("Invalid simulation request: " + "; ".join(problems))


__all__ = ["ValidationError", "parse_request", "validate_request"]
