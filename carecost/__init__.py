"""Location-adjusted Monte Carlo simulation of household healthcare costs."""

from __future__ import annotations

from .core.cost_index import adjust_cost_for_location, get_cost_adjustment_factor
from .core.monte_carlo import MonteCarloConfig
from .core.validator import ValidationError
from .engine import PLAN_PRESETS, CostRiskEngine, run_simulation
from .models.simulation import SimulationRequest, SimulationResult

__version__ = "0.1.0"

__all__ = [
    "PLAN_PRESETS",
    "CostRiskEngine",
    "MonteCarloConfig",
    "SimulationRequest",
    "SimulationResult",
    "ValidationError",
    "adjust_cost_for_location",
    "get_cost_adjustment_factor",
    "run_simulation",
]
