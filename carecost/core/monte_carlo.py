"""Monte Carlo configuration, sampling and aggregation utilities."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from .. import config as settings
from ..models.simulation import PERCENTILE_RANKS
from .cost_sharing import resolve_out_of_pocket_array
from .distributions import box_muller, lognormal_location, sample_lognormal
from .random_stream import seed_state, uniform_block


@dataclass
class MonteCarloConfig:
    """Engine-level settings applied to every run."""

    default_iterations: int = settings.DEFAULT_ITERATIONS
    default_sigma: float = settings.DEFAULT_SIGMA
    coinsurance_rate: float = settings.DEFAULT_COINSURANCE_RATE
    oop_proximity: float = settings.OOP_PROXIMITY
    max_iterations: int = settings.MAX_ITERATIONS

    def to_metadata(self) -> Dict[str, object]:
        """Serialise into plain metadata (e.g. for worker processes or reports)."""
        return {
            "default_iterations": int(self.default_iterations),
            "default_sigma": float(self.default_sigma),
            "coinsurance_rate": float(self.coinsurance_rate),
            "oop_proximity": float(self.oop_proximity),
            "max_iterations": int(self.max_iterations),
        }

    @classmethod
    def from_metadata(cls, metadata: Dict[str, object]) -> "MonteCarloConfig":
        """Rehydrate a configuration from metadata, falling back to defaults."""
        defaults = cls()
        return MonteCarloConfig(
            default_iterations=int(metadata.get("default_iterations", defaults.default_iterations)),
            default_sigma=float(metadata.get("default_sigma", defaults.default_sigma)),
            coinsurance_rate=float(metadata.get("coinsurance_rate", defaults.coinsurance_rate)),
            oop_proximity=float(metadata.get("oop_proximity", defaults.oop_proximity)),
            max_iterations=int(metadata.get("max_iterations", defaults.max_iterations)),
        )

    @classmethod
    def from_env(cls) -> "MonteCarloConfig":
        """Build from the environment-driven values in :mod:`carecost.config`."""
        return cls()


@dataclass(frozen=True)
class SimulationOutcomes:
    """Raw per-iteration outputs of one run.

    ``expenses`` keeps draw order; ``out_of_pocket`` is sorted ascending.
    """

    expenses: np.ndarray
    out_of_pocket: np.ndarray
    exceeded_deductible: int
    near_oop_max: int
    seed: int
    adjusted_base_cost: float

    @property
    def iterations(self) -> int:
        return int(self.out_of_pocket.size)


@dataclass(frozen=True)
class OutcomeStatistics:
    """Unrounded reductions of :class:`SimulationOutcomes`."""

    mean: float
    standard_deviation: float
    percentiles: Dict[int, float]
    probability_exceeding_deductible: float
    probability_hitting_oop_max: float
    simulation_count: int


def simulate_outcomes(
    adjusted_base_cost: float,
    deductible: float,
    out_of_pocket_max: float,
    iterations: int,
    seed: int,
    *,
    sigma: float = settings.DEFAULT_SIGMA,
    coinsurance_rate: float = settings.DEFAULT_COINSURANCE_RATE,
    oop_proximity: float = settings.OOP_PROXIMITY,
) -> SimulationOutcomes:
    """Draw ``iterations`` lognormal expenses and resolve each through the plan.

    Iteration ``i`` consumes draws ``2i`` (``u1``) and ``2i + 1`` (``u2``) of
    the seeded stream, so the output is identical to a sequential loop.
    """
    if iterations <= 0:
        raise ValueError("iterations must be positive")
    if sigma <= 0:
        raise ValueError("sigma must be positive")

    mu = lognormal_location(adjusted_base_cost)
    uniforms, _ = uniform_block(seed_state(seed), 2 * iterations)
    z = box_muller(uniforms[0::2], uniforms[1::2])
    expenses = sample_lognormal(mu, sigma, z)
    out_of_pocket = resolve_out_of_pocket_array(
        expenses, deductible, coinsurance_rate, out_of_pocket_max
    )

    exceeded = int(np.count_nonzero(expenses > deductible))
    near_max = int(np.count_nonzero(out_of_pocket >= out_of_pocket_max * oop_proximity))

    sorted_costs = np.sort(out_of_pocket)
    expenses.setflags(write=False)
    sorted_costs.setflags(write=False)
    return SimulationOutcomes(
        expenses=expenses,
        out_of_pocket=sorted_costs,
        exceeded_deductible=exceeded,
        near_oop_max=near_max,
        seed=int(seed),
        adjusted_base_cost=float(adjusted_base_cost),
    )


def nearest_rank(sorted_values: Sequence[float], rank: float) -> float:
    """Nearest-rank percentile: ``sorted[floor(rank / 100 * (n - 1))]``."""
    count = len(sorted_values)
    if count == 0:
        raise ValueError("cannot take a percentile of an empty sample")
    index = math.floor((rank / 100) * (count - 1))
    return float(sorted_values[index])


def describe_outcomes(
    outcomes: SimulationOutcomes,
    *,
    percentile_ranks: Iterable[int] = PERCENTILE_RANKS,
) -> OutcomeStatistics:
    """Reduce raw outcomes to mean, population std, percentiles and probabilities."""
    values = outcomes.out_of_pocket
    count = outcomes.iterations
    mean = float(np.mean(values))
    std = float(np.std(values))
    percentiles = {int(rank): nearest_rank(values, rank) for rank in percentile_ranks}
    return OutcomeStatistics(
        mean=mean,
        standard_deviation=std,
        percentiles=percentiles,
        probability_exceeding_deductible=outcomes.exceeded_deductible / count * 100.0,
        probability_hitting_oop_max=outcomes.near_oop_max / count * 100.0,
        simulation_count=count,
    )


def build_percentile_table(
    values: Sequence[float],
    *,
    percentiles: Optional[Iterable[int]] = None,
) -> pd.DataFrame:
    """Return a nearest-rank percentile ladder as a dataframe."""
    ranks = list(percentiles) if percentiles is not None else list(range(1, 100))
    ordered = np.sort(np.asarray(values, dtype=float))
    ladder = [{"percentile": rank, "out_of_pocket": nearest_rank(ordered, rank)} for rank in ranks]
    return pd.DataFrame(ladder)


__all__ = [
    "PERCENTILE_RANKS",
    "MonteCarloConfig",
    "SimulationOutcomes",
    "OutcomeStatistics",
    "simulate_outcomes",
    "nearest_rank",
    "describe_outcomes",
    "build_percentile_table",
]
