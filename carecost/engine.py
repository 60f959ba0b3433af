"""High-level orchestration for the healthcare cost risk engine."""

from __future__ import annotations

import logging
import time
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from .analysis.interpretation import histogram_buckets, interpret_result
from .core.cost_index import get_cost_adjustment_factor
from .core.monte_carlo import (
    MonteCarloConfig,
    OutcomeStatistics,
    SimulationOutcomes,
    describe_outcomes,
    simulate_outcomes,
)
from .core.monte_carlo_validation import validate_outcomes
from .core.validator import ValidationError, parse_request, validate_request
from .models.analysis import PlanComparison, PlanOption, SimulationAnalysis
from .models.simulation import PercentileBands, SimulationRequest, SimulationResult
from .utils.numbers import round_half_up

LOGGER = logging.getLogger(__name__)

RequestLike = Union[SimulationRequest, Mapping[str, Any]]

PLAN_PRESETS: Mapping[str, PlanOption] = MappingProxyType(
    {
        "bronze": PlanOption(name="Bronze", deductible=7000, out_of_pocket_max=9450),
        "silver": PlanOption(name="Silver", deductible=5000, out_of_pocket_max=9450),
        "gold": PlanOption(name="Gold", deductible=1500, out_of_pocket_max=8700),
        "platinum": PlanOption(name="Platinum", deductible=500, out_of_pocket_max=4000),
        "hdhp": PlanOption(name="HDHP", deductible=3200, out_of_pocket_max=8050),
    }
)


def clock_seed(clock: Callable[[], float]) -> int:
    """Derive a seed from a clock returning seconds (millisecond resolution)."""
    return int(clock() * 1000)


class CostRiskEngine:
    """Primary entry point for location-adjusted out-of-pocket risk simulation.

    The engine holds only immutable configuration and an injectable clock used
    to seed requests that omit one; every run is independent, so an engine may
    be shared across threads.
    """

    def __init__(
        self,
        config: Optional[MonteCarloConfig] = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config or MonteCarloConfig.from_env()
        self._clock = clock

    # ---------------------------------------------------------------- Requests
    def prepare(self, payload: RequestLike) -> SimulationRequest:
        """Parse, validate and seed a request before any sampling begins."""
        if isinstance(payload, SimulationRequest):
            defaults = {
                name: value
                for name, value in (
                    ("iterations", self.config.default_iterations),
                    ("sigma", self.config.default_sigma),
                )
                if name not in payload.model_fields_set
            }
            request = payload.model_copy(update=defaults) if defaults else payload
        else:
            payload = dict(payload)
            payload.setdefault("iterations", self.config.default_iterations)
            payload.setdefault("sigma", self.config.default_sigma)
            request = parse_request(payload)
        validate_request(request, max_iterations=self.config.max_iterations)
        if request.seed is None:
            request = request.with_seed(clock_seed(self._clock))
        return request

    def coinsurance_rate(self, request: SimulationRequest) -> float:
        if request.coinsurance_rate is not None:
            return request.coinsurance_rate
        return self.config.coinsurance_rate

    # ---------------------------------------------------------------- Location
    def location_multiplier(self, request: SimulationRequest) -> float:
        """Cost factor for the request location; 1.0 when no location is given."""
        if not request.has_location:
            return 1.0
        return get_cost_adjustment_factor(request.state_code, request.zip_code)

    def adjusted_base_cost(self, request: SimulationRequest) -> Tuple[float, float]:
        """Return ``(adjusted_base_cost, multiplier)`` for the request."""
        multiplier = self.location_multiplier(request)
        return request.base_cost * multiplier, multiplier

    # --------------------------------------------------------------- Execution
    def simulate_outcomes(self, payload: RequestLike) -> SimulationOutcomes:
        """Run the sampling loop and return raw per-iteration outcomes."""
        request = self.prepare(payload)
        outcomes, _ = self._simulate(request)
        return outcomes

    def run(self, payload: RequestLike) -> SimulationResult:
        """Execute one simulation and return its summary statistics."""
        request = self.prepare(payload)
        _, result = self._execute(request)
        return result

    def analyze(self, payload: RequestLike, *, bucket_count: int = 5) -> SimulationAnalysis:
        """Run a simulation and attach interpretation, histogram and diagnostics."""
        _, analysis = self.analyze_outcomes(payload, bucket_count=bucket_count)
        return analysis

    def analyze_outcomes(
        self, payload: RequestLike, *, bucket_count: int = 5
    ) -> Tuple[SimulationOutcomes, SimulationAnalysis]:
        """Like :meth:`analyze`, also returning the raw per-iteration outcomes."""
        request = self.prepare(payload)
        outcomes, result = self._execute(request)
        validation = validate_outcomes(outcomes, out_of_pocket_max=request.out_of_pocket_max)
        if not validation.passed:
            LOGGER.warning("Simulation diagnostics failed: %s", ", ".join(validation.failed_checks))
        analysis = SimulationAnalysis(
            result=result,
            interpretation=interpret_result(
                result,
                deductible=request.deductible,
                out_of_pocket_max=request.out_of_pocket_max,
            ),
            histogram=histogram_buckets(
                outcomes.out_of_pocket, request.out_of_pocket_max, bucket_count=bucket_count
            ),
            validation=validation.to_dict(),
            input_parameters={
                "base_cost": request.base_cost,
                "deductible": request.deductible,
                "out_of_pocket_max": request.out_of_pocket_max,
                "iterations": request.iterations,
                "sigma": request.sigma,
                "coinsurance_rate": self.coinsurance_rate(request),
                "state_code": request.state_code,
                "zip_code": request.zip_code,
            },
        )
        return outcomes, analysis

    # ------------------------------------------------------------------- Plans
    def simulate_plan_type(
        self,
        expected_cost: float,
        plan_type: str,
        *,
        iterations: Optional[int] = None,
        seed: Optional[int] = None,
        state_code: Optional[str] = None,
        zip_code: Optional[str] = None,
    ) -> SimulationAnalysis:
        """Analyse a standard metal-tier (or HDHP) plan for an expected cost."""
        try:
            plan = PLAN_PRESETS[plan_type.strip().lower()]
        except KeyError:
            raise KeyError(
                f"Unknown plan type {plan_type!r}; choose from {', '.join(PLAN_PRESETS)}"
            ) from None
        return self.analyze(
            self._plan_request(expected_cost, plan, iterations, seed, state_code, zip_code)
        )

    def compare_plans(
        self,
        expected_cost: float,
        plan_a: PlanOption,
        plan_b: PlanOption,
        *,
        iterations: Optional[int] = None,
        seed: Optional[int] = None,
        state_code: Optional[str] = None,
        zip_code: Optional[str] = None,
    ) -> PlanComparison:
        """Compare two plans on the same simulated expense draws."""
        shared_seed = seed if seed is not None else clock_seed(self._clock)
        analysis_a = self.analyze(
            self._plan_request(expected_cost, plan_a, iterations, shared_seed, state_code, zip_code)
        )
        analysis_b = self.analyze(
            self._plan_request(expected_cost, plan_b, iterations, shared_seed, state_code, zip_code)
        )
        result_a, result_b = analysis_a.result, analysis_b.result

        total_a = result_a.mean + plan_a.annual_premium
        total_b = result_b.mean + plan_b.annual_premium
        low_a = result_a.percentiles.p25 + plan_a.annual_premium
        low_b = result_b.percentiles.p25 + plan_b.annual_premium
        high_a = result_a.percentiles.p90 + plan_a.annual_premium
        high_b = result_b.percentiles.p90 + plan_b.annual_premium

        premium_difference = plan_a.monthly_premium - plan_b.monthly_premium
        deductible_difference = plan_a.deductible - plan_b.deductible
        scale = deductible_difference / expected_cost if deductible_difference != 0 else 1.0
        break_even = abs(premium_difference * 12 / scale)

        return PlanComparison(
            plan_a=plan_a,
            plan_b=plan_b,
            plan_a_analysis=analysis_a,
            plan_b_analysis=analysis_b,
            expected_total_cost_difference=total_a - total_b,
            better_plan_for_low_utilization=plan_a.name if low_a < low_b else plan_b.name,
            better_plan_for_high_utilization=plan_a.name if high_a < high_b else plan_b.name,
            break_even_cost=round_half_up(break_even),
        )

    # ----------------------------------------------------------------- Helpers
    def _plan_request(
        self,
        expected_cost: float,
        plan: PlanOption,
        iterations: Optional[int],
        seed: Optional[int],
        state_code: Optional[str],
        zip_code: Optional[str],
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "base_cost": expected_cost,
            "deductible": plan.deductible,
            "out_of_pocket_max": plan.out_of_pocket_max,
            "iterations": iterations if iterations is not None else self.config.default_iterations,
            "sigma": self.config.default_sigma,
            "seed": seed,
            "state_code": state_code,
            "zip_code": zip_code,
        }
        return payload

    def _simulate(self, request: SimulationRequest) -> Tuple[SimulationOutcomes, float]:
        adjusted_cost, multiplier = self.adjusted_base_cost(request)
        if request.seed is None:
            raise ValidationError("Simulation seed must be resolved before sampling.")
        outcomes = simulate_outcomes(
            adjusted_cost,
            request.deductible,
            request.out_of_pocket_max,
            request.iterations,
            request.seed,
            sigma=request.sigma,
            coinsurance_rate=self.coinsurance_rate(request),
            oop_proximity=self.config.oop_proximity,
        )
        return outcomes, multiplier

    def _execute(self, request: SimulationRequest) -> Tuple[SimulationOutcomes, SimulationResult]:
        started = time.perf_counter()
        outcomes, multiplier = self._simulate(request)
        stats = describe_outcomes(outcomes)
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        LOGGER.debug(
            "Simulated %d iterations (seed=%d, multiplier=%.2f) in %.1f ms",
            request.iterations,
            request.seed,
            multiplier,
            elapsed_ms,
        )
        return outcomes, self._build_result(stats, outcomes, multiplier, elapsed_ms)

    @staticmethod
    def _build_result(
        stats: OutcomeStatistics,
        outcomes: SimulationOutcomes,
        multiplier: float,
        elapsed_ms: float,
    ) -> SimulationResult:
        percentiles = PercentileBands.from_ranks(
            {rank: round_half_up(value) for rank, value in stats.percentiles.items()}
        )
        return SimulationResult(
            mean=round_half_up(stats.mean),
            standard_deviation=round_half_up(stats.standard_deviation),
            median=percentiles.p50,
            percentiles=percentiles,
            probability_exceeding_deductible=round_half_up(stats.probability_exceeding_deductible),
            probability_hitting_oop_max=round_half_up(stats.probability_hitting_oop_max),
            value_at_risk_95=percentiles.p95,
            simulation_count=stats.simulation_count,
            execution_time_ms=round_half_up(elapsed_ms),
            seed=outcomes.seed,
            adjusted_base_cost=outcomes.adjusted_base_cost,
            cost_multiplier=multiplier,
        )


def run_simulation(
    payload: RequestLike,
    *,
    config: Optional[MonteCarloConfig] = None,
    clock: Callable[[], float] = time.time,
) -> SimulationResult:
    """Convenience wrapper: build an engine and execute a single run."""
    return CostRiskEngine(config, clock=clock).run(payload)


__all__ = ["PLAN_PRESETS", "CostRiskEngine", "clock_seed", "run_simulation"]
