"""Typer-based command line interface for cost risk simulations."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import pydantic
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..config import DEFAULT_ITERATIONS, DEFAULT_SIGMA, LOG_LEVEL, OUTPUT_ROOT
from ..core.cost_index import (
    estimate_annual_cost_variance,
    find_metro_by_zip,
    get_state_cost_index,
    state_cost_frame,
    tier_description,
)
from ..core.validator import ValidationError
from ..engine import PLAN_PRESETS, CostRiskEngine
from ..models.analysis import PlanOption, SimulationAnalysis
from ..reporting.report_generator import ReportGenerator
from ..utils.numbers import decimalize, format_currency

app = typer.Typer(help="Healthcare out-of-pocket cost risk simulator")
console = Console()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@app.callback()
def _main(
    log_level: str = typer.Option(LOG_LEVEL, "--log-level", help="Logging level for diagnostics"),
) -> None:
    _configure_logging(log_level)


def _resolve_plan(value: str, monthly_premium: float) -> PlanOption:
    """Build a plan from a preset name or a ``name:deductible:oop_max`` triple."""
    preset = PLAN_PRESETS.get(value.strip().lower())
    if preset is not None:
        return preset.model_copy(update={"monthly_premium": monthly_premium})
    parts = [part.strip() for part in value.split(":")]
    if len(parts) != 3:
        raise typer.BadParameter(
            f"Plan {value!r} is neither a preset ({', '.join(PLAN_PRESETS)}) "
            "nor NAME:DEDUCTIBLE:OOP_MAX."
        )
    try:
        return PlanOption(
            name=parts[0],
            deductible=float(parts[1]),
            out_of_pocket_max=float(parts[2]),
            monthly_premium=monthly_premium,
        )
    except (ValueError, pydantic.ValidationError) as exc:
        raise typer.BadParameter(f"Invalid plan {value!r}: {exc}") from exc


def _build_result_table(analysis: SimulationAnalysis, title: str) -> Table:
    result = analysis.result
    table = Table(title=title, show_lines=False)
    table.add_column("Statistic")
    table.add_column("Value", justify="right")
    table.add_row("Mean", format_currency(result.mean))
    table.add_row("Median", format_currency(result.median))
    table.add_row("Std Dev", format_currency(result.standard_deviation))
    for rank, value in result.percentiles.by_rank().items():
        table.add_row(f"P{rank}", format_currency(value))
    table.add_row("Exceed Deductible", f"{result.probability_exceeding_deductible}%")
    table.add_row("Hit OOP Max", f"{result.probability_hitting_oop_max}%")
    table.add_row("VaR 95", format_currency(result.value_at_risk_95))
    table.add_row("Location Multiplier", f"{result.cost_multiplier:.2f}")
    table.add_row("Simulations", f"{result.simulation_count:,}")
    table.add_row("Seed", str(result.seed))
    return table


def _print_interpretation(analysis: SimulationAnalysis) -> None:
    interpretation = analysis.interpretation
    console.print(f"\n[bold]Risk level:[/bold] {interpretation.risk_level.value}")
    console.print(interpretation.summary)
    for insight in interpretation.insights:
        console.print(f"  - {insight}")
    if interpretation.recommendations:
        console.print("\n[bold]Recommendations[/bold]")
        for recommendation in interpretation.recommendations:
            console.print(f"  - {recommendation}")


@app.command()
def simulate(
    base_cost: float = typer.Argument(..., help="Expected annual medical cost (national)"),
    deductible: float = typer.Option(..., help="Plan deductible"),
    oop_max: float = typer.Option(..., "--oop-max", help="Plan out-of-pocket maximum"),
    iterations: int = typer.Option(DEFAULT_ITERATIONS, help="Number of simulated years"),
    seed: Optional[int] = typer.Option(None, help="Random seed (default: clock-derived)"),
    sigma: float = typer.Option(DEFAULT_SIGMA, help="Lognormal shape parameter"),
    coinsurance: Optional[float] = typer.Option(
        None, help="Coinsurance share (decimal or percent, e.g. 0.2 or 20)"
    ),
    state: Optional[str] = typer.Option(None, help="Two-letter state code"),
    zip_code: Optional[str] = typer.Option(None, "--zip", help="ZIP code or ZIP-3 prefix"),
    output_dir: Optional[Path] = typer.Option(None, help="Directory for report exports"),
    export: bool = typer.Option(
        False, "--export", help="Export reports to a timestamped run under CARECOST_OUTPUT_ROOT"
    ),
) -> None:
    """Simulate annual out-of-pocket costs for one plan."""
    payload = {
        "base_cost": base_cost,
        "deductible": deductible,
        "out_of_pocket_max": oop_max,
        "iterations": iterations,
        "seed": seed,
        "sigma": sigma,
        "coinsurance_rate": decimalize(coinsurance),
        "state_code": state,
        "zip_code": zip_code,
    }
    try:
        outcomes, analysis = CostRiskEngine().analyze_outcomes(payload)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    console.print(_build_result_table(analysis, "Out-of-Pocket Cost Simulation"))
    _print_interpretation(analysis)

    if output_dir is not None or export:
        reporter = (
            ReportGenerator(output_dir)
            if output_dir is not None
            else ReportGenerator(OUTPUT_ROOT, timestamped=True)
        )
        exported = reporter.export_analysis(analysis, outcomes=outcomes)
        console.print("\n[bold green]Reports exported:[/bold green]")
        for name, path in exported.items():
            console.print(f"  - {name}: {path}")


@app.command()
def location(
    state: Optional[str] = typer.Argument(None, help="Two-letter state code"),
    zip_code: Optional[str] = typer.Option(None, "--zip", help="ZIP code or ZIP-3 prefix"),
    base_cost: float = typer.Option(5000.0, help="National-average annual cost to adjust"),
) -> None:
    """Show the cost multiplier and tier for a location."""
    estimate = estimate_annual_cost_variance(base_cost, state, zip_code)
    metro = find_metro_by_zip(zip_code)
    summary = get_state_cost_index(state)

    if metro is not None:
        source = f"Metro: {metro.name}"
    elif summary is not None:
        source = f"State: {summary.state_name}"
    else:
        source = "National average"

    table = Table(title="Location Cost Adjustment", show_lines=False)
    table.add_column("Field")
    table.add_column("Value", justify="right")
    table.add_row("Source", source)
    table.add_row("Multiplier", f"{estimate.multiplier:.2f}")
    table.add_row("Tier", tier_description(estimate.tier))
    table.add_row("National Cost", format_currency(base_cost))
    table.add_row("Adjusted Cost", format_currency(estimate.adjusted_cost))
    table.add_row("Change", f"{estimate.percentage_change:+d}%")
    console.print(table)


@app.command()
def states(
    descending: bool = typer.Option(False, "--descending", help="Most expensive first"),
    limit: Optional[int] = typer.Option(None, help="Show only the first N states"),
) -> None:
    """List state cost indices ordered by average multiplier."""
    frame = state_cost_frame(ascending=not descending)
    if limit is not None:
        frame = frame.head(max(0, limit))
    table = Table(title="State Healthcare Cost Indices", show_lines=False)
    for column in ["State", "Name", "Average", "Min", "Max", "Tier"]:
        table.add_column(column, justify="right" if column in {"Average", "Min", "Max"} else "left")
    for _, row in frame.iterrows():
        table.add_row(
            row["state"],
            row["state_name"],
            f"{row['average_cost_index']:.2f}",
            f"{row['min_cost_index']:.2f}",
            f"{row['max_cost_index']:.2f}",
            row["tier"],
        )
    console.print(table)


@app.command()
def compare(
    expected_cost: float = typer.Argument(..., help="Expected annual medical cost (national)"),
    plan_a: str = typer.Option("silver", "--plan-a", help="Preset name or NAME:DEDUCTIBLE:OOP_MAX"),
    plan_b: str = typer.Option("gold", "--plan-b", help="Preset name or NAME:DEDUCTIBLE:OOP_MAX"),
    premium_a: float = typer.Option(0.0, "--premium-a", help="Monthly premium for plan A"),
    premium_b: float = typer.Option(0.0, "--premium-b", help="Monthly premium for plan B"),
    iterations: int = typer.Option(DEFAULT_ITERATIONS, help="Number of simulated years"),
    seed: Optional[int] = typer.Option(None, help="Shared random seed for both plans"),
    state: Optional[str] = typer.Option(None, help="Two-letter state code"),
    zip_code: Optional[str] = typer.Option(None, "--zip", help="ZIP code or ZIP-3 prefix"),
) -> None:
    """Compare two plans on the same simulated expenses."""
    option_a = _resolve_plan(plan_a, premium_a)
    option_b = _resolve_plan(plan_b, premium_b)
    try:
        comparison = CostRiskEngine().compare_plans(
            expected_cost,
            option_a,
            option_b,
            iterations=iterations,
            seed=seed,
            state_code=state,
            zip_code=zip_code,
        )
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    table = Table(title="Plan Comparison", show_lines=False)
    table.add_column("Metric")
    table.add_column(comparison.plan_a.name, justify="right")
    table.add_column(comparison.plan_b.name, justify="right")
    result_a = comparison.plan_a_analysis.result
    result_b = comparison.plan_b_analysis.result
    table.add_row(
        "Deductible",
        format_currency(comparison.plan_a.deductible),
        format_currency(comparison.plan_b.deductible),
    )
    table.add_row(
        "OOP Max",
        format_currency(comparison.plan_a.out_of_pocket_max),
        format_currency(comparison.plan_b.out_of_pocket_max),
    )
    table.add_row("Mean OOP", format_currency(result_a.mean), format_currency(result_b.mean))
    table.add_row(
        "P90 OOP",
        format_currency(result_a.percentiles.p90),
        format_currency(result_b.percentiles.p90),
    )
    table.add_row(
        "Hit OOP Max",
        f"{result_a.probability_hitting_oop_max}%",
        f"{result_b.probability_hitting_oop_max}%",
    )
    console.print(table)
    console.print(
        f"\nExpected total cost difference (A - B): "
        f"{format_currency(comparison.expected_total_cost_difference)}"
    )
    console.print(f"Better for low utilization: {comparison.better_plan_for_low_utilization}")
    console.print(f"Better for high utilization: {comparison.better_plan_for_high_utilization}")
    console.print(f"Break-even annual cost: {format_currency(comparison.break_even_cost)}")


def main() -> None:
    """Entry point for CLI execution."""
    app()


if __name__ == "__main__":
    main()
