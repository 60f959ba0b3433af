"""Report generation utilities."""

from __future__ import annotations

import json
import logging
import zipfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, Optional

import numpy as np
import pandas as pd

from ..config import OUTPUT_ROOT
from ..core.monte_carlo import SimulationOutcomes, build_percentile_table
from ..models.analysis import PlanComparison, SimulationAnalysis
from ..models.simulation import SimulationResult

LOGGER = logging.getLogger(__name__)


def _json_default(obj: object) -> object:
    """JSON serializer that handles numpy/pandas/path objects gracefully."""
    if isinstance(obj, (np.integer,)):
        return int(obj)
    if isinstance(obj, (np.floating,)):
        return float(obj)
    if isinstance(obj, (datetime,)):
        return obj.isoformat()
    if isinstance(obj, pd.Timestamp):
        return obj.isoformat()
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, set):
        return list(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class ReportGenerator:
    """Persist simulation outputs to disk (JSON summaries, CSV tables, bundles)."""

    def __init__(
        self,
        output_dir: str | Path = OUTPUT_ROOT,
        *,
        timestamped: bool = False,
        run_label: Optional[str] = None,
    ) -> None:
        base_dir = Path(output_dir)
        base_dir.mkdir(parents=True, exist_ok=True)
        if timestamped:
            run_label = run_label or datetime.now(timezone.utc).strftime("run_%Y%m%d_%H%M%S")
            self.output_dir = base_dir / run_label
        else:
            self.output_dir = base_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.base_dir = base_dir
        self.run_label = self.output_dir.name

    # ------------------------------------------------------------------ helpers
    def _write_json(self, payload: Dict[str, object], filename: str) -> Path:
        path = self.output_dir / filename
        with path.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, default=_json_default)
        return path

    def _write_table(self, table: pd.DataFrame, filename: str) -> Path:
        path = self.output_dir / filename
        table.to_csv(path, index=False)
        return path

    def _create_archive(self, files: Iterable[Path], filename: str = "analysis_bundle.zip") -> Path:
        archive_path = self.output_dir / filename
        with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for file_path in files:
                file_path = Path(file_path)
                if not file_path.exists() or file_path == archive_path:
                    continue
                arcname = file_path.relative_to(self.output_dir)
                zf.write(file_path, arcname=str(arcname))
        return archive_path

    # ------------------------------------------------------------------- exports
    def export_summary(self, result: SimulationResult, filename: str = "summary.json") -> Path:
        """Write the flat result message as JSON."""
        return self._write_json(result.to_message(), filename)

    def export_percentiles(
        self,
        result: SimulationResult,
        outcomes: Optional[SimulationOutcomes] = None,
        filename: str = "percentiles.csv",
    ) -> Path:
        """Write a percentile ladder; the full 1-99 ladder when raw outcomes are given."""
        if outcomes is not None:
            table = build_percentile_table(outcomes.out_of_pocket)
        else:
            table = pd.DataFrame(
                [
                    {"percentile": rank, "out_of_pocket": value}
                    for rank, value in result.percentiles.by_rank().items()
                ]
            )
        return self._write_table(table, filename)

    def export_histogram(self, analysis: SimulationAnalysis, filename: str = "histogram.csv") -> Path:
        table = pd.DataFrame([bucket.model_dump() for bucket in analysis.histogram])
        return self._write_table(table, filename)

    def export_metadata(self, metadata: Dict[str, object], filename: str = "metadata.json") -> Path:
        return self._write_json(metadata, filename)

    def export_comparison(
        self, comparison: PlanComparison, filename: str = "plan_comparison.csv"
    ) -> Path:
        """Write a side-by-side table of two analysed plans."""
        rows = []
        for plan, analysis in (
            (comparison.plan_a, comparison.plan_a_analysis),
            (comparison.plan_b, comparison.plan_b_analysis),
        ):
            result = analysis.result
            rows.append(
                {
                    "plan": plan.name,
                    "deductible": plan.deductible,
                    "out_of_pocket_max": plan.out_of_pocket_max,
                    "annual_premium": plan.annual_premium,
                    "mean_out_of_pocket": result.mean,
                    "p90_out_of_pocket": result.percentiles.p90,
                    "probability_hitting_oop_max": result.probability_hitting_oop_max,
                    "expected_total_cost": result.mean + plan.annual_premium,
                }
            )
        return self._write_table(pd.DataFrame(rows), filename)

    # ----------------------------------------------------------- comprehensive
    def export_analysis(
        self,
        analysis: SimulationAnalysis,
        *,
        outcomes: Optional[SimulationOutcomes] = None,
        analysis_metadata: Optional[Dict[str, object]] = None,
        archive: bool = False,
    ) -> Dict[str, Path]:
        """Export every artefact of one analysis and return their paths."""
        exported: Dict[str, Path] = {
            "summary": self.export_summary(analysis.result),
            "percentiles": self.export_percentiles(analysis.result, outcomes),
            "histogram": self.export_histogram(analysis),
        }
        metadata: Dict[str, object] = {
            "input_parameters": analysis.input_parameters,
            "interpretation": analysis.interpretation.model_dump(mode="json"),
            "validation": analysis.validation,
        }
        if analysis_metadata:
            metadata.update(analysis_metadata)
        exported["metadata"] = self.export_metadata(metadata)

        if archive:
            exported["archive"] = self._create_archive(exported.values())

        LOGGER.info("Exported %d report artefacts to %s", len(exported), self.output_dir)
        return exported


__all__ = ["ReportGenerator"]
