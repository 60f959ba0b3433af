import json
import tempfile
import unittest
from pathlib import Path

from typer.testing import CliRunner

from carecost.ui.cli import app


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()

    def test_simulate_prints_statistics(self) -> None:
        result = self.runner.invoke(
            app,
            ["simulate", "5000", "--deductible", "2000", "--oop-max", "8000", "--iterations", "1000", "--seed", "12345"],
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("$2,751", result.output)
        self.assertIn("Risk level:", result.output)

    def test_simulate_exports_reports(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            result = self.runner.invoke(
                app,
                [
                    "simulate", "5000", "--deductible", "2000", "--oop-max", "8000",
                    "--iterations", "500", "--seed", "1", "--coinsurance", "30",
                    "--state", "CA", "--zip", "94103", "--output-dir", tmp,
                ],
            )
            self.assertEqual(result.exit_code, 0, result.output)
            summary = json.loads((Path(tmp) / "summary.json").read_text(encoding="utf-8"))
            self.assertEqual(summary["costMultiplier"], 1.45)
            metadata = json.loads((Path(tmp) / "metadata.json").read_text(encoding="utf-8"))
            self.assertAlmostEqual(metadata["input_parameters"]["coinsurance_rate"], 0.3)
            with (Path(tmp) / "percentiles.csv").open(encoding="utf-8") as fh:
                self.assertEqual(len(fh.read().strip().splitlines()), 100)

    def test_simulate_rejects_inverted_limits(self) -> None:
        result = self.runner.invoke(
            app, ["simulate", "5000", "--deductible", "9000", "--oop-max", "8000", "--seed", "1"]
        )
        self.assertNotEqual(result.exit_code, 0)

    def test_location_command(self) -> None:
        result = self.runner.invoke(app, ["location", "CA", "--zip", "94103"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("1.45", result.output)
        self.assertIn("$7,250", result.output)

        fallback = self.runner.invoke(app, ["location", "ZZ"])
        self.assertEqual(fallback.exit_code, 0, fallback.output)
        self.assertIn("National average", fallback.output)

    def test_states_command(self) -> None:
        result = self.runner.invoke(app, ["states", "--descending", "--limit", "3"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Alaska", result.output)
        self.assertNotIn("Puerto Rico", result.output)

    def test_compare_command(self) -> None:
        result = self.runner.invoke(
            app,
            ["compare", "5000", "--plan-b", "Custom:1000:3000", "--premium-b", "400", "--iterations", "300", "--seed", "3"],
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Silver", result.output)
        self.assertIn("Custom", result.output)
        self.assertIn("Break-even", result.output)

    def test_compare_rejects_zero_iterations(self) -> None:
        result = self.runner.invoke(app, ["compare", "5000", "--iterations", "0", "--seed", "1"])
        self.assertNotEqual(result.exit_code, 0)
        self.assertNotIn("Break-even", result.output)

    def test_compare_rejects_unknown_plan(self) -> None:
        result = self.runner.invoke(app, ["compare", "5000", "--plan-a", "diamond"])
        self.assertNotEqual(result.exit_code, 0)

    def test_log_level_option(self) -> None:
        result = self.runner.invoke(app, ["--log-level", "DEBUG", "location", "TX"])
        self.assertEqual(result.exit_code, 0, result.output)


if __name__ == "__main__":
    unittest.main()
