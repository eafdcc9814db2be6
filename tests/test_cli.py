import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path

from drone_sim import cli
from drone_sim.config import FlightMode, load_scenario_config


class TestCommandLine(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.scenario = self.tmp / "scenario.yaml"
        self.assertEqual(cli.main(["scaffold", str(self.scenario), "--scenario", "cli run", "--mode", "line"]), 0)

    def tearDown(self):
        self._tmp.cleanup()

    def test_scaffold_writes_loadable_stub(self):
        config = load_scenario_config(self.scenario)
        self.assertIs(config.flight.mode, FlightMode.LINE)
        self.assertEqual(config.metadata["scenario"], "cli run")

    def test_validate(self):
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            code = cli.main(["validate", str(self.scenario)])
        self.assertEqual(code, 0)
        self.assertIn("Flight: line", stdout.getvalue())
        self.assertIn("Obstacles: 3 nodes, 2 edges", stdout.getvalue())

    def test_missing_configuration(self):
        missing = str(self.tmp / "missing.yaml")
        for command in ("simulate", "validate", "preview"):
            self.assertEqual(cli.main([command, missing]), 2)

    def test_invalid_configuration(self):
        broken = self.tmp / "broken.yaml"
        broken.write_text("flight:\n  mode: spiral\n", encoding="utf-8")
        self.assertEqual(cli.main(["validate", str(broken)]), 1)
        self.assertEqual(cli.main(["simulate", str(broken), "--no-export"]), 1)

    def test_simulate_exports_artefacts(self):
        output = self.tmp / "outputs"
        code = cli.main(
            ["simulate", str(self.scenario), "--output", str(output), "--timestamp", "run", "--frame-rate", "20"]
        )
        self.assertEqual(code, 0)
        run_dir = output / "flight_runs" / "run"
        self.assertTrue((run_dir / "cli_run_path.csv").exists())
        payload = json.loads((run_dir / "run_summary.json").read_text(encoding="utf-8"))
        self.assertEqual(payload["summary"]["run_id"], 1)

    def test_simulate_without_export(self):
        output = self.tmp / "outputs"
        self.assertEqual(cli.main(["simulate", str(self.scenario), "--no-export", "--output", str(output)]), 0)
        self.assertFalse(output.exists())

    def test_preview_writes_planned_path(self):
        target = self.tmp / "preview" / "planned.csv"
        code = cli.main(["preview", str(self.scenario), "--samples", "11", "--output", str(target)])
        self.assertEqual(code, 0)
        self.assertEqual(len(target.read_text(encoding="utf-8").splitlines()), 12)

    def test_preview_rejects_single_sample(self):
        self.assertEqual(cli.main(["preview", str(self.scenario), "--samples", "1"]), 1)


if __name__ == "__main__":
    unittest.main()
