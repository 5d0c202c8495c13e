import tempfile
import textwrap
import unittest
from pathlib import Path

from typer.testing import CliRunner

from cfd_status.ui.cli import app

from helpers import log_line, write_log


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.runner = CliRunner()
        self.config = self.root / "cases.yaml"
        self.config.write_text(
            textwrap.dedent(
                f"""
                root_dir: {self.root}
                cases:
                  - [caseA, 10, a.out]
                  - [caseB, 10, b.out]
                """
            ),
            encoding="utf-8",
        )
        write_log(self.root, "caseA", "a.out", [log_line(20, 1.0)])
        write_log(self.root, "caseB", "b.out", [log_line(40, 2.0)])

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_watch_once_renders_table(self) -> None:
        result = self.runner.invoke(app, ["watch", "--config", str(self.config), "--once"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("I.[s]", result.stdout)
        self.assertIn("caseA", result.stdout)
        self.assertIn("caseB", result.stdout)

    def test_watch_aborts_on_missing_log(self) -> None:
        (self.root / "caseB" / "b.out").unlink()
        result = self.runner.invoke(app, ["watch", "--config", str(self.config), "--once"])
        self.assertEqual(result.exit_code, 1)

    def test_watch_isolate_keeps_running(self) -> None:
        (self.root / "caseB" / "b.out").unlink()
        result = self.runner.invoke(
            app, ["watch", "--config", str(self.config), "--once", "--isolate-failures"]
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("ERROR", result.stdout)

    def test_check_reports_failures(self) -> None:
        ok = self.runner.invoke(app, ["check", "-c", str(self.config)])
        self.assertEqual(ok.exit_code, 0, ok.output)
        (self.root / "caseA" / "a.out").unlink()
        failed = self.runner.invoke(app, ["check", "-c", str(self.config)])
        self.assertEqual(failed.exit_code, 1)

    def test_cases_lists_configuration(self) -> None:
        result = self.runner.invoke(app, ["cases", "-c", str(self.config)])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("caseA", result.stdout)
        self.assertIn("20 Hz", result.stdout)

    def test_missing_config_exits_with_code_2(self) -> None:
        result = self.runner.invoke(app, ["cases", "-c", str(self.root / "missing.yaml")])
        self.assertEqual(result.exit_code, 2)

    def test_invalid_override_exits_with_code_2(self) -> None:
        result = self.runner.invoke(app, ["cases", "-c", str(self.config), "--interval", "0"])
        self.assertEqual(result.exit_code, 2)


if __name__ == "__main__":
    unittest.main()
