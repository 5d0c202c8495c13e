import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from cfd_status.core.errors import ExtractionError
from cfd_status.core.monitor import Monitor
from cfd_status.models.case import CaseSpec
from cfd_status.models.settings import MonitorSettings

from helpers import append_log, log_line, write_log

NOW = datetime(2026, 1, 1, 12, 0, 0)
HEADER = "Case".ljust(20) + "%".rjust(8) + "P.[s]".rjust(10) + "I.[s]".rjust(8) + "ETA".rjust(20)


class MonitorTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.cases = [
            CaseSpec(name="case_a", duration=900, log="a.out"),
            CaseSpec(name="case_b", duration=1200, log="b.out"),
        ]
        self.log_a = write_log(self.root, "case_a", "a.out", [log_line(50, 2.5)])
        self.log_b = write_log(self.root, "case_b", "b.out", [log_line(10, 0.5)])

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _monitor(self, **overrides) -> Monitor:
        settings = MonitorSettings(root_dir=self.root, cases=self.cases, **overrides)
        return Monitor.from_settings(settings)

    def test_render_layout(self) -> None:
        monitor = self._monitor()
        monitor.poll()
        lines = monitor.render(NOW).split("\n")
        self.assertEqual(lines[0], "2026-01-01 12:00:00")
        self.assertEqual(lines[1], HEADER)
        self.assertEqual(len(lines), 4)
        self.assertTrue(lines[2].startswith("case_a".ljust(20) + "50".rjust(8)))
        self.assertTrue(lines[3].startswith("case_b".ljust(20) + "10".rjust(8)))

    def test_cases_are_refreshed_in_configured_order(self) -> None:
        monitor = self._monitor()
        self.assertEqual([t.name for t in monitor.trackers], ["case_a", "case_b"])

    def test_abort_policy_propagates_first_failure(self) -> None:
        self.log_b.unlink()
        monitor = self._monitor()
        with self.assertRaises(ExtractionError) as ctx:
            monitor.poll()
        self.assertEqual(ctx.exception.case, "case_b")
        self.assertEqual(monitor.trackers[0].current_step, 50)

    def test_isolate_policy_keeps_polling(self) -> None:
        self.log_a.unlink()
        monitor = self._monitor(failure_policy="isolate")
        failed = monitor.poll()
        self.assertEqual([t.name for t in failed], ["case_a"])
        self.assertEqual(monitor.trackers[1].current_step, 10)
        rows = monitor.rows(NOW)
        self.assertIn("ERROR", rows[0])
        self.assertNotIn("ERROR", rows[1])

    def test_isolated_case_recovers(self) -> None:
        self.log_a.unlink()
        monitor = self._monitor(failure_policy="isolate")
        monitor.poll()
        write_log(self.root, "case_a", "a.out", [log_line(60, 3.0)])
        self.assertEqual(monitor.poll(), [])
        self.assertNotIn("ERROR", monitor.rows(NOW)[0])

    def test_isolated_case_recovers_after_restart(self) -> None:
        monitor = self._monitor(failure_policy="isolate")
        failures = []
        for step in (500, 10, 30, 50):
            write_log(self.root, "case_a", "a.out", [log_line(step, step / 20)])
            failures.append(len(monitor.poll()))
        self.assertEqual(failures, [0, 1, 0, 0])
        tracker = monitor.trackers[0]
        self.assertEqual(tracker.current_step, 50)
        self.assertAlmostEqual(tracker.progress.value(), 180 / 20)
        self.assertNotIn("ERROR", monitor.rows(NOW)[0])

    def test_run_sleeps_between_cycles(self) -> None:
        monitor = self._monitor(update_time_seconds=60)
        screens = []
        sleeps = []

        def _grow(seconds: float) -> None:
            sleeps.append(seconds)
            append_log(self.log_a, [log_line(62, 3.1)])

        completed = monitor.run(screens.append, max_cycles=2, sleep=_grow)
        self.assertEqual(completed, 2)
        self.assertEqual(sleeps, [60])
        self.assertEqual(len(screens), 2)
        self.assertAlmostEqual(monitor.trackers[0].progress.value(), 60 / 12)
        self.assertEqual(monitor.trackers[1].progress.sample_count, 0)

    def test_run_stops_on_error(self) -> None:
        monitor = self._monitor()
        screens = []

        def _remove(_seconds: float) -> None:
            self.log_a.unlink()

        with self.assertRaises(ExtractionError):
            monitor.run(screens.append, max_cycles=5, sleep=_remove)
        self.assertEqual(len(screens), 1)

    def test_rejects_bad_arguments(self) -> None:
        with self.assertRaises(ValueError):
            Monitor([], update_time_seconds=180, failure_policy="retry")
        with self.assertRaises(ValueError):
            Monitor([], update_time_seconds=0)


if __name__ == "__main__":
    unittest.main()
