"""Polling loop that refreshes every case and renders the status table."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from ..models.settings import MonitorSettings
from ..utils.formatting import format_header, format_timestamp
from .errors import ObservationError
from .extractors import LogExtractor
from .tracker import CaseTracker

LOGGER = logging.getLogger(__name__)

FAILURE_POLICIES = ("abort", "isolate")


class Monitor:
    """Drive a fixed, ordered list of :class:`CaseTracker` objects.

    With the ``abort`` policy the first failing case stops the monitor and
    the error propagates to the caller. With ``isolate`` the failure is kept
    on the tracker, shown on its row, and the other cases keep updating.
    """

    def __init__(
        self,
        trackers: Sequence[CaseTracker],
        *,
        update_time_seconds: int,
        failure_policy: str = "abort",
    ) -> None:
        if failure_policy not in FAILURE_POLICIES:
            raise ValueError(f"Unsupported failure policy: {failure_policy}")
        if update_time_seconds <= 0:
            raise ValueError("update_time_seconds must be positive")
        self.trackers: List[CaseTracker] = list(trackers)
        self.update_time_seconds = update_time_seconds
        self.failure_policy = failure_policy

    @classmethod
    def from_settings(
        cls,
        settings: MonitorSettings,
        *,
        extractor: Optional[LogExtractor] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> "Monitor":
        trackers = [
            CaseTracker.from_settings(case, settings, extractor=extractor, clock=clock)
            for case in settings.cases
        ]
        return cls(
            trackers,
            update_time_seconds=settings.update_time_seconds,
            failure_policy=settings.failure_policy,
        )

    # ------------------------------------------------------------------ polling
    def poll(self) -> List[CaseTracker]:
        """Refresh every case in order; return the trackers that failed."""
        failed: List[CaseTracker] = []
        for tracker in self.trackers:
            try:
                tracker.refresh()
            except ObservationError as exc:
                if self.failure_policy == "abort":
                    LOGGER.error("Stopping monitor: %s", exc)
                    raise
                LOGGER.warning("Skipping %s this cycle: %s", tracker.name, exc)
                failed.append(tracker)
        return failed

    # ------------------------------------------------------------------ display
    def rows(self, now: Optional[datetime] = None) -> List[str]:
        """One status or error row per case, in configured order."""
        now = now or datetime.now()
        rows = []
        for tracker in self.trackers:
            if tracker.last_error is not None or not tracker.has_observation:
                rows.append(tracker.error_line())
            else:
                rows.append(tracker.status_line(now))
        return rows

    def render(self, now: Optional[datetime] = None) -> str:
        """Full screen text: timestamp, header and case rows."""
        now = now or datetime.now()
        lines = [format_timestamp(now), format_header()]
        lines.extend(self.rows(now))
        return "\n".join(lines)

    # ------------------------------------------------------------------ loop
    def run(
        self,
        display: Callable[[str], None] = print,
        *,
        max_cycles: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> int:
        """Poll, render and sleep until an error aborts or ``max_cycles`` is reached.

        Returns the number of completed cycles.
        """
        LOGGER.info(
            "Monitoring %d case(s) every %ss (policy=%s)",
            len(self.trackers),
            self.update_time_seconds,
            self.failure_policy,
        )
        completed = 0
        while True:
            self.poll()
            display(self.render())
            completed += 1
            if max_cycles is not None and completed >= max_cycles:
                return completed
            sleep(self.update_time_seconds)


__all__ = ["FAILURE_POLICIES", "Monitor"]
