"""Per-case progress state and ETA estimation."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Optional

from ..models.case import CaseSpec
from ..models.settings import MonitorSettings
from ..utils.formatting import format_error_row, format_row
from .averaging import RunningAverage
from .errors import ObservationError, StepRegressionError
from .extractors import DirectScanExtractor, LogExtractor, build_extractor
from .observation import Observation, parse_observation

LOGGER = logging.getLogger(__name__)


class CaseTracker:
    """Follow one simulation log and estimate when the run will finish."""

    def __init__(
        self,
        case: CaseSpec,
        *,
        root_dir: Path,
        update_time_seconds: int,
        sampling_rate_hz: int,
        extractor: Optional[LogExtractor] = None,
        elapsed_mode: str = "nominal",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if elapsed_mode not in ("nominal", "measured"):
            raise ValueError(f"Unsupported elapsed mode: {elapsed_mode}")
        self.case = case
        self.root_dir = Path(root_dir)
        self.update_time_seconds = update_time_seconds
        self.sampling_rate_hz = sampling_rate_hz
        self.extractor = extractor or DirectScanExtractor()
        self.elapsed_mode = elapsed_mode
        self._clock = clock

        self.current_step: Optional[int] = None
        self.current_time = 0.0
        self.progress = RunningAverage()
        self.last_error: Optional[ObservationError] = None
        self._step_changed_at: Optional[float] = None

    @classmethod
    def from_settings(
        cls,
        case: CaseSpec,
        settings: MonitorSettings,
        *,
        extractor: Optional[LogExtractor] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> "CaseTracker":
        if extractor is None:
            kwargs = {"timeout": settings.extractor_timeout} if settings.extractor == "grep" else {}
            extractor = build_extractor(settings.extractor, **kwargs)
        return cls(
            case,
            root_dir=settings.root_dir,
            update_time_seconds=settings.update_time_seconds,
            sampling_rate_hz=settings.sampling_rate_hz,
            extractor=extractor,
            elapsed_mode=settings.elapsed_mode,
            clock=clock,
        )

    # ------------------------------------------------------------------ identity
    @property
    def name(self) -> str:
        return self.case.name

    @property
    def log_path(self) -> Path:
        return self.root_dir / self.case.name / self.case.log

    @property
    def total_steps(self) -> int:
        return self.case.duration * self.sampling_rate_hz

    @property
    def has_observation(self) -> bool:
        return self.current_step is not None

    # ------------------------------------------------------------------ update
    def refresh(self) -> "CaseTracker":
        """Read the latest observation from the log and fold it into the state.

        Raises an :class:`ObservationError` subclass when the log cannot be
        read, holds no valid ``TimeStep`` line, or the step went backwards.
        Read and parse failures leave the state unchanged. A step regression
        is reported once: the lower step becomes the new starting point and
        the running average is reset.
        """
        path = self.log_path
        try:
            line = self.extractor.last_matching_line(path)
            observation = parse_observation(line)
        except ObservationError as exc:
            if exc.path is None:
                exc.path = path
            self.last_error = exc.for_case(self.name)
            raise
        self._apply(observation, path)
        self.last_error = None
        return self

    def _apply(self, observation: Observation, path: Path) -> None:
        observed_at = self._clock()
        previous = self.current_step if self.current_step is not None else observation.step
        delta = observation.step - previous
        LOGGER.debug("%s: %s -> step %d (delta %d)", self.name, path, observation.step, delta)

        if delta < 0:
            error = StepRegressionError(previous, observation.step, case=self.name, path=path)
            LOGGER.warning("%s; restarting the average from step %d", error, observation.step)
            # Treat the lower step as a fresh run so the next poll can recover.
            self.progress = RunningAverage()
            self._step_changed_at = observed_at
            self.current_step = observation.step
            self.current_time = observation.time
            self.last_error = error
            raise error
        if delta > 0:
            self.progress.update(self._elapsed_since_last_step(observed_at) / delta)
        if delta > 0 or self._step_changed_at is None:
            self._step_changed_at = observed_at

        self.current_step = observation.step
        self.current_time = observation.time

    def _elapsed_since_last_step(self, observed_at: float) -> float:
        if self.elapsed_mode == "measured" and self._step_changed_at is not None:
            elapsed = observed_at - self._step_changed_at
            if elapsed > 0:
                return elapsed
        return float(self.update_time_seconds)

    # ------------------------------------------------------------------ estimates
    def _require_observation(self) -> int:
        if self.current_step is None:
            raise RuntimeError(f"{self.name}: refresh() must succeed before estimating progress")
        return self.current_step

    def remaining_steps(self) -> int:
        """Steps left until the target duration (never negative)."""
        return max(self.total_steps - self._require_observation(), 0)

    def estimated_seconds_remaining(self) -> int:
        """Average seconds per step times the remaining steps, rounded."""
        return int(round(self.progress.value() * self.remaining_steps()))

    def eta(self, now: Optional[datetime] = None) -> datetime:
        """Wall-clock time at which the run is expected to finish."""
        now = now or datetime.now()
        return now + timedelta(seconds=self.estimated_seconds_remaining())

    def progress_fraction(self) -> float:
        """Share of the target steps already simulated, capped at 1."""
        return min(self._require_observation() / self.total_steps, 1.0)

    # ------------------------------------------------------------------ display
    def status_line(self, now: Optional[datetime] = None) -> str:
        """Fixed-width table row: name, step, time, seconds per step, ETA."""
        step = self._require_observation()
        return format_row(self.name, step, self.current_time, self.progress.value(), self.eta(now))

    def error_line(self) -> str:
        """Table row shown in place of the status when the last refresh failed."""
        return format_error_row(self.name, str(self.last_error.message) if self.last_error else None)

    def __repr__(self) -> str:
        return (
            f"CaseTracker(name={self.name!r}, step={self.current_step!r}, "
            f"time={self.current_time!r}, progress={self.progress!r})"
        )
