"""Error types raised while observing simulation logs."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class ObservationError(Exception):
    """Base error for a failed progress observation."""

    def __init__(
        self,
        message: str,
        *,
        case: Optional[str] = None,
        path: Optional[Path] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.case = case
        self.path = path

    def for_case(self, case: str) -> "ObservationError":
        """Attach the case name if the raiser did not know it."""
        if self.case is None:
            self.case = case
        return self

    def __str__(self) -> str:
        prefix = f"[{self.case}] " if self.case else ""
        suffix = f" ({self.path})" if self.path else ""
        return f"{prefix}{self.message}{suffix}"


class ExtractionError(ObservationError):
    """The log file could not be read or the external filter failed."""


class PatternMismatchError(ObservationError):
    """No line matches the ``TimeStep N: Time T`` grammar."""


class ParseError(ObservationError):
    """Matched text could not be converted to a step number or time value."""


class StepRegressionError(ObservationError):
    """The observed step went backwards (log rollover or restarted run)."""

    def __init__(self, previous: int, current: int, **kwargs) -> None:
        super().__init__(
            f"TimeStep decreased from {previous} to {current}; log restarted?",
            **kwargs,
        )
        self.previous = previous
        self.current = current
