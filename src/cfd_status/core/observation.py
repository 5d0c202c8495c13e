"""Parsing of ``TimeStep N: Time T`` progress lines."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

from .errors import ParseError, PatternMismatchError

OBSERVATION_KEY = "TimeStep"

# Structural shape of the line; the numeric fields are validated separately so
# that a recognisable line with a corrupt number is reported as a parse error.
OBSERVATION_PATTERN = re.compile(
    r"TimeStep[ \t]+(?P<step>[^\s:]+): Time[ \t]+(?P<time>\S+)"
)
STEP_PATTERN = re.compile(r"\d+")
TIME_PATTERN = re.compile(r"\d+\.\d+[eE][+-]?\d+")


@dataclass(frozen=True)
class Observation:
    """Most recent progress report found in a case log."""

    step: int
    time: float


def parse_observation(line: str) -> Observation:
    """Parse a single log line into an :class:`Observation`."""
    match = OBSERVATION_PATTERN.search(line)
    if match is None:
        raise PatternMismatchError(f"No {OBSERVATION_KEY}/Time match found in {line.strip()!r}")

    step_text = match.group("step")
    time_text = match.group("time")
    if not STEP_PATTERN.fullmatch(step_text):
        raise ParseError(f"Invalid step number {step_text!r}")
    # Only the leading number counts; units or punctuation glued to the
    # exponent are ignored.
    number = TIME_PATTERN.match(time_text)
    if number is None:
        raise ParseError(f"Invalid simulated time {time_text!r}")
    time_text = number.group(0)

    try:
        step = int(step_text)
        time_value = float(time_text)
    except ValueError as exc:
        raise ParseError(f"Failed to parse {match.group(0)!r}: {exc}") from exc
    if not math.isfinite(time_value):
        raise ParseError(f"Simulated time {time_text!r} is not finite")
    return Observation(step=step, time=time_value)


__all__ = ["OBSERVATION_KEY", "OBSERVATION_PATTERN", "Observation", "parse_observation"]
