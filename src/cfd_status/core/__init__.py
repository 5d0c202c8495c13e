"""Case tracking, log observation and ETA computation."""

from __future__ import annotations

from .averaging import RunningAverage
from .errors import (
    ExtractionError,
    ObservationError,
    ParseError,
    PatternMismatchError,
    StepRegressionError,
)
from .extractors import DirectScanExtractor, GrepTailExtractor, LogExtractor, build_extractor
from .monitor import Monitor
from .observation import Observation, parse_observation
from .tracker import CaseTracker

__all__ = [
    "CaseTracker",
    "DirectScanExtractor",
    "ExtractionError",
    "GrepTailExtractor",
    "LogExtractor",
    "Monitor",
    "Observation",
    "ObservationError",
    "ParseError",
    "PatternMismatchError",
    "RunningAverage",
    "StepRegressionError",
    "build_extractor",
    "parse_observation",
]
