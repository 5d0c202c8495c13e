"""Incremental mean of wall-clock seconds per simulated step."""

from __future__ import annotations


class RunningAverage:
    """Cumulative average that does not keep the sample history.

    Each update applies ``mean' = (mean * n + sample) / (n + 1)``, which is
    the plain arithmetic mean of every sample seen so far.
    """

    __slots__ = ("_mean", "_count")

    def __init__(self) -> None:
        self._mean = 0.0
        self._count = 0

    def update(self, sample: float) -> "RunningAverage":
        """Fold one sample into the mean."""
        n = self._count
        self._count += 1
        self._mean = (self._mean * n + float(sample)) / self._count
        return self

    def value(self) -> float:
        """Current mean, 0.0 before any sample."""
        return self._mean

    @property
    def sample_count(self) -> int:
        """Number of samples folded in so far."""
        return self._count

    def __repr__(self) -> str:
        return f"RunningAverage(mean={self._mean!r}, sample_count={self._count})"
