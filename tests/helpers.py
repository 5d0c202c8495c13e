from __future__ import annotations

from pathlib import Path
from typing import Iterable, List


def log_line(step: int, time_value: float) -> str:
    return f"TimeStep   {step}: Time   {time_value:.4e}"


def write_log(root: Path, case: str, log: str, lines: Iterable[str]) -> Path:
    path = root / case / log
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        for line in lines:
            fh.write(line + "\n")
    return path


def append_log(path: Path, lines: Iterable[str]) -> None:
    with path.open("a", encoding="utf-8") as fh:
        for line in lines:
            fh.write(line + "\n")


class ScriptedExtractor:
    """Returns queued lines in order; exceptions in the queue are raised."""

    def __init__(self, results: Iterable[object]) -> None:
        self.results: List[object] = list(results)
        self.paths: List[Path] = []

    def last_matching_line(self, path: Path) -> str:
        self.paths.append(path)
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return str(result)


class FakeClock:
    def __init__(self, values: Iterable[float]) -> None:
        self.values = list(values)

    def __call__(self) -> float:
        return self.values.pop(0)
