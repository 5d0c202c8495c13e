"""Strategies for fetching the latest progress line from a case log.

Two interchangeable implementations are provided:

``DirectScanExtractor``
    Reads the file backwards in blocks and stops at the first line that
    contains the observation key. No external tools are involved.

``GrepTailExtractor``
    Runs ``grep KEY <log> | tail -n1`` exactly like a shell user would.
    Useful on filesystems where the external tools are faster than Python
    at skipping through very large logs.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Protocol

from .errors import ExtractionError, PatternMismatchError
from .observation import OBSERVATION_KEY

LOGGER = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class LogExtractor(Protocol):
    """Return the last line of ``path`` containing the observation key."""

    def last_matching_line(self, path: Path) -> str:
        ...


def _iter_lines_reversed(handle: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    handle.seek(0, os.SEEK_END)
    position = handle.tell()
    remainder = b""
    while position > 0:
        read_size = min(chunk_size, position)
        position -= read_size
        handle.seek(position)
        lines = (handle.read(read_size) + remainder).split(b"\n")
        # The first piece may continue in the previous block.
        remainder = lines.pop(0)
        yield from reversed(lines)
    yield remainder


class DirectScanExtractor:
    """In-process reverse scan of the log file."""

    def __init__(self, key: str = OBSERVATION_KEY, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.key = key
        self.chunk_size = chunk_size
        self._needle = key.encode("utf-8")

    def last_matching_line(self, path: Path) -> str:
        path = Path(path)
        try:
            with path.open("rb") as handle:
                for raw_line in _iter_lines_reversed(handle, self.chunk_size):
                    if self._needle in raw_line:
                        return raw_line.decode("utf-8", errors="replace").rstrip("\r")
        except OSError as exc:
            raise ExtractionError(f"Unable to read log: {exc.strerror or exc}", path=path) from exc
        raise PatternMismatchError(f"No line containing {self.key!r}", path=path)

    def __repr__(self) -> str:
        return f"DirectScanExtractor(key={self.key!r})"


class GrepTailExtractor:
    """Pipe ``grep`` into ``tail -n1`` and return the result."""

    def __init__(
        self,
        key: str = OBSERVATION_KEY,
        *,
        grep: str = "grep",
        tail: str = "tail",
        timeout: Optional[float] = None,
    ) -> None:
        self.key = key
        self.grep = grep
        self.tail = tail
        self.timeout = timeout

    def last_matching_line(self, path: Path) -> str:
        path = Path(path)
        try:
            grep_proc = subprocess.Popen(
                [self.grep, self.key, str(path)],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as exc:
            raise ExtractionError(f"failed to call {self.grep}: {exc}", path=path) from exc
        try:
            tail_proc = subprocess.Popen(
                [self.tail, "-n1"],
                stdin=grep_proc.stdout,
                stdout=subprocess.PIPE,
            )
        except OSError as exc:
            grep_proc.kill()
            grep_proc.wait()
            raise ExtractionError(f"failed to call {self.tail}: {exc}", path=path) from exc
        # Let grep receive SIGPIPE if tail exits early.
        grep_proc.stdout.close()

        try:
            output, _ = tail_proc.communicate(timeout=self.timeout)
            grep_proc.wait(timeout=self.timeout)
        except subprocess.TimeoutExpired as exc:
            for proc in (grep_proc, tail_proc):
                proc.kill()
                proc.wait()
            grep_proc.stderr.close()
            tail_proc.stdout.close()
            raise ExtractionError(f"{self.grep} {self.key} timed out after {self.timeout}s", path=path) from exc
        with grep_proc.stderr:
            grep_err = grep_proc.stderr.read()

        LOGGER.debug("grep exit=%s tail exit=%s for %s", grep_proc.returncode, tail_proc.returncode, path)
        if grep_proc.returncode == 1:
            raise PatternMismatchError(f"No line containing {self.key!r}", path=path)
        if grep_proc.returncode != 0:
            detail = grep_err.decode("utf-8", errors="replace").strip()
            raise ExtractionError(f"grep {self.key} failed: {detail or grep_proc.returncode}", path=path)
        if tail_proc.returncode != 0:
            raise ExtractionError(f"tail exited with status {tail_proc.returncode}", path=path)
        return output.decode("utf-8", errors="replace").rstrip("\r\n")

    def __repr__(self) -> str:
        return f"GrepTailExtractor(key={self.key!r}, timeout={self.timeout!r})"


EXTRACTORS = {
    "direct": DirectScanExtractor,
    "grep": GrepTailExtractor,
}


def build_extractor(name: str, **kwargs) -> LogExtractor:
    """Instantiate an extractor by its configuration name."""
    try:
        factory = EXTRACTORS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown extractor {name!r}; choose from: {', '.join(sorted(EXTRACTORS))}"
        ) from None
    return factory(**kwargs)


__all__ = [
    "DirectScanExtractor",
    "EXTRACTORS",
    "GrepTailExtractor",
    "LogExtractor",
    "build_extractor",
]
