"""Fixed-width formatting for the status table."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
ETA_FORMAT = "%Y-%m-%d %H:%M"

NAME_WIDTH = 20
STEP_WIDTH = 8
TIME_WIDTH = 10
MEAN_WIDTH = 8
ETA_WIDTH = 20


def format_timestamp(moment: datetime) -> str:
    """Render ``moment`` as ``YYYY-MM-DD HH:MM:SS``."""
    return moment.strftime(TIMESTAMP_FORMAT)


def format_header() -> str:
    """Column titles aligned with :func:`format_row`."""
    return (
        f"{'Case':<{NAME_WIDTH}}{'%':>{STEP_WIDTH}}{'P.[s]':>{TIME_WIDTH}}"
        f"{'I.[s]':>{MEAN_WIDTH}}{'ETA':>{ETA_WIDTH}}"
    )


def format_row(name: str, step: int, sim_time: float, seconds_per_step: float, eta: datetime) -> str:
    """One fixed-width status row; the ETA is shown to the minute."""
    return (
        f"{name:<{NAME_WIDTH}}{step:>{STEP_WIDTH}}{sim_time:>{TIME_WIDTH}.2f}"
        f"{seconds_per_step:>{MEAN_WIDTH}.2f}{eta.strftime(ETA_FORMAT):>{ETA_WIDTH}}"
    )


def format_error_row(name: str, message: Optional[str]) -> str:
    """Row shown in place of a case whose last refresh failed."""
    return f"{name:<{NAME_WIDTH}}  ERROR: {message or 'no observation yet'}"


def format_duration(seconds: float) -> str:
    """Render a number of seconds as ``1d 02h03m`` / ``02h03m`` / ``03m``."""
    seconds = max(0, int(round(seconds)))
    days, rem = divmod(seconds, 86_400)
    hours, rem = divmod(rem, 3_600)
    minutes = rem // 60
    if days:
        return f"{days}d {hours:02d}h{minutes:02d}m"
    if hours:
        return f"{hours:02d}h{minutes:02d}m"
    return f"{minutes:02d}m"


__all__ = [
    "ETA_FORMAT",
    "TIMESTAMP_FORMAT",
    "format_duration",
    "format_error_row",
    "format_header",
    "format_row",
    "format_timestamp",
]
