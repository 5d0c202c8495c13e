"""Progress monitor for long-running CFD simulation cases."""

from __future__ import annotations

__version__ = "0.3.0"
