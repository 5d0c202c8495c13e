"""Configuration data models."""

from __future__ import annotations

from .case import DEFAULT_CASES, CaseSpec
from .settings import ConfigError, MonitorSettings, load_settings

__all__ = ["CaseSpec", "ConfigError", "DEFAULT_CASES", "MonitorSettings", "load_settings"]
