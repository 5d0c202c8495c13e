"""Monitor settings and YAML configuration loading."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .case import DEFAULT_CASES, CaseSpec

LOGGER = logging.getLogger(__name__)

DEFAULT_ROOT = Path("/shared")
DEFAULT_UPDATE_TIME_SECONDS = 180
DEFAULT_SAMPLING_RATE_HZ = 20

ROOT_ENV = "CFD_STATUS_ROOT"
INTERVAL_ENV = "CFD_STATUS_INTERVAL"


class ConfigError(Exception):
    """Raised when the monitor configuration cannot be loaded."""


class MonitorSettings(BaseModel):
    """Process-wide monitor configuration."""

    root_dir: Path = Field(DEFAULT_ROOT, description="Directory holding one sub-directory per case")
    update_time_seconds: int = Field(
        DEFAULT_UPDATE_TIME_SECONDS, gt=0, description="Seconds between two status updates"
    )
    sampling_rate_hz: int = Field(
        DEFAULT_SAMPLING_RATE_HZ, gt=0, description="Simulation sampling rate (steps per duration unit)"
    )
    extractor: Literal["direct", "grep"] = Field(
        "direct", description="How the latest TimeStep line is fetched from a log."
    )
    extractor_timeout: Optional[float] = Field(
        None, gt=0, description="Timeout in seconds for the grep extractor (None waits forever)."
    )
    failure_policy: Literal["abort", "isolate"] = Field(
        "abort",
        description=(
            "'abort' stops the monitor on the first failing case; "
            "'isolate' reports the error on that case's row and keeps polling."
        ),
    )
    elapsed_mode: Literal["nominal", "measured"] = Field(
        "nominal",
        description=(
            "'nominal' assumes a full update interval elapsed between observations; "
            "'measured' uses the wall-clock time actually elapsed."
        ),
    )
    cases: List[CaseSpec] = Field(default_factory=list)

    @field_validator("cases")
    @classmethod
    def _unique_names(cls, value: List[CaseSpec]) -> List[CaseSpec]:
        seen = set()
        duplicates = []
        for case in value:
            if case.name in seen:
                duplicates.append(case.name)
            seen.add(case.name)
        if duplicates:
            raise ValueError("Duplicate case names: " + ", ".join(sorted(set(duplicates))))
        return value


def _apply_env_overrides(data: Dict[str, Any], env: Mapping[str, str]) -> Dict[str, Any]:
    root = env.get(ROOT_ENV)
    if root:
        data["root_dir"] = root
    interval = env.get(INTERVAL_ENV)
    if interval:
        data["update_time_seconds"] = interval
    return data


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    return data


def load_settings(
    path: Optional[Path] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
) -> MonitorSettings:
    """Build settings from an optional YAML file plus environment overrides.

    Without a file the built-in case batch is used.
    """
    env = os.environ if env is None else env
    if path is None:
        data: Dict[str, Any] = {"cases": list(DEFAULT_CASES)}
    else:
        data = _read_yaml(Path(path))
    data = _apply_env_overrides(data, env)
    try:
        settings = MonitorSettings.model_validate(data)
    except ValidationError as exc:
        source = path or "built-in defaults"
        raise ConfigError(f"Invalid configuration ({source}):\n{exc}") from exc
    LOGGER.debug(
        "Loaded %d case(s) from %s, root=%s",
        len(settings.cases),
        path or "defaults",
        settings.root_dir,
    )
    return settings


__all__ = ["ConfigError", "MonitorSettings", "load_settings"]
