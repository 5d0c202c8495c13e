"""Static description of a monitored simulation case."""

from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class CaseSpec(BaseModel):
    """Simulation case as listed in the monitor configuration."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Case identifier and sub-directory under the root path")
    duration: int = Field(
        ...,
        gt=0,
        description="Target simulated duration; multiplied by the sampling rate to get the step count.",
    )
    log: str = Field(..., description="Log file name inside the case directory")

    @model_validator(mode="before")
    @classmethod
    def _accept_triple(cls, value: Any) -> Any:
        """Allow ``[name, duration, log]`` entries in YAML."""
        if isinstance(value, (list, tuple)):
            if len(value) != 3:
                raise ValueError("case entries must be [name, duration, log]")
            name, duration, log = value
            return {"name": name, "duration": duration, "log": log}
        return value

    @field_validator("name", "log", mode="before")
    @classmethod
    def _strip_text(cls, value: Any) -> str:
        if value is None:
            raise ValueError("value cannot be null")
        text = str(value).strip()
        if not text:
            raise ValueError("value cannot be empty")
        return text


DEFAULT_CASES: List[CaseSpec] = [
    CaseSpec(name="zen30az045_OS2", duration=1_200, log="solve-672_14.out"),
    CaseSpec(name="zen30az090_OS2", duration=1_200, log="solve-672_16.out"),
    CaseSpec(name="zen30az045_OS7", duration=900, log="solve-672_15.out"),
    CaseSpec(name="zen30az090_OS7", duration=900, log="solve-672_17.out"),
    CaseSpec(name="zen30az135_OS7", duration=900, log="solve-672_18.out"),
    CaseSpec(name="zen30az045_CD12", duration=900, log="solve-672_19.out"),
    CaseSpec(name="zen30az090_CD12", duration=900, log="solve-672_20.out"),
    CaseSpec(name="zen30az180_CD12", duration=900, log="solve-672_21.out"),
]
