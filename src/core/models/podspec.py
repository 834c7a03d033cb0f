"""
Podspec model — the CocoaPods package manifest, as JSON.

This is the shape produced by ``pod ipc spec <Name>.podspec`` (or a
checked-in ``<Name>.podspec.json``).  Only the keys the XcodeGen
translation needs are modeled; everything else is ignored.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.core.errors import PrebuildKitError


class PodspecError(PrebuildKitError):
    """Raised when a podspec can't be read or doesn't validate."""


def arrayize(value: Any) -> list[Any]:
    """Ensure the value is a list.

    CocoaPods lets most list attributes be given as a single string.
    """
    if isinstance(value, list):
        return value
    if value is None:
        return []
    return [value]


class Podspec(BaseModel):
    """A read-only package manifest."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    version: str
    platforms: dict[str, str] = Field(default_factory=dict)
    dependencies: dict[str, Any] = Field(default_factory=dict)

    source_files: list[str] = Field(default_factory=list)
    exclude_files: list[str] = Field(default_factory=list)
    compiler_flags: str | None = None
    frameworks: list[str] = Field(default_factory=list)

    pod_target_xcconfig: dict[str, str] | None = None
    info_plist: dict[str, Any] | None = None

    @field_validator("source_files", "exclude_files", "frameworks", mode="before")
    @classmethod
    def _arrayize(cls, value: Any) -> list[Any]:
        return arrayize(value)

    @field_validator("platforms", "dependencies", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def dependency_names(self) -> list[str]:
        """Declared dependency names, in declaration order."""
        return list(self.dependencies.keys())

    @classmethod
    def from_dict(cls, data: Any) -> Podspec:
        """Validate raw podspec JSON, raising PodspecError on bad input."""
        if not isinstance(data, dict):
            raise PodspecError(
                f"Expected a podspec JSON object, got {type(data).__name__}"
            )
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise PodspecError(f"Invalid podspec '{data.get('name', '?')}': {e}") from e
