"""
Package and Parcel models — what flows through the publish pipeline.

A Package is a monorepo package that may carry native iOS code.
A Parcel is a package plus the publishing metadata attached to it
for one pipeline run.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

_PODSPEC_SUFFIXES = (".podspec.json", ".podspec")


class Package(BaseModel):
    """A package discovered under the packages directory."""

    model_config = ConfigDict(frozen=True)

    package_name: str
    path: Path
    version: str = ""
    ios_subdirectory: str = "ios"
    podspec_path: Path | None = None   # None = no native iOS code

    @property
    def ios_path(self) -> Path:
        return self.path / self.ios_subdirectory

    @property
    def podspec_name(self) -> str | None:
        """Pod name, taken from the podspec file name."""
        if self.podspec_path is None:
            return None
        name = self.podspec_path.name
        for suffix in _PODSPEC_SUFFIXES:
            if name.endswith(suffix):
                return name[: -len(suffix)]
        return name

    @property
    def is_supported_on_ios(self) -> bool:
        return self.podspec_path is not None

    @property
    def xcframework_path(self) -> Path | None:
        """Where the prebuilt ``<Pod>.xcframework`` lives, if the package has one."""
        if self.podspec_name is None:
            return None
        return self.ios_path / f"{self.podspec_name}.xcframework"


class Parcel(BaseModel):
    """A package plus its publishing metadata."""

    model_config = ConfigDict(frozen=True)

    pkg: Package
    version: str = ""
    tag: str = "latest"
    dry_run: bool = False
    metadata: dict[str, str] = Field(default_factory=dict)
