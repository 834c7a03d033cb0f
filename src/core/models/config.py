"""
Prebuild configuration model — loaded from prebuilds.yml.

Describes where things live in the monorepo (iOS app, tools, packages),
how to invoke XcodeGen, and which packages get prebuilt frameworks.
Every field has a default, so an empty (or missing) file is valid.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class XcodeGenConfig(BaseModel):
    """How the XcodeGen binary is invoked."""

    # The binary ships with the tools workspace, so it's run through yarn.
    command: list[str] = Field(
        default_factory=lambda: ["yarn", "--silent", "run", "xcodegen"]
    )
    minimum_version: str = "2.18.0"


class BuildFlavor(BaseModel):
    """One xcodebuild slice that goes into the final .xcframework."""

    configuration: str = "Release"
    sdk: str
    archs: list[str] = Field(default_factory=list)


def _default_flavors() -> list[BuildFlavor]:
    return [
        BuildFlavor(sdk="iphoneos", archs=["arm64"]),
        BuildFlavor(sdk="iphonesimulator", archs=["x86_64", "arm64"]),
    ]


class PrebuildSettings(BaseModel):
    """Which packages are prebuilt, and for which slices."""

    packages: list[str] = Field(default_factory=list)
    flavors: list[BuildFlavor] = Field(default_factory=_default_flavors)


class HeadersConfig(BaseModel):
    """Extra pods whose public headers are always searchable."""

    extra_pods: list[str] = Field(default_factory=list)


class PrebuildConfig(BaseModel):
    """Root configuration — the canonical description of the workspace."""

    ios_dir: str = "ios"
    tools_dir: str = "tools"
    packages_dir: str = "packages"

    xcodegen: XcodeGenConfig = Field(default_factory=XcodeGenConfig)
    prebuild: PrebuildSettings = Field(default_factory=PrebuildSettings)
    headers: HeadersConfig = Field(default_factory=HeadersConfig)

    def ios_path(self, root: Path) -> Path:
        return (root / self.ios_dir).resolve()

    def tools_path(self, root: Path) -> Path:
        return (root / self.tools_dir).resolve()

    def packages_path(self, root: Path) -> Path:
        return (root / self.packages_dir).resolve()

    def pods_public_headers_path(self, root: Path) -> Path:
        """``<ios>/Pods/Headers/Public`` — where CocoaPods links public headers."""
        return self.ios_path(root) / "Pods" / "Headers" / "Public"
