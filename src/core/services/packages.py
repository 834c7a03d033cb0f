"""
Package discovery — find monorepo packages and read their podspecs.

A package is any directory under the packages dir with a
``package.json``.  Its podspec is looked up in the iOS subdirectory
first, then the package root.  Ruby podspecs are converted to JSON by
CocoaPods (``pod ipc spec``); ``.podspec.json`` files are read as-is.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from src.core.models.package import Package
from src.core.models.podspec import Podspec, PodspecError
from src.core.services.process import ToolNotFoundError, spawn

logger = logging.getLogger(__name__)

IOS_SUBDIRECTORY = "ios"


def find_podspec_file(package_dir: Path, ios_subdirectory: str = IOS_SUBDIRECTORY) -> Path | None:
    """Return the package's podspec file, or None if it has no iOS code."""
    for directory in (package_dir / ios_subdirectory, package_dir):
        if not directory.is_dir():
            continue
        for pattern in ("*.podspec.json", "*.podspec"):
            matches = sorted(directory.glob(pattern))
            if matches:
                return matches[0]
    return None


def read_package(package_dir: Path) -> Package | None:
    """Build a Package from a directory, or None if it isn't a package."""
    manifest = package_dir / "package.json"
    if not manifest.is_file():
        return None

    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Skipping %s: unreadable package.json (%s)", package_dir, e)
        return None

    name = data.get("name") if isinstance(data, dict) else None
    if not name:
        logger.warning("Skipping %s: package.json has no name", package_dir)
        return None

    # Podspec source globs are relative to the podspec, so that's where
    # the Xcode project has to be generated.
    podspec_path = find_podspec_file(package_dir)
    ios_subdirectory = IOS_SUBDIRECTORY
    if podspec_path is not None:
        ios_subdirectory = podspec_path.parent.relative_to(package_dir).as_posix()
        podspec_path = podspec_path.resolve()

    return Package(
        package_name=name,
        path=package_dir.resolve(),
        version=str(data.get("version", "")),
        ios_subdirectory=ios_subdirectory,
        podspec_path=podspec_path,
    )


def discover_packages(packages_dir: Path) -> list[Package]:
    """All packages directly under ``packages_dir`` (and one scope level deep).

    Scoped packages live in ``@scope/<name>`` directories.
    """
    if not packages_dir.is_dir():
        logger.debug("Packages dir %s does not exist", packages_dir)
        return []

    packages: list[Package] = []
    for child in sorted(packages_dir.iterdir()):
        if not child.is_dir():
            continue
        if child.name.startswith("@"):
            candidates = sorted(p for p in child.iterdir() if p.is_dir())
        else:
            candidates = [child]
        for candidate in candidates:
            pkg = read_package(candidate)
            if pkg is not None:
                packages.append(pkg)

    logger.debug("Discovered %d packages in %s", len(packages), packages_dir)
    return packages


def find_package(packages: list[Package], package_name: str) -> Package | None:
    """Look up a package by its npm name."""
    for pkg in packages:
        if pkg.package_name == package_name:
            return pkg
    return None


def find_package_by_pod_name(packages: list[Package], pod_name: str) -> Package | None:
    """Look up a package by the name of the pod it ships."""
    for pkg in packages:
        if pkg.podspec_name == pod_name:
            return pkg
    return None


async def load_podspec(path: Path) -> Podspec:
    """Read a podspec into the Podspec model.

    Raises:
        PodspecError: The file can't be read, converted or validated.
        ProcessError: ``pod ipc spec`` exited non-zero.
    """
    if path.name.endswith(".podspec.json"):
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise PodspecError(f"Cannot read {path}: {e}") from e
    else:
        try:
            result = await spawn(["pod", "ipc", "spec", str(path)], capture=True)
        except ToolNotFoundError as e:
            raise PodspecError(
                f"Cannot convert {path.name}: CocoaPods ('pod') is not installed"
            ) from e
        raw = result.stdout

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise PodspecError(f"Invalid podspec JSON for {path}: {e}") from e

    return Podspec.from_dict(data)


async def get_podspec(pkg: Package) -> Podspec:
    """Load the podspec of a package that ships one."""
    if pkg.podspec_path is None:
        raise PodspecError(f"Package '{pkg.package_name}' has no podspec")
    return await load_podspec(pkg.podspec_path)
