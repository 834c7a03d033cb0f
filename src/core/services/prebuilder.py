"""
PreBuilder — build prebuilt .xcframework binaries for iOS packages.

Flow per package:
    podspec → project spec → .xcodeproj (xcodegen)
            → one .framework per build flavor (xcodebuild)
            → <Pod>.xcframework (xcodebuild -create-xcframework)
            → remove the temporary project, build dir and Info.plist

Only packages listed under ``prebuild.packages`` in prebuilds.yml are
prebuilt.  A dependency on another prebuilt package is linked against
that package's .xcframework; every other pod dependency is dropped
from the project (its headers stay searchable).
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from src.core import context
from src.core.models.config import BuildFlavor
from src.core.models.package import Package
from src.core.models.podspec import Podspec
from src.core.models.project_spec import Dependency
from src.core.services.packages import find_package_by_pod_name, get_podspec
from src.core.services.process import spawn
from src.core.services.xcodegen.generator import generate_xcode_project
from src.core.services.xcodegen.translator import (
    INFO_PLIST_FILENAME,
    DependencyResolver,
    create_spec_from_podspec,
)

logger = logging.getLogger(__name__)

BUILD_DIRNAME = "prebuild"


def can_prebuild_package(pkg: Package) -> bool:
    """Whether the package is configured for prebuilding and ships a podspec."""
    config = context.get_config()
    return pkg.is_supported_on_ios and pkg.package_name in config.prebuild.packages


def make_dependency_resolver(packages: list[Package]) -> DependencyResolver:
    """Resolve pod names to the .xcframework of prebuildable packages."""

    async def resolve(pod_name: str) -> Dependency | None:
        dependency_pkg = find_package_by_pod_name(packages, pod_name)
        if dependency_pkg is None or not can_prebuild_package(dependency_pkg):
            return None
        return Dependency(
            framework=str(dependency_pkg.xcframework_path),
            link=False,
            embed=False,
        )

    return resolve


async def generate_xcode_project_for_package(
    pkg: Package,
    packages: list[Package],
    podspec: Podspec | None = None,
) -> Path:
    """Generate the package's .xcodeproj next to its podspec."""
    if podspec is None:
        podspec = await get_podspec(pkg)

    config = context.get_config()
    spec = await create_spec_from_podspec(
        podspec,
        make_dependency_resolver(packages),
        extra_header_pods=config.headers.extra_pods,
    )
    return await generate_xcode_project(pkg.ios_path, spec)


async def build_framework(
    xcodeproj_path: Path,
    target: str,
    flavor: BuildFlavor,
    build_dir: Path,
    quiet: bool = True,
) -> Path:
    """Build one flavor of the target; return the built .framework path."""
    output_dir = build_dir / f"{flavor.configuration}-{flavor.sdk}"

    cmd = [
        "xcodebuild",
        "-project", str(xcodeproj_path),
        "-target", target,
        "-configuration", flavor.configuration,
        "-sdk", flavor.sdk,
    ]
    if quiet:
        cmd.append("-quiet")
    if flavor.archs:
        cmd.append(f"ARCHS={' '.join(flavor.archs)}")
    cmd += [
        "ONLY_ACTIVE_ARCH=NO",
        "BUILD_LIBRARY_FOR_DISTRIBUTION=YES",
        f"SYMROOT={build_dir}",
        f"OBJROOT={build_dir / 'obj'}",
        f"CONFIGURATION_BUILD_DIR={output_dir}",
        "build",
    ]

    logger.info("Building %s for %s (%s)", target, flavor.sdk, flavor.configuration)
    await spawn(cmd, cwd=xcodeproj_path.parent)
    return output_dir / f"{target}.framework"


async def create_xcframework(frameworks: list[Path], output: Path) -> Path:
    """Merge per-flavor frameworks into one .xcframework, replacing any old one."""
    if output.exists():
        shutil.rmtree(output)

    cmd = ["xcodebuild", "-create-xcframework"]
    for framework in frameworks:
        cmd += ["-framework", str(framework)]
    cmd += ["-output", str(output)]

    await spawn(cmd, cwd=output.parent)
    return output


async def build_frameworks(
    pkg: Package,
    target: str,
    xcodeproj_path: Path,
    flavors: list[BuildFlavor],
    quiet: bool = True,
) -> Path:
    """Build every flavor and combine them into the package's .xcframework."""
    build_dir = pkg.ios_path / BUILD_DIRNAME
    frameworks = [
        await build_framework(xcodeproj_path, target, flavor, build_dir, quiet=quiet)
        for flavor in flavors
    ]
    output = pkg.xcframework_path
    assert output is not None  # guaranteed by can_prebuild_package
    return await create_xcframework(frameworks, output)


def clean_temporary_files(pkg: Package, xcodeproj_path: Path) -> None:
    """Remove what the prebuild leaves behind apart from the .xcframework."""
    for path in (xcodeproj_path, pkg.ios_path / BUILD_DIRNAME):
        if path.is_dir():
            shutil.rmtree(path)
    (pkg.ios_path / INFO_PLIST_FILENAME).unlink(missing_ok=True)


async def prebuild_package(
    pkg: Package,
    packages: list[Package],
    quiet: bool = True,
) -> Path | None:
    """Prebuild the package's .xcframework.

    Returns:
        Path of the .xcframework, or None if the package isn't prebuildable.
    """
    if not can_prebuild_package(pkg):
        logger.debug("Package '%s' is not prebuildable, skipping", pkg.package_name)
        return None

    podspec = await get_podspec(pkg)
    xcodeproj_path = pkg.ios_path / f"{podspec.name}.xcodeproj"
    flavors = context.get_config().prebuild.flavors

    try:
        xcodeproj_path = await generate_xcode_project_for_package(pkg, packages, podspec)
        return await build_frameworks(pkg, podspec.name, xcodeproj_path, flavors, quiet=quiet)
    finally:
        clean_temporary_files(pkg, xcodeproj_path)


async def clean_frameworks(packages: list[Package]) -> list[Path]:
    """Remove prebuilt .xcframework bundles; return the removed paths."""
    removed: list[Path] = []
    for pkg in packages:
        xcframework = pkg.xcframework_path
        if xcframework is None or not xcframework.exists():
            continue
        shutil.rmtree(xcframework)
        logger.debug("Removed %s", xcframework)
        removed.append(xcframework)
    return removed
