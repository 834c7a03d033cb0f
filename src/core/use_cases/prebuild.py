"""
Prebuild use case — the prebuild/clean steps of the publish pipeline.

Two tasks, usable on their own or inside a larger publish pipeline:

    prebuild_packages   build .xcframework binaries for every
                        prebuildable parcel, one package at a time
    clean_prebuilds     remove them again after publishing

run_prebuild() / run_clean() are the top-level entry points used by
the CLI: load config, discover packages, wrap them in parcels, run
the task through the TaskRunner.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from src.core import context
from src.core.engine.tasks import Task, TaskRunner, TaskRunReport
from src.core.errors import PrebuildKitError
from src.core.models.package import Package, Parcel
from src.core.persistence.state_file import default_backup_path
from src.core.services.packages import discover_packages
from src.core.services.prebuilder import (
    can_prebuild_package,
    clean_frameworks,
    prebuild_package,
)

logger = logging.getLogger(__name__)


def _all_packages(parcels: list[Parcel], options: dict[str, Any]) -> list[Package]:
    # Dependencies may point at packages that aren't being published.
    packages = options.get("packages")
    if packages is not None:
        return list(packages)
    return [parcel.pkg for parcel in parcels]


async def _prebuild_packages(parcels: list[Parcel], options: dict[str, Any]) -> None:
    packages = _all_packages(parcels, options)
    quiet = options.get("quiet", True)

    for parcel in parcels:
        pkg = parcel.pkg
        if not can_prebuild_package(pkg):
            continue
        logger.info("👷 Prebuilding %s", pkg.package_name)
        await prebuild_package(pkg, packages, quiet=quiet)


async def _clean_prebuilds(parcels: list[Parcel], options: dict[str, Any]) -> None:
    packages_to_clean = [parcel.pkg for parcel in parcels if can_prebuild_package(parcel.pkg)]

    if packages_to_clean:
        logger.info("🧹 Cleaning prebuilt resources")
        await clean_frameworks(packages_to_clean)


prebuild_packages = Task(
    name="prebuildPackages",
    handler=_prebuild_packages,
    required=True,
    backupable=False,
)

clean_prebuilds = Task(
    name="cleanPrebuilds",
    handler=_clean_prebuilds,
)


@dataclass
class PrebuildResult:
    """Result of running the prebuild or clean pipeline."""

    report: TaskRunReport | None = None
    packages: list[str] = field(default_factory=list)
    prebuildable: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            if self.report is None:
                return result

        result["packages"] = list(self.packages)
        result["prebuildable"] = list(self.prebuildable)
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def select_parcels(packages: list[Package], names: list[str] | None = None) -> list[Parcel]:
    """Wrap the named packages (all of them if no names) in parcels.

    Raises:
        PrebuildKitError: A name doesn't match any package.
    """
    if not names:
        return [Parcel(pkg=pkg, version=pkg.version) for pkg in packages]

    by_name = {pkg.package_name: pkg for pkg in packages}
    missing = [name for name in names if name not in by_name]
    if missing:
        raise PrebuildKitError(f"Unknown package(s): {', '.join(missing)}")
    return [Parcel(pkg=by_name[name], version=by_name[name].version) for name in names]


def _run_task(
    task: Task,
    package_names: list[str] | None,
    quiet: bool,
    resume: bool,
) -> PrebuildResult:
    root = context.get_workspace_root()
    config = context.get_config()

    try:
        packages = discover_packages(config.packages_path(root))
        parcels = select_parcels(packages, package_names)
        runner = TaskRunner(task.name, [task], backup_path=default_backup_path(root))
        report = asyncio.run(
            runner.run(parcels, {"packages": packages, "quiet": quiet}, resume=resume)
        )
    except PrebuildKitError as e:
        return PrebuildResult(error=str(e))

    error = None
    if report.failed:
        # failed optional tasks are only recorded in the report
        error = "; ".join(f"{name}: {message}" for name, message in report.errors.items())

    return PrebuildResult(
        report=report,
        error=error,
        packages=[parcel.pkg.package_name for parcel in parcels],
        prebuildable=[
            parcel.pkg.package_name for parcel in parcels if can_prebuild_package(parcel.pkg)
        ],
    )


def run_prebuild(
    package_names: list[str] | None = None,
    quiet: bool = True,
    resume: bool = False,
) -> PrebuildResult:
    """Prebuild the given packages (default: every package)."""
    return _run_task(prebuild_packages, package_names, quiet, resume)


def run_clean(package_names: list[str] | None = None) -> PrebuildResult:
    """Remove prebuilt frameworks of the given packages (default: every package)."""
    return _run_task(clean_prebuilds, package_names, quiet=True, resume=False)


def list_packages(root: Path | None = None) -> list[dict]:
    """Discovered packages with their prebuild status."""
    root = root or context.get_workspace_root()
    config = context.get_config()
    return [
        {
            "name": pkg.package_name,
            "version": pkg.version,
            "path": str(pkg.path),
            "pod": pkg.podspec_name,
            "prebuildable": can_prebuild_package(pkg),
            "prebuilt": bool(pkg.xcframework_path and pkg.xcframework_path.exists()),
        }
        for pkg in discover_packages(config.packages_path(root))
    ]
