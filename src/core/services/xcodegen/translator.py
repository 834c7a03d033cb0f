"""
Podspec → XcodeGen project spec translation.

It's very naive, but covers every package we prebuild: one framework
target per pod, sources straight from the podspec globs, pod
dependencies resolved through an injected async lookup.

More detailed spec schema available here:
https://github.com/yonaskolb/XcodeGen/blob/master/Docs/ProjectSpec.md
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from collections.abc import Awaitable, Callable, Iterable
from pathlib import Path

from src.core import context
from src.core.models.podspec import Podspec, PodspecError
from src.core.models.project_spec import (
    Dependency,
    InfoPlist,
    Options,
    ProjectSpec,
    Settings,
    Source,
    Target,
)
from src.core.services.xcodegen.xcconfig import INHERITED, merge_xcode_configs

logger = logging.getLogger(__name__)

PLATFORMS_MAPPING: dict[str, str] = {
    "ios": "iOS",
    "osx": "macOS",
    "macos": "macOS",
    "tvos": "tvOS",
    "watchos": "watchOS",
}

INFO_PLIST_FILENAME = "Info-generated.plist"

# Pods whose public headers are always searchable.  Mostly transitive
# dependencies of React Native that pods include without declaring.
COMMON_HEADER_PODS: tuple[str, ...] = (
    "DoubleConversion",
    "React-callinvoker",
    "React-Core",
    "React-cxxreact",
    "React-jsi",
    "React-jsiexecutor",
    "React-jsinspector",
    "Yoga",
    "glog",
)

DependencyResolver = Callable[[str], Awaitable[Dependency | None]]

# MAJOR.MINOR.PATCH with optional prerelease/build, as semver parses it
_SEMVER_RE = re.compile(
    r"^\s*[v=]?\s*(\d+)\.(\d+)\.(\d+)"
    r"(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?\s*$"
)


async def create_spec_from_podspec(
    podspec: Podspec,
    dependency_resolver: DependencyResolver,
    *,
    headers_dir: Path | None = None,
    minimum_xcodegen_version: str | None = None,
    extra_header_pods: Iterable[str] = (),
) -> ProjectSpec:
    """Create an XcodeGen spec from the podspec.

    Args:
        podspec: The package manifest.
        dependency_resolver: Maps a dependency pod name to a Dependency,
            or None when the pod can't be linked as a prebuilt framework.
            Unresolved dependencies are dropped.
        headers_dir: Root of the public pod headers. Defaults to
            ``<ios>/Pods/Headers/Public`` of the current workspace.
        minimum_xcodegen_version: Defaults to the configured version.
        extra_header_pods: Additional pods for HEADER_SEARCH_PATHS.
    """
    config = context.get_config()
    if headers_dir is None:
        headers_dir = config.pods_public_headers_path(context.get_workspace_root())
    if minimum_xcodegen_version is None:
        minimum_xcodegen_version = config.xcodegen.minimum_version

    # Unmapped platform keys are not validated; the lookup fails loudly.
    platforms = [PLATFORMS_MAPPING[platform] for platform in podspec.platforms]
    deployment_target = {
        PLATFORMS_MAPPING[platform]: version
        for platform, version in podspec.platforms.items()
    }

    dependency_names = podspec.dependency_names
    dependencies = await _resolve_dependencies(dependency_names, dependency_resolver)

    bundle_id = pod_name_to_bundle_id(podspec.name)

    target = Target(
        type="framework",
        platform=platforms,
        sources=[
            Source(
                path="",
                name=podspec.name,
                create_intermediate_groups=True,
                includes=list(podspec.source_files),
                excludes=[
                    INFO_PLIST_FILENAME,
                    f"{podspec.name}.spec.json",
                    "*.xcodeproj",
                    "*.xcframework",
                    "*.podspec",
                    *podspec.exclude_files,
                ],
                compiler_flags=podspec.compiler_flags,
            )
        ],
        dependencies=[
            *(Dependency(sdk=f"{framework}.framework") for framework in podspec.frameworks),
            *dependencies,
        ],
        settings=Settings(
            base=merge_xcode_configs(
                podspec.pod_target_xcconfig or {},
                {"MACH_O_TYPE": "staticlib"},
            )
        ),
        info=InfoPlist(
            path=INFO_PLIST_FILENAME,
            properties=merge_xcode_configs(
                {
                    "CFBundleIdentifier": bundle_id,
                    "CFBundleName": podspec.name,
                    "CFBundleShortVersionString": podspec.version,
                    "CFBundleVersion": _major_version(podspec.version),
                },
                podspec.info_plist or {},
            ),
        ),
    )

    base_settings: dict[str, str] = {"PRODUCT_BUNDLE_IDENTIFIER": bundle_id}
    if "ios" in podspec.platforms:
        base_settings["IPHONEOS_DEPLOYMENT_TARGET"] = podspec.platforms["ios"]
    base_settings["FRAMEWORK_SEARCH_PATHS"] = construct_framework_search_paths(dependencies)
    base_settings["HEADER_SEARCH_PATHS"] = construct_header_search_paths(
        dependency_names, headers_dir, extra_header_pods
    )
    # Suppresses deprecation warnings coming from frameworks like OpenGLES.
    base_settings["VALIDATE_WORKSPACE_SKIPPED_SDK_FRAMEWORKS"] = " ".join(podspec.frameworks)

    return ProjectSpec(
        name=podspec.name,
        targets={podspec.name: target},
        options=Options(
            minimum_xcodegen_version=minimum_xcodegen_version,
            deployment_target=deployment_target,
        ),
        settings=Settings(base=base_settings),
    )


async def _resolve_dependencies(
    names: list[str],
    resolver: DependencyResolver,
) -> list[Dependency]:
    """Resolve all names concurrently; keep declaration order, drop misses."""
    results = await asyncio.gather(*(resolver(name) for name in names))

    dependencies: list[Dependency] = []
    for name, dependency in zip(names, results):
        if dependency is None:
            logger.debug("Dependency '%s' not resolved, skipping", name)
            continue
        dependencies.append(dependency)
    return dependencies


def construct_framework_search_paths(dependencies: list[Dependency]) -> str:
    """``$(inherited)`` + the directory of every framework dependency."""
    directories = [
        os.path.dirname(dependency.framework)
        for dependency in dependencies
        if dependency.framework
    ]
    return f"{INHERITED} {' '.join(directories)}".strip()


def construct_header_search_paths(
    dependency_names: Iterable[str],
    headers_dir: Path,
    extra_pods: Iterable[str] = (),
) -> str:
    """``$(inherited)`` + quoted public header dirs of the relevant pods.

    For simplicity this adds more pods than the direct dependencies.
    The empty pod name stands for the headers root itself: some pods
    (ZXingObjC and all our modules) have headers at the root level.
    """
    # dict keeps insertion order, so this is an ordered set
    pods = dict.fromkeys(["", *dependency_names, *COMMON_HEADER_PODS, *extra_pods])

    paths = " ".join(f'"{Path(headers_dir) / pod}"' for pod in pods)
    return f"{INHERITED} {paths}".strip()


def pod_name_to_bundle_id(pod_name: str) -> str:
    """Simple conversion from pod name to framework's bundle identifier.

    >>> pod_name_to_bundle_id("EXFoo")
    'expo.foo'
    >>> pod_name_to_bundle_id("UMBar_Baz")
    'unimodules.bar.baz'
    """
    name = re.sub(r"^UM", "unimodules", pod_name)
    name = re.sub(r"^EX", "expo", name)
    name = re.sub(r"(_|[^\w\d.])+", ".", name, flags=re.ASCII)
    return re.sub(r"\.*([A-Z]+)", lambda m: f".{m.group(1).lower()}", name)


def _major_version(version: str) -> int:
    match = _SEMVER_RE.match(version)
    if match is None:
        raise PodspecError(f"Invalid version '{version}': expected a semver string")
    return int(match.group(1))
