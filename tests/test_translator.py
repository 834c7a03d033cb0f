"""
Tests for the podspec → XcodeGen translation.

Dependency resolution is injected, so no packages or tools are needed.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from src.core.models.podspec import Podspec, PodspecError
from src.core.models.project_spec import Dependency
from src.core.services.xcodegen.translator import (
    COMMON_HEADER_PODS,
    INFO_PLIST_FILENAME,
    construct_framework_search_paths,
    construct_header_search_paths,
    create_spec_from_podspec,
    pod_name_to_bundle_id,
)

HEADERS = Path("/repo/ios/Pods/Headers/Public")


async def _no_deps(name: str) -> Dependency | None:
    return None


def _podspec(**overrides) -> Podspec:
    data = {
        "name": "EXFoo",
        "version": "1.2.3",
        "platforms": {"ios": "12.0"},
        "source_files": "Sources/**/*.m",
    }
    data.update(overrides)
    return Podspec.from_dict(data)


def _translate(podspec: Podspec, resolver=_no_deps, **kwargs):
    kwargs.setdefault("headers_dir", HEADERS)
    return asyncio.run(create_spec_from_podspec(podspec, resolver, **kwargs))


# ═══════════════════════════════════════════════════════════════════
#  pod_name_to_bundle_id
# ═══════════════════════════════════════════════════════════════════


class TestBundleId:
    def test_ex_prefix(self):
        assert pod_name_to_bundle_id("EXFoo") == "expo.foo"

    def test_um_prefix_and_underscore(self):
        assert pod_name_to_bundle_id("UMBar_Baz") == "unimodules.bar.baz"

    def test_uppercase_runs_are_one_segment(self):
        assert pod_name_to_bundle_id("EXGL_CPP") == "expo.gl.cpp"
        assert pod_name_to_bundle_id("EXAV") == "expo.av"

    def test_non_word_characters_become_dots(self):
        assert pod_name_to_bundle_id("EX-Foo") == "expo.foo"
        assert pod_name_to_bundle_id("EXFoo__Bar") == "expo.foo.bar"

    def test_prefix_only_at_start(self):
        assert pod_name_to_bundle_id("EXUMFoo") == "expo.umfoo"

    def test_unprefixed_name_starts_with_dot(self):
        """A naming convention, not a slugifier: no prefix → leading dot."""
        assert pod_name_to_bundle_id("ExpoModulesCore") == ".expo.modules.core"


# ═══════════════════════════════════════════════════════════════════
#  Search paths
# ═══════════════════════════════════════════════════════════════════


class TestFrameworkSearchPaths:
    def test_no_dependencies(self):
        assert construct_framework_search_paths([]) == "$(inherited)"

    def test_only_framework_dependencies_count(self):
        deps = [
            Dependency(framework="/repo/packages/a/ios/A.xcframework"),
            Dependency(sdk="UIKit.framework"),
            Dependency(target="Other"),
            Dependency(framework="/repo/packages/b/ios/B.xcframework"),
        ]
        assert construct_framework_search_paths(deps) == (
            "$(inherited) /repo/packages/a/ios /repo/packages/b/ios"
        )

    def test_no_deduplication(self):
        deps = [
            Dependency(framework="/x/A.xcframework"),
            Dependency(framework="/x/B.xcframework"),
        ]
        assert construct_framework_search_paths(deps) == "$(inherited) /x /x"


class TestHeaderSearchPaths:
    def test_starts_with_inherited_and_quoted_paths(self):
        value = construct_header_search_paths([], HEADERS)
        assert value.startswith('$(inherited) "')
        assert value.endswith('"')

    def test_includes_headers_root(self):
        value = construct_header_search_paths([], HEADERS)
        assert f'"{HEADERS}"' in value.split(" ")

    def test_includes_common_pods(self):
        value = construct_header_search_paths([], HEADERS)
        for pod in COMMON_HEADER_PODS:
            assert f'"{HEADERS / pod}"' in value

    def test_dependency_order_and_dedup(self):
        value = construct_header_search_paths(["EXBar", "Yoga", "EXBar"], HEADERS)
        parts = value.split(" ")
        assert parts[0] == "$(inherited)"
        assert parts[1] == f'"{HEADERS}"'
        assert parts[2] == f'"{HEADERS / "EXBar"}"'
        assert parts.count(f'"{HEADERS / "Yoga"}"') == 1
        assert parts.count(f'"{HEADERS / "EXBar"}"') == 1
        assert len(parts) == 1 + 1 + 1 + len(COMMON_HEADER_PODS)

    def test_extra_pods_appended(self):
        value = construct_header_search_paths([], HEADERS, ["ZXingObjC"])
        assert value.endswith(f'"{HEADERS / "ZXingObjC"}"')


# ═══════════════════════════════════════════════════════════════════
#  create_spec_from_podspec
# ═══════════════════════════════════════════════════════════════════


class TestDeploymentTarget:
    def test_ios(self):
        spec = _translate(_podspec(platforms={"ios": "12.0"}))
        assert spec.options.deployment_target == {"iOS": "12.0"}
        assert spec.targets["EXFoo"].platform == ["iOS"]

    def test_multiple_platforms(self):
        spec = _translate(_podspec(platforms={"ios": "13.0", "tvos": "13.0", "osx": "10.15"}))
        assert spec.options.deployment_target == {
            "iOS": "13.0",
            "tvOS": "13.0",
            "macOS": "10.15",
        }
        assert spec.targets["EXFoo"].platform == ["iOS", "tvOS", "macOS"]

    def test_iphoneos_deployment_target_only_for_ios(self):
        spec = _translate(_podspec(platforms={"macos": "11.0"}))
        assert "IPHONEOS_DEPLOYMENT_TARGET" not in spec.settings.base
        assert "IPHONEOS_DEPLOYMENT_TARGET" not in spec.to_dict()["settings"]["base"]

    def test_unmapped_platform_fails(self):
        with pytest.raises(KeyError):
            _translate(_podspec(platforms={"visionos": "1.0"}))


class TestDependencies:
    def test_unresolved_dependency_is_dropped(self):
        async def resolver(name: str) -> Dependency | None:
            if name == "Y":
                return Dependency(framework="/deps/Y.xcframework", link=False)
            return None

        spec = _translate(_podspec(dependencies={"Z": [], "Y": [">= 1.0"]}), resolver)
        deps = spec.targets["EXFoo"].dependencies
        frameworks = [d for d in deps if d.framework]
        assert len(frameworks) == 1
        assert frameworks[0].framework == "/deps/Y.xcframework"
        assert all("Z" not in (d.framework or "") for d in deps)

    def test_order_is_declaration_order(self):
        async def resolver(name: str) -> Dependency:
            # finish in reverse order
            await asyncio.sleep({"A": 0.03, "B": 0.02, "C": 0.01}[name])
            return Dependency(target=name)

        spec = _translate(_podspec(dependencies={"A": [], "B": [], "C": []}), resolver)
        assert [d.target for d in spec.targets["EXFoo"].dependencies] == ["A", "B", "C"]

    def test_resolved_concurrently(self):
        in_flight = 0
        peak = 0

        async def resolver(name: str) -> Dependency:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return Dependency(target=name)

        _translate(_podspec(dependencies={"A": [], "B": [], "C": []}), resolver)
        assert peak == 3

    def test_sdk_frameworks_come_first(self):
        async def resolver(name: str) -> Dependency:
            return Dependency(framework=f"/deps/{name}.xcframework")

        spec = _translate(
            _podspec(frameworks=["CoreLocation", "UIKit"], dependencies={"EXBar": []}),
            resolver,
        )
        deps = spec.targets["EXFoo"].dependencies
        assert [d.kind for d in deps] == ["sdk", "sdk", "framework"]
        assert deps[0].sdk == "CoreLocation.framework"

    def test_header_paths_include_unresolved_dependencies(self):
        spec = _translate(_podspec(dependencies={"React-Core": [], "EXMissing": []}))
        assert f'"{HEADERS / "EXMissing"}"' in spec.settings.base["HEADER_SEARCH_PATHS"]

    def test_framework_search_paths_from_resolved(self):
        async def resolver(name: str) -> Dependency:
            return Dependency(framework=f"/packages/{name}/ios/{name}.xcframework")

        spec = _translate(_podspec(dependencies={"EXBar": []}), resolver)
        assert spec.settings.base["FRAMEWORK_SEARCH_PATHS"] == "$(inherited) /packages/EXBar/ios"


class TestTarget:
    def test_single_framework_target_named_after_pod(self):
        spec = _translate(_podspec())
        assert spec.name == "EXFoo"
        assert list(spec.targets) == ["EXFoo"]
        assert spec.targets["EXFoo"].type == "framework"

    def test_sources(self):
        spec = _translate(
            _podspec(exclude_files=["Tests/**"], compiler_flags="-Wno-everything")
        )
        source = spec.targets["EXFoo"].sources[0]
        assert source.path == ""
        assert source.name == "EXFoo"
        assert source.create_intermediate_groups is True
        assert source.includes == ["Sources/**/*.m"]
        assert source.excludes == [
            INFO_PLIST_FILENAME,
            "EXFoo.spec.json",
            "*.xcodeproj",
            "*.xcframework",
            "*.podspec",
            "Tests/**",
        ]
        assert source.compiler_flags == "-Wno-everything"

    def test_static_library_forced(self):
        spec = _translate(_podspec(pod_target_xcconfig={"MACH_O_TYPE": "mh_dylib"}))
        assert spec.targets["EXFoo"].settings.base["MACH_O_TYPE"] == "staticlib"

    def test_pod_target_xcconfig_kept(self):
        spec = _translate(
            _podspec(pod_target_xcconfig={"GCC_PREPROCESSOR_DEFINITIONS": "$(inherited) FOO=1"})
        )
        base = spec.targets["EXFoo"].settings.base
        assert base["GCC_PREPROCESSOR_DEFINITIONS"] == "$(inherited) FOO=1"
        assert base["MACH_O_TYPE"] == "staticlib"

    def test_info_properties(self):
        spec = _translate(_podspec())
        info = spec.targets["EXFoo"].info
        assert info.path == "Info-generated.plist"
        assert info.properties == {
            "CFBundleIdentifier": "expo.foo",
            "CFBundleName": "EXFoo",
            "CFBundleShortVersionString": "1.2.3",
            "CFBundleVersion": 1,
        }

    def test_info_plist_overrides_win(self):
        spec = _translate(_podspec(info_plist={"CFBundleName": "Foo", "NSFoo": "bar"}))
        props = spec.targets["EXFoo"].info.properties
        assert props["CFBundleName"] == "Foo"
        assert props["NSFoo"] == "bar"
        assert props["CFBundleIdentifier"] == "expo.foo"

    def test_invalid_version(self):
        with pytest.raises(PodspecError):
            _translate(_podspec(version="latest"))

    @pytest.mark.parametrize("version", ["1.2", "12abc", "1", "1.2.3.4", "1.2.x"])
    def test_partial_versions_rejected(self, version):
        with pytest.raises(PodspecError, match="semver"):
            _translate(_podspec(version=version))

    @pytest.mark.parametrize(
        "version, major",
        [("v3.0.0", 3), ("10.4.1", 10), ("1.0.0-beta.2", 1), ("2.0.0+build.5", 2)],
    )
    def test_bundle_version_is_major(self, version, major):
        props = _translate(_podspec(version=version)).targets["EXFoo"].info.properties
        assert props["CFBundleVersion"] == major


class TestTopLevel:
    def test_settings(self):
        spec = _translate(_podspec(frameworks=["OpenGLES", "GLKit"]))
        base = spec.settings.base
        assert base["PRODUCT_BUNDLE_IDENTIFIER"] == "expo.foo"
        assert base["IPHONEOS_DEPLOYMENT_TARGET"] == "12.0"
        assert base["VALIDATE_WORKSPACE_SKIPPED_SDK_FRAMEWORKS"] == "OpenGLES GLKit"
        assert base["HEADER_SEARCH_PATHS"].startswith("$(inherited) ")
        assert base["FRAMEWORK_SEARCH_PATHS"] == "$(inherited)"

    def test_minimum_xcodegen_version_defaults_to_config(self):
        spec = _translate(_podspec())
        assert spec.options.minimum_xcodegen_version == "2.18.0"

    def test_minimum_xcodegen_version_override(self):
        spec = _translate(_podspec(), minimum_xcodegen_version="2.30.0")
        assert spec.options.minimum_xcodegen_version == "2.30.0"

    def test_headers_dir_defaults_to_workspace(self, workspace: Path):
        spec = asyncio.run(create_spec_from_podspec(_podspec(), _no_deps))
        expected = workspace.resolve() / "ios" / "Pods" / "Headers" / "Public"
        assert f'"{expected}"' in spec.settings.base["HEADER_SEARCH_PATHS"]


class TestEndToEnd:
    def test_serialized_spec(self):
        spec = _translate(_podspec(frameworks=["CoreLocation"]))
        data = spec.to_dict()

        target = data["targets"]["EXFoo"]
        assert {"sdk": "CoreLocation.framework"} in target["dependencies"]
        assert target["info"]["properties"]["CFBundleVersion"] == 1
        assert target["sources"][0]["createIntermediateGroups"] is True
        assert "compilerFlags" not in target["sources"][0]
        assert data["options"]["minimumXcodeGenVersion"] == "2.18.0"
        assert data["options"]["deploymentTarget"] == {"iOS": "12.0"}
        assert "projectReferences" not in data
