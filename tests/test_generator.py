"""
Tests for xcodegen project generation — temp spec file lifecycle.
"""

import asyncio
import json
from pathlib import Path

import pytest

from src.core.models.project_spec import Options, ProjectSpec, Settings
from src.core.services.process import ProcessError
from src.core.services.xcodegen.generator import (
    generate_xcode_project,
    spec_file,
    spec_path_for,
)


def _spec(name: str = "EXFoo") -> ProjectSpec:
    return ProjectSpec(
        name=name,
        targets={},
        options=Options(minimum_xcodegen_version="2.18.0"),
        settings=Settings(base={"PRODUCT_BUNDLE_IDENTIFIER": "expo.foo"}),
    )


class TestSpecFile:
    def test_written_then_removed(self, tmp_path: Path):
        with spec_file(tmp_path, _spec()) as path:
            assert path == tmp_path / "EXFoo.spec.json"
            data = json.loads(path.read_text())
            assert data["name"] == "EXFoo"
            assert data["options"]["minimumXcodeGenVersion"] == "2.18.0"
        assert not path.exists()

    def test_removed_when_body_raises(self, tmp_path: Path):
        with pytest.raises(RuntimeError):
            with spec_file(tmp_path, _spec()):
                raise RuntimeError("boom")
        assert not spec_path_for(tmp_path, _spec()).exists()


class TestGenerateXcodeProject:
    def test_runs_xcodegen_with_spec(self, workspace: Path, fake_spawn, tmp_path: Path):
        seen = {}

        def inspect(cmd, cwd):
            path = Path(cmd[cmd.index("--spec") + 1])
            seen["exists"] = path.is_file()
            seen["name"] = json.loads(path.read_text())["name"]

        fake_spawn.side_effect = inspect
        directory = tmp_path / "pkg" / "ios"

        result = asyncio.run(generate_xcode_project(directory, _spec()))

        assert result == directory / "EXFoo.xcodeproj"
        assert fake_spawn.calls == [
            [
                "yarn", "--silent", "run", "xcodegen",
                "--quiet", "--spec", str(directory / "EXFoo.spec.json"),
            ]
        ]
        assert fake_spawn.cwds == [(workspace / "tools").resolve()]
        assert seen == {"exists": True, "name": "EXFoo"}
        assert not (directory / "EXFoo.spec.json").exists()

    def test_explicit_command_and_cwd(self, fake_spawn, tmp_path: Path):
        asyncio.run(
            generate_xcode_project(
                tmp_path, _spec(), command=["xcodegen"], cwd=tmp_path / "bin"
            )
        )
        assert fake_spawn.calls[0][:2] == ["xcodegen", "--quiet"]
        assert fake_spawn.cwds == [tmp_path / "bin"]

    def test_spec_removed_on_failure(self, workspace: Path, fake_spawn, tmp_path: Path):
        fake_spawn.fail_when = lambda cmd: True

        with pytest.raises(ProcessError):
            asyncio.run(generate_xcode_project(tmp_path, _spec()))

        assert not (tmp_path / "EXFoo.spec.json").exists()
