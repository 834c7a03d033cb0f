"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable

import pytest

from src.core import context
from src.core.models.config import PrebuildConfig, PrebuildSettings
from src.core.services.process import ProcessError, ProcessResult


@pytest.fixture(autouse=True)
def _reset_context():
    """Every test starts without a registered workspace."""
    context.reset()
    yield
    context.reset()


@pytest.fixture(autouse=True)
def _restore_logging(monkeypatch: pytest.MonkeyPatch):
    """CLI invocations reconfigure the root logger; undo that."""
    for name in ("PBK_LOG_LEVEL", "PBK_LOG_FILE", "PBK_LOG_FILE_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A monorepo skeleton registered as the current workspace.

    ``expo-foo`` and ``expo-bar`` are configured as prebuildable.
    """
    root = tmp_path / "repo"
    (root / "packages").mkdir(parents=True)
    (root / "tools").mkdir()
    (root / "ios").mkdir()
    config = PrebuildConfig(prebuild=PrebuildSettings(packages=["expo-foo", "expo-bar"]))
    context.set_workspace(root, config)
    return root


def write_package(
    root: Path,
    name: str,
    pod: str | None = None,
    podspec: dict[str, Any] | None = None,
    version: str = "1.0.0",
) -> Path:
    """Create ``packages/<name>`` with a package.json and optional podspec.json."""
    pkg_dir = root / "packages" / name
    (pkg_dir / "ios").mkdir(parents=True)
    (pkg_dir / "package.json").write_text(json.dumps({"name": name, "version": version}))
    if pod is not None:
        data = podspec or {
            "name": pod,
            "version": version,
            "platforms": {"ios": "12.0"},
            "source_files": "**/*.{h,m}",
        }
        (pkg_dir / "ios" / f"{pod}.podspec.json").write_text(json.dumps(data))
    return pkg_dir


@pytest.fixture
def make_package(workspace: Path) -> Callable[..., Path]:
    """Factory: make_package("expo-foo", pod="EXFoo", podspec={...})."""

    def _make(name: str, **kwargs: Any) -> Path:
        return write_package(workspace, name, **kwargs)

    return _make


def _arg_after(cmd: list[str], flag: str) -> str | None:
    if flag in cmd:
        return cmd[cmd.index(flag) + 1]
    return None


def simulate_tools(cmd: list[str], cwd: Path | None) -> None:
    """Leave behind what xcodegen / xcodebuild would have produced."""
    if "--spec" in cmd:
        spec_path = Path(_arg_after(cmd, "--spec"))
        spec = json.loads(spec_path.read_text())
        (spec_path.parent / f"{spec['name']}.xcodeproj").mkdir()
        (spec_path.parent / "Info-generated.plist").write_text("<plist/>")
    elif cmd[:2] == ["xcodebuild", "-create-xcframework"]:
        Path(_arg_after(cmd, "-output")).mkdir(parents=True)
    elif cmd[0] == "xcodebuild":
        target = _arg_after(cmd, "-target")
        build_dir = next(a.split("=", 1)[1] for a in cmd if a.startswith("CONFIGURATION_BUILD_DIR="))
        (Path(build_dir) / f"{target}.framework").mkdir(parents=True)


class FakeSpawn:
    """Records commands instead of running them.

    ``fail_when(cmd)`` → True makes the call raise ProcessError.
    ``side_effect(cmd, cwd)`` runs before returning (see simulate_tools).
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.cwds: list[Path | None] = []
        self.stdout = ""
        self.fail_when: Callable[[list[str]], bool] | None = None
        self.side_effect: Callable[[list[str], Path | None], None] | None = None

    async def __call__(
        self,
        cmd: list[str],
        *,
        cwd: Path | str | None = None,
        env_overrides: dict[str, str] | None = None,
        capture: bool = False,
    ) -> ProcessResult:
        self.calls.append(list(cmd))
        self.cwds.append(Path(cwd) if cwd is not None else None)
        if self.fail_when is not None and self.fail_when(cmd):
            raise ProcessError(list(cmd), 65, "simulated failure")
        if self.side_effect is not None:
            self.side_effect(list(cmd), Path(cwd) if cwd is not None else None)
        return ProcessResult(cmd=list(cmd), returncode=0, stdout=self.stdout if capture else "")


@pytest.fixture
def fake_spawn(monkeypatch: pytest.MonkeyPatch) -> FakeSpawn:
    """Replace every spawn() call site with a recording fake."""
    fake = FakeSpawn()
    monkeypatch.setattr("src.core.services.xcodegen.generator.spawn", fake)
    monkeypatch.setattr("src.core.services.packages.spawn", fake)
    monkeypatch.setattr("src.core.services.prebuilder.spawn", fake)
    return fake


@pytest.fixture
def simulated_tools(fake_spawn: FakeSpawn) -> FakeSpawn:
    """fake_spawn that also leaves the tools' outputs on disk."""
    fake_spawn.side_effect = simulate_tools
    return fake_spawn
