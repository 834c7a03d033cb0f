"""
Project generation — turn a ProjectSpec into an .xcodeproj with xcodegen.

The spec is written to ``<dir>/<name>.spec.json`` only for the duration
of the xcodegen call.  ``spec_file()`` removes it on every exit path,
including a failing generator.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from src.core import context
from src.core.models.project_spec import ProjectSpec
from src.core.services.process import spawn

logger = logging.getLogger(__name__)


def spec_path_for(directory: Path, spec: ProjectSpec) -> Path:
    return directory / f"{spec.name}.spec.json"


def xcodeproj_path_for(directory: Path, spec: ProjectSpec) -> Path:
    return directory / f"{spec.name}.xcodeproj"


@contextmanager
def spec_file(directory: Path, spec: ProjectSpec) -> Iterator[Path]:
    """Save the spec to a file so xcodegen can use it; remove it afterwards."""
    path = spec_path_for(directory, spec)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(spec.to_dict(), indent=2) + "\n", encoding="utf-8")
    logger.debug("Wrote project spec to %s", path)
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)


async def generate_xcode_project(
    directory: Path,
    spec: ProjectSpec,
    *,
    command: list[str] | None = None,
    cwd: Path | None = None,
) -> Path:
    """Generate ``.xcodeproj`` from the project spec and save it in ``directory``.

    Args:
        directory: Where the project is generated (the package's iOS dir).
        spec: The project spec.
        command: xcodegen invocation; defaults to the configured one.
        cwd: Working directory for xcodegen; defaults to the tools dir.

    Returns:
        Path of the generated project. Its existence is not checked.

    Raises:
        ProcessError: xcodegen exited non-zero.
        ToolNotFoundError: xcodegen could not be started.
    """
    config = context.get_config()
    if command is None:
        command = config.xcodegen.command
    if cwd is None:
        cwd = config.tools_path(context.get_workspace_root())

    with spec_file(directory, spec) as path:
        await spawn([*command, "--quiet", "--spec", str(path)], cwd=cwd)

    return xcodeproj_path_for(directory, spec)
