"""
Subprocess seam — the SINGLE PLACE where external tools are launched.

xcodegen, xcodebuild and ``pod`` all run through ``spawn()``.  By
default the child inherits stdin/stdout/stderr so the user sees the
tool's own output; ``capture=True`` collects it instead (used when the
output is data, e.g. ``pod ipc spec``).

There is no timeout and no retry: a hung tool blocks the pipeline,
and a failing tool raises ProcessError which propagates to the task
runner.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import time
from dataclasses import dataclass
from pathlib import Path

from src.core.errors import PrebuildKitError

logger = logging.getLogger(__name__)


class ProcessError(PrebuildKitError):
    """An external command exited with a non-zero status."""

    def __init__(self, cmd: list[str], returncode: int, stderr: str = ""):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command failed (exit {returncode}): {shlex.join(cmd)}"
        if stderr:
            message += f"\n{stderr.strip()[-2000:]}"
        super().__init__(message)


class ToolNotFoundError(PrebuildKitError):
    """An external command could not be started."""

    def __init__(self, tool: str, message: str | None = None):
        self.tool = tool
        super().__init__(message or f"{tool} is not installed")


@dataclass
class ProcessResult:
    """Outcome of a finished command. stdout/stderr are empty unless captured."""

    cmd: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def spawn(
    cmd: list[str],
    *,
    cwd: Path | str | None = None,
    env_overrides: dict[str, str] | None = None,
    capture: bool = False,
) -> ProcessResult:
    """Run a command to completion.

    Args:
        cmd: Command list (no shell).
        cwd: Working directory for the command.
        env_overrides: Extra environment variables.
        capture: Collect stdout/stderr instead of inheriting them.

    Returns:
        ProcessResult for a zero exit status.

    Raises:
        ProcessError: The command exited non-zero.
        ToolNotFoundError: The executable (or the working directory)
            doesn't exist.
    """
    env = None
    if env_overrides:
        env = os.environ.copy()
        env.update(env_overrides)

    pipe = asyncio.subprocess.PIPE if capture else None

    logger.debug("Spawning: %s (cwd=%s)", shlex.join(cmd), cwd)
    start = time.monotonic()

    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(cwd) if cwd is not None else None,
            env=env,
            stdout=pipe,
            stderr=pipe,
        )
    except FileNotFoundError as e:
        if cwd is not None and not Path(cwd).is_dir():
            raise ToolNotFoundError(cmd[0], f"Working directory not found: {cwd}") from e
        raise ToolNotFoundError(cmd[0]) from e

    stdout, stderr = await proc.communicate()
    elapsed_ms = int((time.monotonic() - start) * 1000)

    result = ProcessResult(
        cmd=list(cmd),
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace") if stdout else "",
        stderr=stderr.decode("utf-8", errors="replace") if stderr else "",
        elapsed_ms=elapsed_ms,
    )

    if not result.ok:
        logger.debug("Command exited %d after %dms", result.returncode, elapsed_ms)
        raise ProcessError(result.cmd, result.returncode, result.stderr)

    logger.debug("Command finished in %dms", elapsed_ms)
    return result
