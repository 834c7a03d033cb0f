"""
Workspace context — the single source of truth for "which monorepo, which config."

Every core service that needs the workspace root or the prebuild
configuration imports from here.  Both are set ONCE at startup by
whichever entry point launches the app:

    - CLI:    main.py   → context.set_workspace(root, config)
    - Tests:  conftest  → context.set_workspace(tmp_path, config)

Design notes:
    - Module-level singleton (not a class).
    - get_config() falls back to a default PrebuildConfig, so library
      callers that never ran the CLI still get sane paths.
    - get_workspace_root() falls back to the current directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from src.core.models.config import PrebuildConfig


_workspace_root: Optional[Path] = None
_config: Optional[PrebuildConfig] = None


def set_workspace(root: Path, config: PrebuildConfig | None = None) -> None:
    """Register the workspace root (and optionally its config) for the process."""
    global _workspace_root, _config
    _workspace_root = root
    _config = config


def reset() -> None:
    """Forget the registered workspace."""
    global _workspace_root, _config
    _workspace_root = None
    _config = None


def get_workspace_root() -> Path:
    """Return the workspace root, or the current directory if unset."""
    return _workspace_root if _workspace_root is not None else Path.cwd()


def get_config() -> PrebuildConfig:
    """Return the registered config, or defaults if none was loaded."""
    if _config is None:
        return PrebuildConfig()
    return _config
