"""
Configuration loader — reads prebuilds.yml into the config model.

This is the primary entry point for loading workspace configuration.
It reads YAML, validates against the Pydantic schema, and returns a
typed PrebuildConfig.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from src.core.errors import PrebuildKitError
from src.core.models.config import PrebuildConfig

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "prebuilds.yml"


class ConfigError(PrebuildKitError):
    """Raised when the prebuild configuration is invalid or unreadable."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for prebuilds.yml starting from the given directory, walking up.

    This allows running commands from a package directory and still
    finding the monorepo root.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to prebuilds.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None) -> PrebuildConfig:
    """Load and validate the prebuild configuration.

    Unlike project files elsewhere, prebuilds.yml is optional: with no
    file at all, the defaults describe the standard monorepo layout.

    Args:
        path: Explicit path to prebuilds.yml. If None, searches upward.

    Returns:
        Validated PrebuildConfig.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    if path is None:
        path = find_config_file()
        if path is None:
            logger.debug("No %s found — using defaults", CONFIG_FILE)
            return PrebuildConfig()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading prebuild config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = PrebuildConfig.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid prebuild configuration: {e}") from e

    logger.info(
        "Loaded prebuild config with %d prebuildable packages",
        len(config.prebuild.packages),
    )
    return config


def workspace_root(config_path: Path | None) -> Path:
    """Get the workspace root: the config file's directory, or cwd."""
    return config_path.parent.resolve() if config_path else Path.cwd().resolve()
