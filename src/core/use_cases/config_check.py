"""
Config check use case — validate prebuilds.yml and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from src.core.config.loader import ConfigError, find_config_file, load_config, workspace_root
from src.core.models.config import PrebuildConfig
from src.core.services.packages import discover_packages


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: PrebuildConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "prebuild_packages": list(self.config.prebuild.packages) if self.config else [],
            "flavor_count": len(self.config.prebuild.flavors) if self.config else 0,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate the prebuild configuration against the workspace.

    Args:
        config_path: Optional explicit path to prebuilds.yml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_config_file()

    if config_path is None:
        result.errors.append("No prebuilds.yml found.")
        return result

    result.config_path = config_path

    try:
        config = load_config(config_path)
        result.config = config
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    root = workspace_root(config_path)

    # Semantic checks
    if not config.prebuild.packages:
        result.warnings.append("No prebuild packages listed. Nothing will be prebuilt.")

    if not config.prebuild.flavors:
        result.errors.append("prebuild.flavors is empty: an .xcframework needs at least one slice.")

    if not config.xcodegen.command:
        result.errors.append("xcodegen.command is empty.")

    names = config.prebuild.packages
    dupes = sorted({n for n in names if names.count(n) > 1})
    if dupes:
        result.warnings.append(f"Duplicate prebuild packages: {', '.join(dupes)}")

    packages_dir = config.packages_path(root)
    if not packages_dir.is_dir():
        result.errors.append(f"Packages directory not found: {packages_dir}")
    else:
        known = {pkg.package_name: pkg for pkg in discover_packages(packages_dir)}
        for name in sorted(set(names)):
            pkg = known.get(name)
            if pkg is None:
                result.warnings.append(f"Prebuild package '{name}' not found in {packages_dir}")
            elif not pkg.is_supported_on_ios:
                result.warnings.append(f"Prebuild package '{name}' has no podspec")

    if not config.tools_path(root).is_dir():
        result.warnings.append(f"Tools directory not found: {config.tools_path(root)}")

    result.valid = len(result.errors) == 0
    return result
