"""
prebuildkit — CLI entrypoint.

Usage:
    python -m src.main --help
    python -m src.main config check
    python -m src.main spec packages/expo-device/ios/EXDevice.podspec
    python -m src.main prebuild build expo-device
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from src import __version__
from src.core.observability.logging_config import level_from_flags, setup_from_env


@click.group()
@click.version_option(version=__version__, prog_name="prebuildkit")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to prebuilds.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """prebuildkit — XcodeGen projects and prebuilt frameworks for iOS packages."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_from_env(level_from_flags(debug=debug, verbose=verbose, quiet=quiet))

    # Register the workspace in core context (used by all core services)
    from src.core import context
    from src.core.config.loader import ConfigError, find_config_file, load_config, workspace_root

    cfg_file = ctx.obj["config_path"] or find_config_file()
    config = None
    try:
        config = load_config(cfg_file)
    except ConfigError as e:
        # Reported by the commands that need the config; `config check` explains it.
        ctx.obj["config_error"] = str(e)
    context.set_workspace(workspace_root(cfg_file), config)


@cli.group()
def config() -> None:
    """Prebuild configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate prebuilds.yml against the workspace."""
    from src.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.config is not None  # guaranteed when valid
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Config: {result.config_path}")
        click.echo(f"   Prebuild packages: {len(result.config.prebuild.packages)}")
        click.echo(f"   Flavors: {len(result.config.prebuild.flavors)}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)

    click.echo()


@cli.command()
@click.argument("podspec", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write the spec to a file instead of stdout.")
@click.pass_context
def spec(ctx: click.Context, podspec: Path, output: Path | None) -> None:
    """Translate a podspec into an XcodeGen project spec (JSON)."""
    from src.core.use_cases.project_spec import translate_podspec
    from src.ui.cli.helpers import fail, require_config

    require_config(ctx)
    result = translate_podspec(podspec)

    if result.error:
        fail(result.error)

    content = json.dumps(result.spec, indent=2)
    if output is None:
        click.echo(content)
        return

    output.write_text(content + "\n", encoding="utf-8")
    if not ctx.obj.get("quiet"):
        click.secho(f"✅ Wrote {output}", fg="green")


# ── Register sub-command groups from src/ui/cli/ ──────────────────

from src.ui.cli.packages import packages
from src.ui.cli.prebuild import prebuild

cli.add_command(packages)
cli.add_command(prebuild)


if __name__ == "__main__":
    cli()
