"""
CLI commands for prebuilt frameworks.

Thin wrappers over ``src.core.use_cases.prebuild`` and
``src.core.use_cases.project_spec``.
"""

from __future__ import annotations

import json
import sys

import click

from src.ui.cli.helpers import fail, require_config


@click.group()
def prebuild() -> None:
    """Prebuilds — generate projects, build and clean .xcframeworks."""


def _echo_report(result, verb: str) -> None:
    report = result.report
    if not result.packages:
        click.secho("⚠️  No packages found", fg="yellow")
        return

    if report and report.failed:
        for task_name, message in report.errors.items():
            click.secho(f"   ✗ {task_name}: {message}", fg="red")
    elif not result.prebuildable:
        click.echo(f"   Nothing to {verb}: none of the {len(result.packages)} packages is prebuildable")
    else:
        for name in result.prebuildable:
            click.secho(f"   ✓ {name}", fg="green")

    if report and report.skipped:
        click.secho(f"   ⊘ {report.skipped} task(s) already done in a previous run", fg="yellow")
    click.echo()


# ── Generate ────────────────────────────────────────────────────


@prebuild.command()
@click.argument("package_name")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def generate(ctx: click.Context, package_name: str, as_json: bool) -> None:
    """Generate the .xcodeproj of one package (kept on disk)."""
    from src.core.use_cases.project_spec import generate_project

    require_config(ctx)
    result = generate_project(package_name)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        fail(result.error)

    click.secho(f"✅ Generated {result.path}", fg="green")


# ── Build ───────────────────────────────────────────────────────


@prebuild.command()
@click.argument("package_names", nargs=-1)
@click.option("--verbose-build", is_flag=True, help="Don't pass -quiet to xcodebuild.")
@click.option("--resume", is_flag=True, help="Skip tasks finished by a previous failed run.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def build(
    ctx: click.Context,
    package_names: tuple[str, ...],
    verbose_build: bool,
    resume: bool,
    as_json: bool,
) -> None:
    """Prebuild .xcframeworks (default: every prebuildable package).

    Examples:

        prebuildkit prebuild build

        prebuildkit prebuild build expo-device expo-crypto
    """
    from src.core.use_cases.prebuild import run_prebuild

    require_config(ctx)
    result = run_prebuild(
        list(package_names) or None,
        quiet=not verbose_build,
        resume=resume,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error and result.report is None:
        fail(result.error)

    click.secho("\n👷 Prebuild", fg="cyan", bold=True)
    _echo_report(result, "prebuild")
    if result.error:
        sys.exit(1)


# ── Clean ───────────────────────────────────────────────────────


@prebuild.command()
@click.argument("package_names", nargs=-1)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def clean(ctx: click.Context, package_names: tuple[str, ...], as_json: bool) -> None:
    """Remove prebuilt .xcframeworks (default: every prebuildable package)."""
    from src.core.use_cases.prebuild import run_clean

    require_config(ctx)
    result = run_clean(list(package_names) or None)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error and result.report is None:
        fail(result.error)

    click.secho("\n🧹 Clean", fg="cyan", bold=True)
    _echo_report(result, "clean")
    if result.error:
        sys.exit(1)
