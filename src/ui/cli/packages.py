"""
CLI commands for workspace packages.

Thin wrappers over ``src.core.use_cases.prebuild.list_packages``.
"""

from __future__ import annotations

import json

import click

from src.ui.cli.helpers import require_config


@click.group()
def packages() -> None:
    """Packages — discovered packages and their prebuild status."""


@packages.command("list")
@click.option("--ios-only", is_flag=True, help="Only packages that ship a podspec.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_cmd(ctx: click.Context, ios_only: bool, as_json: bool) -> None:
    """List packages, their pods, and whether they are prebuilt."""
    from src.core.use_cases.prebuild import list_packages

    require_config(ctx)
    entries = list_packages()
    if ios_only:
        entries = [e for e in entries if e["pod"]]

    if as_json:
        click.echo(json.dumps(entries, indent=2))
        return

    if not entries:
        click.secho("⚠️  No packages found", fg="yellow")
        return

    click.secho(f"📦 Packages ({len(entries)}):", fg="cyan", bold=True)
    for entry in entries:
        pod = entry["pod"] or "—"
        if entry["prebuilt"]:
            marker = click.style("prebuilt", fg="green")
        elif entry["prebuildable"]:
            marker = click.style("prebuildable", fg="yellow")
        else:
            marker = ""
        click.echo(f"   {entry['name']:<36} {pod:<28} {marker}")
    click.echo()
