"""
Shared CLI helpers.
"""

from __future__ import annotations

import sys

import click


def require_config(ctx: click.Context) -> None:
    """Exit with the config error, if loading prebuilds.yml failed at startup."""
    error = ctx.obj.get("config_error") if ctx.obj else None
    if error:
        click.secho(f"❌ {error}", fg="red")
        sys.exit(1)


def fail(message: str) -> None:
    click.secho(f"❌ {message}", fg="red")
    sys.exit(1)
