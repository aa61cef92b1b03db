"""
Helpers shared by the CLI command modules.
"""

from __future__ import annotations

import sys

import click

from depsolver.core.config.loader import ConfigError
from depsolver.core.config.settings import SolverSettings, load_settings


def load_settings_or_exit(ctx: click.Context) -> SolverSettings:
    """Load tool settings from the root group's options, or exit with the error."""
    try:
        return load_settings(ctx.obj.get("root"), ctx.obj.get("settings_overrides"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)
