"""
CLI commands for resolver inspection.

Thin wrappers over ``depsolver.core.use_cases.resolver_info``.
"""

from __future__ import annotations

import json
import sys

import click

from depsolver.ui.cli.common import load_settings_or_exit


@click.group()
def resolver() -> None:
    """Resolver — compiler and snapshot packages."""


@resolver.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def compiler(ctx: click.Context, as_json: bool) -> None:
    """Show the compiler version the resolver requires."""
    from depsolver.core.use_cases.resolver_info import get_resolver_info

    info = get_resolver_info(load_settings_or_exit(ctx), config_path=ctx.obj.get("config_path"))

    if as_json:
        data = info.to_dict()
        data.pop("packages", None)
        click.echo(json.dumps(data, indent=2))
        if info.error:
            sys.exit(1)
        return

    if info.error:
        click.secho(f"❌ {info.error}", fg="red")
        sys.exit(1)

    click.echo(str(info.compiler))


@resolver.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def packages(ctx: click.Context, as_json: bool) -> None:
    """List package versions inherited from the resolver's snapshot."""
    from depsolver.core.use_cases.resolver_info import get_resolver_info

    info = get_resolver_info(
        load_settings_or_exit(ctx),
        config_path=ctx.obj.get("config_path"),
        with_packages=True,
    )

    if as_json:
        click.echo(json.dumps(info.to_dict(), indent=2))
        if info.error:
            sys.exit(1)
        return

    if info.error:
        click.secho(f"❌ {info.error}", fg="red")
        sys.exit(1)

    if not info.packages:
        click.secho(f"⚠️  {info.compiler} has no snapshot packages", fg="yellow")
        return

    click.secho(f"📦 {len(info.packages)} packages ({info.compiler})", fg="cyan", bold=True)
    for name, version in sorted(info.packages.items()):
        click.echo(f"   {name}-{version}")
