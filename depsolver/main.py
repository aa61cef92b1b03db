"""
depsolver — CLI entrypoint.

Usage:
    depsolver --help
    depsolver solve
    depsolver solve --modify-config
    depsolver config check
    depsolver resolver compiler
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from depsolver import __version__
from depsolver.core.models.solver import CompilerCheck
from depsolver.core.observability.logging_config import resolve_level, setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="depsolver")
@click.option("--verbose", "-v", is_flag=True, help="Show solver progress.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to project.yml (default: auto-detect).",
)
@click.option(
    "--root",
    type=click.Path(file_okay=False),
    default=None,
    help="depsolver root directory (default: $DEPSOLVER_ROOT or ~/.depsolver).",
)
@click.option(
    "--install-compiler/--no-install-compiler",
    default=None,
    help="Download and install the compiler if necessary.",
)
@click.option(
    "--system-compiler/--no-system-compiler",
    default=None,
    help="Use a suitable compiler from PATH if available.",
)
@click.option(
    "--compiler-check",
    type=click.Choice([c.value for c in CompilerCheck]),
    default=None,
    help="How closely the compiler version must match.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    root: str | None,
    install_compiler: bool | None,
    system_compiler: bool | None,
    compiler_check: str | None,
) -> None:
    """depsolver — compute missing extra-deps and flags with cabal's solver."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["root"] = Path(root) if root else None
    ctx.obj["settings_overrides"] = {
        "install_compiler": install_compiler,
        "system_compiler": system_compiler,
        "compiler_check": compiler_check,
    }

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(level=resolve_level(debug, verbose, quiet))


@cli.command()
@click.option(
    "--modify-config",
    "modify",
    is_flag=True,
    help="Write the new extra-deps and flags into project.yml.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def solve(ctx: click.Context, modify: bool, as_json: bool) -> None:
    """Find extra-deps and flags needed to build the project's packages.

    Examples:

        depsolver solve

        depsolver --install-compiler solve --modify-config
    """
    from depsolver.core.use_cases.solve import run_solve
    from depsolver.ui.cli.common import load_settings_or_exit

    settings = load_settings_or_exit(ctx)
    result = run_solve(settings, config_path=ctx.obj.get("config_path"), modify=modify)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.error:
            sys.exit(1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    report = result.report
    assert report is not None  # guaranteed after error check above
    quiet = ctx.obj.get("quiet", False)

    if not quiet:
        click.secho(f"\n🔧 Solver: {report.compiler}", fg="cyan", bold=True)
        click.echo(f"   {report.messages[0]}")
        click.echo()

    if not report.outcome.has_changes:
        click.secho("✅ No needed changes found", fg="green", bold=True)
        click.echo()
        return

    click.secho(
        f"   New extra-deps: {len(report.outcome.new_dependencies)}",
        fg="white",
        bold=True,
    )
    for line in report.report_yaml.splitlines():
        click.echo(f"     {line}")
    click.echo()

    if report.updated_path:
        click.secho(f"💾 Updated {report.updated_path}", fg="cyan")
    elif not quiet:
        click.secho(f"   {report.messages[-1]}", fg="yellow")
    click.echo()


@cli.group()
def config() -> None:
    """Project configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate project.yml configuration."""
    from depsolver.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.project is not None  # guaranteed when valid
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Resolver: {result.project.resolver_spec.to_yaml()}")
        click.echo(f"   Packages: {len(result.project.packages)}")
        click.echo(f"   Extra-deps: {len(result.project.extra_deps)}")
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


# ── Register sub-command groups from depsolver/ui/cli/ ─────────────

from depsolver.ui.cli.resolver import resolver  # noqa: E402

cli.add_command(resolver)


if __name__ == "__main__":
    cli()
