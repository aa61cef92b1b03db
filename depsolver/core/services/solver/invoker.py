"""
Solver invoker — run ``cabal install --dry-run`` in a scratch directory.

The solver runs with its own ``cabal.config`` in a temp directory, and
with a separate empty working directory, so that sandbox or project
files next to the user's packages never influence the plan.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Iterable
from pathlib import Path

from depsolver.core.config.settings import SolverSettings
from depsolver.core.errors import SolverInvocationFailed
from depsolver.core.models.identifiers import ConstraintSet, SolverResult, UserFlagMap
from depsolver.core.models.solver import SolverEnvironment
from depsolver.core.services.process_runner import run_process
from depsolver.core.services.solver.constraint_file import build_constraint_file
from depsolver.core.services.solver.output_parser import (
    parse_solver_output,
    render_solver_plan,
)

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "cabal.config"

# Fixed, non-negotiable solver flags (after --config-file).
SOLVER_ARGS = (
    "install",
    "--enable-tests",
    "--enable-benchmarks",
    "-v",
    "--dry-run",
    "--only-dependencies",
    "--reorder-goals",
    "--max-backjumps=-1",
    "--package-db=clear",
    "--package-db=global",
)


def flag_constraint_args(user_flags: UserFlagMap) -> list[str]:
    """``{pkg: {flag: True}}`` → ``["--constraint=pkg +flag"]``."""
    args = []
    for package, flags in sorted(user_flags.items()):
        for flag, enabled in sorted(flags.items()):
            sign = "+" if enabled else "-"
            args.append(f"--constraint={package} {sign}{flag}")
    return args


def solver_command(
    config_file: Path,
    package_dirs: Iterable[Path],
    user_flags: UserFlagMap,
    extra_args: Iterable[str] = (),
) -> list[str]:
    return [
        "cabal",
        f"--config-file={config_file}",
        *SOLVER_ARGS,
        *extra_args,
        *flag_constraint_args(user_flags),
        *(str(p) for p in package_dirs),
    ]


def invoke_solver(
    env: SolverEnvironment,
    package_dirs: list[Path],
    constraints: ConstraintSet,
    user_flags: UserFlagMap,
    extra_args: list[str],
    settings: SolverSettings,
) -> bytes:
    """Run the solver and return its raw stdout.

    A non-zero exit status is logged but not raised: the report may
    still contain a plan.

    Raises:
        SolverInvocationFailed: The solver could not be started or timed out.
    """
    with tempfile.TemporaryDirectory(prefix="cabal-solver") as scratch:
        scratch_dir = Path(scratch)
        cache_dir = scratch_dir / "cache"
        work_dir = scratch_dir / "work"
        work_dir.mkdir()

        config_text = build_constraint_file(
            cache_dir,
            settings.package_indices,
            constraints,
            settings.index_cache_path,
        )
        config_file = scratch_dir / CONFIG_FILE_NAME
        config_file.write_text(config_text, encoding="utf-8")

        cmd = solver_command(config_file, package_dirs, user_flags, extra_args)
        cmd[0] = str(env.solver_executable)

        logger.info("Asking cabal to calculate a build plan, please wait")
        result = run_process(
            cmd,
            env=env.env,
            cwd=work_dir,
            timeout=settings.solver_timeout,
            binary=True,
        )

    if result["returncode"] is None:
        raise SolverInvocationFailed(f"Could not run the solver: {result['error']}")
    if not result["ok"]:
        logger.warning(
            "Solver exited with code %d: %s",
            result["returncode"], result["stderr"].strip() or "(no stderr)",
        )
    return result["stdout"]


def solve_with_solver(
    env: SolverEnvironment,
    package_dirs: list[Path],
    constraints: ConstraintSet,
    user_flags: UserFlagMap,
    extra_args: list[str],
    settings: SolverSettings,
) -> SolverResult:
    """Invoke the solver and parse its plan; a missing plan is an error."""
    raw = invoke_solver(env, package_dirs, constraints, user_flags, extra_args, settings)
    result = parse_solver_output(raw, require_marker=True)
    logger.debug("Solver plan (%d packages):\n%s", len(result), render_solver_plan(result))
    return result
