"""
Reconciliation — run the whole solve and work out what project.yml lacks.

    resolver ──► compiler ──► environment ──► cabal ──► plan
                                                          │
          extra-deps + snapshot packages ─── diff ◄───────┘
                                               │
                                  report / merge into project.yml
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from depsolver.core.config.settings import SolverSettings
from depsolver.core.models.compiler import CompilerVersion
from depsolver.core.models.identifiers import ConstraintSet, SolverResult, UserFlagMap
from depsolver.core.models.project import ProjectConfig
from depsolver.core.models.resolver import ExplicitCompiler, ResolverSpec
from depsolver.core.models.solver import ReconciliationOutcome
from depsolver.core.persistence.project_file import update_project_file
from depsolver.core.services.solver.build_plan import (
    BuildPlanLookup,
    load_build_plan,
    resolve_compiler,
)
from depsolver.core.services.solver.environment import CompilerProvisioner, provision
from depsolver.core.services.solver.invoker import solve_with_solver

logger = logging.getLogger(__name__)

MSG_NOT_PERFECT = "This command is not guaranteed to give you a perfect build plan"
MSG_NO_CHANGES = "No needed changes found"
MSG_MANUAL_TWEAK = (
    "It's possible that even with the changes generated below, "
    "you will still need to do some manual tweaking"
)
MSG_MODIFY_HINT = (
    "To automatically modify your project.yml file, rerun with '--modify-config'"
)


def compute_outcome(
    result: SolverResult,
    already_declared: ConstraintSet,
) -> ReconciliationOutcome:
    """Solver versions not yet declared, and every non-empty flag assignment.

    A package counts as declared by name alone; a different declared
    version is not reported.
    """
    return ReconciliationOutcome(
        new_dependencies={
            name: version
            for name, (version, _flags) in result.items()
            if name not in already_declared
        },
        new_flags={name: flags for name, (_version, flags) in result.items() if flags},
    )


def solve_resolver_spec(
    config_path: Path,
    package_dirs: list[Path],
    resolver: ResolverSpec,
    flags: UserFlagMap,
    pinned: ConstraintSet,
    *,
    settings: SolverSettings,
    lookup: BuildPlanLookup,
    provisioner: CompilerProvisioner,
    base_env: dict[str, str] | None = None,
) -> tuple[ExplicitCompiler, UserFlagMap, ConstraintSet]:
    """Solve ``package_dirs`` under ``resolver`` with ``pinned`` versions fixed.

    Returns:
        ``(compiler resolver, non-empty flags, versions)`` for every
        package the solver considered.
    """
    compiler = resolve_compiler(resolver, config_path, lookup)
    env = provision(compiler, settings.install_policy(), provisioner, base_env)

    extra_args = ["--ghcjs"] if compiler.is_ghcjs else []
    result = solve_with_solver(env, package_dirs, pinned, flags, extra_args, settings)

    return (
        ExplicitCompiler(compiler),
        {name: f for name, (_v, f) in result.items() if f},
        {name: v for name, (v, _f) in result.items()},
    )


@dataclass
class ExtraDepsReport:
    """What a solve found, ready for display."""

    compiler: CompilerVersion | None = None
    outcome: ReconciliationOutcome = field(default_factory=ReconciliationOutcome)
    messages: list[str] = field(default_factory=list)
    report_yaml: str = ""
    updated_path: Path | None = None

    def to_dict(self) -> dict:
        return {
            "compiler": str(self.compiler) if self.compiler else None,
            "changes": self.outcome.to_dict() if self.outcome.has_changes else None,
            "messages": self.messages,
            "updated": str(self.updated_path) if self.updated_path else None,
        }


def render_report(outcome: ReconciliationOutcome) -> str:
    """The suggested project.yml additions as YAML."""
    return yaml.safe_dump(outcome.to_dict(), sort_keys=False, default_flow_style=False)


def _say(report: ExtraDepsReport, message: str) -> None:
    logger.info("%s", message)
    report.messages.append(message)


def solve_extra_deps(
    config_path: Path,
    project: ProjectConfig,
    package_dirs: list[Path],
    *,
    settings: SolverSettings,
    lookup: BuildPlanLookup,
    provisioner: CompilerProvisioner,
    modify: bool = False,
    base_env: dict[str, str] | None = None,
) -> ExtraDepsReport:
    """Find the extra-deps and flags project.yml is missing.

    Raises:
        SolverError: Any pipeline failure (see ``errors``).
    """
    plan = load_build_plan(project.resolver_spec, config_path, lookup)
    already_declared = dict(plan.packages)
    already_declared.update(project.declared_extra_deps())

    compiler_resolver, flags, versions = solve_resolver_spec(
        config_path,
        package_dirs,
        ExplicitCompiler(plan.compiler_version),
        project.user_flags(),
        already_declared,
        settings=settings,
        lookup=lookup,
        provisioner=provisioner,
        base_env=base_env,
    )
    result: SolverResult = {
        name: (version, flags.get(name, {})) for name, version in versions.items()
    }
    outcome = compute_outcome(result, already_declared)

    report = ExtraDepsReport(compiler=compiler_resolver.compiler, outcome=outcome)
    _say(report, MSG_NOT_PERFECT)

    if not outcome.has_changes:
        _say(report, MSG_NO_CHANGES)
        return report

    _say(report, MSG_MANUAL_TWEAK)
    report.report_yaml = render_report(outcome)
    for line in report.report_yaml.splitlines():
        logger.info("%s", line)

    if modify:
        update_project_file(config_path, outcome)
        report.updated_path = config_path
        _say(report, f"Updated {config_path}")
    else:
        _say(report, MSG_MODIFY_HINT)

    return report
