"""
Solve use case — find (and optionally write) missing extra-deps and flags.

Ties together config loading, settings, the solver pipeline and
project file persistence.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from depsolver.core.config.loader import (
    ConfigError,
    find_project_file,
    load_project,
    package_dirs,
)
from depsolver.core.config.settings import SolverSettings
from depsolver.core.errors import SolverError
from depsolver.core.models.project import ProjectConfig
from depsolver.core.services.solver import (
    BuildPlanLookup,
    CompilerProvisioner,
    ExtraDepsReport,
    LocalCompilerProvisioner,
    SnapshotStore,
    solve_extra_deps,
)

logger = logging.getLogger(__name__)


@dataclass
class SolveResult:
    """Result of the solve use case."""

    report: ExtraDepsReport | None = None
    project: ProjectConfig | None = None
    config_path: Path | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            return result

        result["config_path"] = str(self.config_path)
        if self.report:
            result.update(self.report.to_dict())
        return result


def run_solve(
    settings: SolverSettings,
    config_path: Path | None = None,
    modify: bool = False,
    lookup: BuildPlanLookup | None = None,
    provisioner: CompilerProvisioner | None = None,
    base_env: dict[str, str] | None = None,
) -> SolveResult:
    """Run the solver for the project and reconcile with project.yml.

    Args:
        settings: Tool settings (indices, install policy, ...).
        config_path: Optional explicit path to project.yml.
        modify: Write new extra-deps and flags back to project.yml.
        lookup: Snapshot source (default: ``SnapshotStore``).
        provisioner: Compiler source (default: ``LocalCompilerProvisioner``).
        base_env: Environment to start from (default: current process).

    Returns:
        SolveResult with the report, or an error message.
    """
    result = SolveResult()

    try:
        if config_path is None:
            config_path = find_project_file()
        if config_path is None:
            result.error = "No project.yml found."
            return result

        result.config_path = config_path
        project = load_project(config_path)
        result.project = project
        dirs = package_dirs(project, config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    try:
        result.report = solve_extra_deps(
            config_path,
            project,
            dirs,
            settings=settings,
            lookup=lookup or SnapshotStore(settings),
            provisioner=provisioner or LocalCompilerProvisioner(settings, base_env),
            modify=modify,
            base_env=base_env,
        )
    except SolverError as e:
        logger.debug("Solve failed", exc_info=True)
        result.error = str(e)

    return result
