"""
Resolver info use case — what compiler and packages does the resolver imply?
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from depsolver.core.config.loader import ConfigError, find_project_file, load_project
from depsolver.core.config.settings import SolverSettings
from depsolver.core.errors import SolverError
from depsolver.core.models.compiler import CompilerVersion
from depsolver.core.models.identifiers import ConstraintSet
from depsolver.core.models.resolver import ResolverSpec
from depsolver.core.services.solver import (
    BuildPlanLookup,
    SnapshotStore,
    load_build_plan,
)


@dataclass
class ResolverInfo:
    resolver: ResolverSpec | None = None
    compiler: CompilerVersion | None = None
    packages: ConstraintSet = field(default_factory=dict)
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "resolver": self.resolver.to_yaml() if self.resolver else None,
            "compiler": str(self.compiler) if self.compiler else None,
            "packages": {str(k): str(v) for k, v in sorted(self.packages.items())},
        }


def get_resolver_info(
    settings: SolverSettings,
    config_path: Path | None = None,
    with_packages: bool = False,
    lookup: BuildPlanLookup | None = None,
) -> ResolverInfo:
    """Look up the compiler (and optionally the snapshot packages)."""
    info = ResolverInfo()

    try:
        if config_path is None:
            config_path = find_project_file()
        if config_path is None:
            info.error = "No project.yml found."
            return info
        project = load_project(config_path)
    except ConfigError as e:
        info.error = str(e)
        return info

    lookup = lookup or SnapshotStore(settings)
    info.resolver = project.resolver_spec
    try:
        plan = load_build_plan(info.resolver, config_path, lookup)
        info.compiler = plan.compiler_version
        if with_packages:
            info.packages = dict(plan.packages)
    except SolverError as e:
        info.error = str(e)

    return info
