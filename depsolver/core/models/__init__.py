"""
Domain models for the solver pipeline.

All models are re-exported here for convenient access:

    from depsolver.core.models import PackageName, Version, ProjectConfig
"""

from depsolver.core.models.compiler import CompilerFlavor, CompilerVersion
from depsolver.core.models.identifiers import (
    ConstraintSet,
    FlagAssignment,
    FlagName,
    PackageIdentifier,
    PackageName,
    SolverResult,
    UserFlagMap,
    Version,
    flags_to_plain,
    parse_flag_assignment,
)
from depsolver.core.models.project import ProjectConfig
from depsolver.core.models.resolver import (
    CustomSnapshot,
    ExplicitCompiler,
    NamedSnapshot,
    ResolverSpec,
    parse_resolver,
)
from depsolver.core.models.solver import (
    BuildPlan,
    CompilerCheck,
    InstallPolicy,
    ReconciliationOutcome,
    SolverEnvironment,
)


__all__ = [
    # identifiers.py
    "ConstraintSet",
    "FlagAssignment",
    "FlagName",
    "PackageIdentifier",
    "PackageName",
    "SolverResult",
    "UserFlagMap",
    "Version",
    "flags_to_plain",
    "parse_flag_assignment",
    # compiler.py
    "CompilerFlavor",
    "CompilerVersion",
    # resolver.py
    "CustomSnapshot",
    "ExplicitCompiler",
    "NamedSnapshot",
    "ResolverSpec",
    "parse_resolver",
    # project.py
    "ProjectConfig",
    # solver.py
    "BuildPlan",
    "CompilerCheck",
    "InstallPolicy",
    "ReconciliationOutcome",
    "SolverEnvironment",
]
