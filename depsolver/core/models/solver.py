"""
Solver pipeline models — install policy, provisioned environment,
build plans and the reconciliation outcome.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from depsolver.core.models.compiler import CompilerVersion
from depsolver.core.models.identifiers import (
    ConstraintSet,
    UserFlagMap,
    flags_to_plain,
)


class CompilerCheck(str, Enum):
    """How strictly an installed compiler must match the wanted one."""

    MATCH_MINOR = "match-minor"    # first three components equal
    MATCH_EXACT = "match-exact"    # all components equal
    NEWER_MINOR = "newer-minor"    # same major.minor, installed >= wanted


@dataclass(frozen=True)
class InstallPolicy:
    allow_install: bool = False
    prefer_system: bool = False
    compiler_check: CompilerCheck = CompilerCheck.MATCH_MINOR


@dataclass
class SolverEnvironment:
    """Everything the invoker needs to spawn the solver.

    Passed explicitly through the pipeline; the process environment of
    depsolver itself is never modified.
    """

    extra_paths: list[Path]
    env: dict[str, str]
    solver_executable: Path
    compiler: CompilerVersion


@dataclass
class BuildPlan:
    """A snapshot's compiler and package versions."""

    compiler_version: CompilerVersion
    packages: ConstraintSet = field(default_factory=dict)


@dataclass
class ReconciliationOutcome:
    """What the solver found that project.yml does not declare yet."""

    new_dependencies: ConstraintSet = field(default_factory=dict)
    new_flags: UserFlagMap = field(default_factory=dict)

    @property
    def has_changes(self) -> bool:
        return bool(self.new_dependencies)

    def extra_deps_list(self) -> list[str]:
        return [f"{name}-{ver}" for name, ver in sorted(self.new_dependencies.items())]

    def to_dict(self) -> dict:
        result: dict = {"extra-deps": self.extra_deps_list()}
        if self.new_flags:
            result["flags"] = flags_to_plain(self.new_flags)
        return result
