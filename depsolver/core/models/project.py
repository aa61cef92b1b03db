"""
Project model — the solver-relevant view of project.yml.

Only the keys the pipeline reads are modelled.  Everything else in the
document is accepted (``extra="allow"``) and left alone: persistence
works on the raw mapping, never on a re-serialised model.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator

from depsolver.core.models.identifiers import (
    ConstraintSet,
    PackageIdentifier,
    PackageName,
    UserFlagMap,
    parse_flag_assignment,
)
from depsolver.core.models.resolver import ResolverSpec, parse_resolver


class ProjectConfig(BaseModel):
    """Declared resolver, local packages, extra-deps and flags."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    resolver: str | dict[str, str]
    packages: list[str] = Field(default_factory=lambda: ["."])
    extra_deps: list[str] = Field(default_factory=list, alias="extra-deps")
    flags: dict[str, dict[str, StrictBool]] = Field(default_factory=dict)

    @field_validator("resolver")
    @classmethod
    def _check_resolver(cls, v: str | dict[str, str]) -> str | dict[str, str]:
        parse_resolver(v)
        return v

    @field_validator("extra_deps")
    @classmethod
    def _check_extra_deps(cls, v: list[str]) -> list[str]:
        for entry in v:
            PackageIdentifier.parse(entry)
        return v

    @field_validator("flags")
    @classmethod
    def _check_flags(cls, v: dict[str, dict[str, bool]]) -> dict[str, dict[str, bool]]:
        for pkg, assignment in v.items():
            PackageName.parse(pkg)
            parse_flag_assignment(assignment)
        return v

    @property
    def resolver_spec(self) -> ResolverSpec:
        return parse_resolver(self.resolver)

    def declared_extra_deps(self) -> ConstraintSet:
        """extra-deps as a name → version map (later entries win)."""
        deps: ConstraintSet = {}
        for entry in self.extra_deps:
            ident = PackageIdentifier.parse(entry)
            deps[ident.name] = ident.version
        return deps

    def user_flags(self) -> UserFlagMap:
        return {
            PackageName.parse(pkg): parse_flag_assignment(assignment)
            for pkg, assignment in self.flags.items()
        }
