"""
Resolver specification — the three ways a project names its package set.

    resolver: ghc-7.10.3                 → ExplicitCompiler
    resolver: lts-3.4                    → NamedSnapshot
    resolver:                            → CustomSnapshot
      name: my-snapshot
      location: snapshots/custom.yaml
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from depsolver.core.models.compiler import CompilerVersion


@dataclass(frozen=True)
class ExplicitCompiler:
    compiler: CompilerVersion

    def to_yaml(self) -> str:
        return str(self.compiler)


@dataclass(frozen=True)
class NamedSnapshot:
    snapshot_id: str

    def to_yaml(self) -> str:
        return self.snapshot_id


@dataclass(frozen=True)
class CustomSnapshot:
    name: str
    location: str

    def to_yaml(self) -> dict[str, str]:
        return {"name": self.name, "location": self.location}


ResolverSpec = Union[ExplicitCompiler, NamedSnapshot, CustomSnapshot]


def parse_resolver(raw: Any) -> ResolverSpec:
    """Parse the ``resolver`` value of ``project.yml``.

    Raises:
        ValueError: If the value is neither a string nor a
            ``{name, location}`` mapping.
    """
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise ValueError("Resolver must not be empty")
        if CompilerVersion.looks_like(text):
            return ExplicitCompiler(CompilerVersion.parse(text))
        return NamedSnapshot(text)

    if isinstance(raw, dict):
        location = raw.get("location")
        if not isinstance(location, str) or not location:
            raise ValueError("Custom resolver needs a 'location'")
        return CustomSnapshot(name=str(raw.get("name", location)), location=location)

    raise ValueError(f"Unsupported resolver value: {raw!r}")
