"""
Build plans — which compiler and package versions a resolver implies.

``BuildPlanLookup`` is the boundary to wherever snapshots come from.
``SnapshotStore`` is the default: named snapshots are cached under
``<root>/build-plan/<name>.yaml`` and downloaded on a miss; custom
snapshots are read from a path next to project.yml or from a URL.

Named snapshot format (lts-haskell)::

    system-info:
      ghc-version: 7.10.2
      core-packages:
        base: 4.8.1.0
    packages:
      aeson:
        version: 0.8.0.2

Custom snapshot format::

    compiler: ghc-7.10.3
    packages:
      - aeson-0.9.0.1
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, assert_never

import yaml

from depsolver import __version__
from depsolver.core.config.settings import SolverSettings
from depsolver.core.errors import BuildPlanError
from depsolver.core.models.compiler import CompilerVersion
from depsolver.core.models.identifiers import (
    ConstraintSet,
    PackageIdentifier,
    PackageName,
    Version,
)
from depsolver.core.models.resolver import (
    CustomSnapshot,
    ExplicitCompiler,
    NamedSnapshot,
    ResolverSpec,
)
from depsolver.core.models.solver import BuildPlan

logger = logging.getLogger(__name__)

_URL_SCHEMES = ("http://", "https://")


class BuildPlanLookup(ABC):
    """Source of snapshot build plans."""

    @abstractmethod
    def lookup_snapshot(self, snapshot_id: str) -> BuildPlan:
        """Load a named snapshot such as ``lts-3.4``."""

    @abstractmethod
    def lookup_custom_snapshot(self, config_path: Path, location: str) -> BuildPlan:
        """Load a custom snapshot; relative paths are relative to ``config_path``."""


def fetch_text(url: str, timeout: int = 30) -> str:
    """Download a text document.

    Raises:
        BuildPlanError: On any network or HTTP error.
    """
    logger.info("Downloading build plan from %s", url)
    req = urllib.request.Request(url, headers={"User-Agent": f"depsolver/{__version__}"})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return resp.read().decode("utf-8")
    except (urllib.error.URLError, OSError, UnicodeDecodeError) as e:
        raise BuildPlanError(f"Cannot download build plan {url}: {e}") from e


def _load_yaml(text: str, source: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise BuildPlanError(f"Invalid YAML in build plan {source}: {e}") from e
    if not isinstance(data, dict):
        raise BuildPlanError(f"Build plan {source} is not a YAML mapping")
    return data


def parse_snapshot_plan(data: dict[str, Any], source: str) -> BuildPlan:
    """Parse an lts-haskell style snapshot document."""
    try:
        system_info = data["system-info"]
        compiler = CompilerVersion.ghc(str(system_info["ghc-version"]))
        packages: ConstraintSet = {}
        for name, version in (system_info.get("core-packages") or {}).items():
            packages[PackageName.parse(str(name))] = Version.parse(str(version))
        for name, info in (data.get("packages") or {}).items():
            packages[PackageName.parse(str(name))] = Version.parse(str(info["version"]))
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise BuildPlanError(f"Malformed snapshot {source}: {e}") from e
    return BuildPlan(compiler_version=compiler, packages=packages)


def parse_custom_plan(data: dict[str, Any], source: str) -> BuildPlan:
    """Parse a custom snapshot document."""
    try:
        compiler = CompilerVersion.parse(str(data["compiler"]))
        packages: ConstraintSet = {}
        for entry in data.get("packages") or []:
            ident = PackageIdentifier.parse(str(entry))
            packages[ident.name] = ident.version
    except (KeyError, TypeError, ValueError) as e:
        raise BuildPlanError(f"Malformed custom snapshot {source}: {e}") from e
    return BuildPlan(compiler_version=compiler, packages=packages)


class SnapshotStore(BuildPlanLookup):
    def __init__(self, settings: SolverSettings) -> None:
        self.settings = settings

    def snapshot_path(self, snapshot_id: str) -> Path:
        return self.settings.build_plan_dir / f"{snapshot_id}.yaml"

    def lookup_snapshot(self, snapshot_id: str) -> BuildPlan:
        path = self.snapshot_path(snapshot_id)
        if path.is_file():
            try:
                text = path.read_text(encoding="utf-8")
            except OSError as e:
                raise BuildPlanError(f"Cannot read snapshot {path}: {e}") from e
            return parse_snapshot_plan(_load_yaml(text, str(path)), snapshot_id)

        url = self.settings.snapshot_url.format(name=snapshot_id)
        text = fetch_text(url)
        plan = parse_snapshot_plan(_load_yaml(text, url), snapshot_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
            logger.debug("Cached snapshot %s at %s", snapshot_id, path)
        except OSError as e:
            logger.warning("Could not cache snapshot %s: %s", snapshot_id, e)
        return plan

    def lookup_custom_snapshot(self, config_path: Path, location: str) -> BuildPlan:
        if location.startswith(_URL_SCHEMES):
            text = fetch_text(location)
        else:
            path = config_path.parent / location.removeprefix("file://")
            try:
                text = path.read_text(encoding="utf-8")
            except OSError as e:
                raise BuildPlanError(f"Cannot read custom snapshot {path}: {e}") from e
        return parse_custom_plan(_load_yaml(text, location), location)


def load_build_plan(
    resolver: ResolverSpec,
    config_path: Path,
    lookup: BuildPlanLookup,
) -> BuildPlan:
    """The build plan a resolver implies; a bare compiler has no packages.

    Raises:
        BuildPlanError: A snapshot lookup failed.
    """
    if isinstance(resolver, ExplicitCompiler):
        return BuildPlan(compiler_version=resolver.compiler)
    if isinstance(resolver, NamedSnapshot):
        return lookup.lookup_snapshot(resolver.snapshot_id)
    if isinstance(resolver, CustomSnapshot):
        return lookup.lookup_custom_snapshot(config_path, resolver.location)
    assert_never(resolver)


def resolve_compiler(
    resolver: ResolverSpec,
    config_path: Path,
    lookup: BuildPlanLookup,
) -> CompilerVersion:
    """The compiler version a resolver implies."""
    return load_build_plan(resolver, config_path, lookup).compiler_version


def snapshot_packages(
    resolver: ResolverSpec,
    config_path: Path,
    lookup: BuildPlanLookup,
) -> ConstraintSet:
    """Package versions inherited from the resolver's snapshot, if any."""
    return dict(load_build_plan(resolver, config_path, lookup).packages)
