"""
Config check use case — validate project.yml and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from depsolver.core.config.loader import (
    ConfigError,
    find_project_file,
    load_document,
    load_project,
    project_root,
)
from depsolver.core.models.identifiers import PackageIdentifier
from depsolver.core.models.project import ProjectConfig
from depsolver.core.models.resolver import CustomSnapshot


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    project: ProjectConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "resolver": self.project.resolver_spec.to_yaml() if self.project else None,
            "package_count": len(self.project.packages) if self.project else 0,
            "extra_dep_count": len(self.project.extra_deps) if self.project else 0,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate project configuration and report issues.

    Args:
        config_path: Optional explicit path to project.yml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_project_file()
    if config_path is None:
        result.errors.append("No project.yml found.")
        return result
    result.config_path = config_path

    try:
        project = load_project(config_path)
        result.project = project
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    root = project_root(config_path)

    # Package directories
    if not project.packages:
        result.warnings.append("No packages listed. There is nothing to solve for.")
    for entry in project.packages:
        pkg_dir = root / entry
        if not pkg_dir.is_dir():
            result.errors.append(f"Package directory does not exist: {entry}")
        elif not any(pkg_dir.glob("*.cabal")):
            result.warnings.append(f"No .cabal file in package directory: {entry}")

    # Duplicate extra-deps
    names = [str(PackageIdentifier.parse(e).name) for e in project.extra_deps]
    dupes = {n for n in names if names.count(n) > 1}
    if dupes:
        result.warnings.append(
            f"Duplicate extra-deps: {', '.join(sorted(dupes))}. The last entry wins."
        )

    resolver = project.resolver_spec
    if isinstance(resolver, CustomSnapshot):
        location = resolver.location.removeprefix("file://")
        if "://" not in location and not (root / location).is_file():
            result.errors.append(f"Custom snapshot not found: {resolver.location}")

    # Keys we do not know are kept, but mention them
    known = {"resolver", "packages", "extra-deps", "flags"}
    extra_keys = sorted(set(load_document(config_path)) - known)
    if extra_keys:
        result.warnings.append(f"Keys not used by depsolver: {', '.join(extra_keys)}")

    result.valid = len(result.errors) == 0
    return result
