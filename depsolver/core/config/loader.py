"""
Configuration loader — reads project.yml into the ProjectConfig model.

This is the primary entry point for loading project configuration.
It reads YAML, validates against the Pydantic schema, and returns
a typed model.  ``load_document`` returns the raw mapping for callers
that must rewrite the file without losing unknown keys.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from depsolver.core.models.project import ProjectConfig

logger = logging.getLogger(__name__)

# Default config filename
PROJECT_CONFIG_FILE = "project.yml"


class ConfigError(Exception):
    """Raised when project configuration is invalid or missing."""


def find_project_file(start_dir: Path | None = None) -> Path | None:
    """Search for project.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to project.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / PROJECT_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_document(path: Path) -> dict[str, Any]:
    """Read project.yml as a plain mapping.

    Raises:
        ConfigError: If the file cannot be read or is not a YAML mapping.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    return data


def load_project(path: Path | None = None) -> ProjectConfig:
    """Load and validate project configuration.

    Args:
        path: Explicit path to project.yml. If None, searches upward.

    Returns:
        Validated ProjectConfig model.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_project_file()

    if path is None:
        raise ConfigError(
            f"No {PROJECT_CONFIG_FILE} found. "
            "Create one with a 'resolver' key, or specify --config."
        )

    logger.debug("Loading project config from %s", path)
    data = load_document(path)

    if "resolver" not in data:
        raise ConfigError(f"Missing required key 'resolver' in {path}")

    try:
        project = ProjectConfig.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid project configuration: {e}") from e

    logger.info(
        "Loaded project config with %d packages and %d extra-deps",
        len(project.packages), len(project.extra_deps),
    )
    return project


def project_root(config_path: Path) -> Path:
    """Get the project root directory from a config file path."""
    return config_path.parent.resolve()


def package_dirs(project: ProjectConfig, config_path: Path) -> list[Path]:
    """Resolve the project's local package directories.

    Raises:
        ConfigError: If a declared package directory does not exist.
    """
    root = project_root(config_path)
    dirs: list[Path] = []
    for entry in project.packages:
        path = (root / entry).resolve()
        if not path.is_dir():
            raise ConfigError(f"Package directory does not exist: {entry}")
        dirs.append(path)
    return dirs
