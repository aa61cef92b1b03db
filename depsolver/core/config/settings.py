"""
Tool settings — where depsolver keeps indices, compilers and snapshots.

Settings live in ``<root>/config.yml``.  The root is, in order:
``--root`` CLI option, ``DEPSOLVER_ROOT`` env var, ``~/.depsolver``.
CLI switches (``--install-compiler`` etc.) override file values.

Example config.yml::

    package-indices:
      - name: hackage.haskell.org
    install-compiler: true
    compiler-check: newer-minor
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from depsolver.core.config.loader import ConfigError
from depsolver.core.models.solver import CompilerCheck, InstallPolicy

logger = logging.getLogger(__name__)

SETTINGS_FILE = "config.yml"
INDEX_CACHE_FILE = "00-index.tar"

DEFAULT_SNAPSHOT_URL = (
    "https://raw.githubusercontent.com/commercialhaskell/lts-haskell/master/{name}.yaml"
)
DEFAULT_INSTALL_COMMAND = [
    "ghcup", "install", "{flavor}", "{version}", "--isolate", "{prefix}",
]


class PackageIndex(BaseModel):
    """A package index whose local cache is handed to the solver."""

    name: str
    location: str | None = None   # explicit cache file; default under root


class SolverSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    root: Path
    package_indices: list[PackageIndex] = Field(
        default_factory=lambda: [PackageIndex(name="hackage.haskell.org")],
        alias="package-indices",
    )
    install_compiler: bool = Field(default=False, alias="install-compiler")
    system_compiler: bool = Field(default=False, alias="system-compiler")
    compiler_check: CompilerCheck = Field(
        default=CompilerCheck.MATCH_MINOR, alias="compiler-check",
    )
    install_command: list[str] = Field(
        default_factory=lambda: list(DEFAULT_INSTALL_COMMAND),
        alias="install-command",
    )
    snapshot_url: str = Field(default=DEFAULT_SNAPSHOT_URL, alias="snapshot-url")
    solver_timeout: int | None = Field(default=None, alias="solver-timeout")

    @property
    def programs_dir(self) -> Path:
        return self.root / "programs"

    @property
    def build_plan_dir(self) -> Path:
        return self.root / "build-plan"

    def index_cache_path(self, index: PackageIndex) -> Path:
        if index.location:
            return Path(index.location).expanduser()
        return self.root / "indices" / index.name / INDEX_CACHE_FILE

    def install_policy(self) -> InstallPolicy:
        return InstallPolicy(
            allow_install=self.install_compiler,
            prefer_system=self.system_compiler,
            compiler_check=self.compiler_check,
        )


def default_root() -> Path:
    env_root = os.environ.get("DEPSOLVER_ROOT")
    if env_root:
        return Path(env_root).expanduser()
    return Path.home() / ".depsolver"


def load_settings(
    root: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> SolverSettings:
    """Load tool settings from ``<root>/config.yml`` plus CLI overrides.

    Args:
        root: Settings root directory (default: see module docstring).
        overrides: Field-name → value; ``None`` values are ignored.

    Raises:
        ConfigError: If config.yml is unreadable or invalid.
    """
    root = (root or default_root()).resolve()
    path = root / SETTINGS_FILE

    data: dict[str, Any] = {}
    if path.is_file():
        logger.debug("Loading settings from %s", path)
        try:
            loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read settings {path}: {e}") from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(f"Expected a YAML mapping in {path}")
        data = loaded or {}

    data["root"] = root
    for key, value in (overrides or {}).items():
        if value is None:
            continue
        field_info = SolverSettings.model_fields.get(key)
        data[(field_info.alias if field_info else None) or key] = value

    try:
        return SolverSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {path}: {e}") from e
