"""
Environment provisioning — make sure a compiler and the solver are runnable.

The provisioning service (``CompilerProvisioner``) only answers "which
extra directories must go on PATH".  ``provision()`` turns that answer
into an explicit ``SolverEnvironment`` and validates it:

    1. the solver executable resolves on the augmented PATH
    2. the compiler on that PATH reports a version

Both checks are fatal when they fail.
"""

from __future__ import annotations

import logging
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path

from depsolver.core.config.settings import SolverSettings
from depsolver.core.errors import (
    CompilerDetectionFailed,
    EnvironmentProvisionFailed,
    MissingSolverExecutable,
)
from depsolver.core.models.compiler import CompilerFlavor, CompilerVersion
from depsolver.core.models.identifiers import Version
from depsolver.core.models.solver import InstallPolicy, SolverEnvironment
from depsolver.core.services.process_runner import resolve_executable, run_process
from depsolver.core.services.solver.compiler_check import check_compiler_version

logger = logging.getLogger(__name__)

SOLVER_EXECUTABLE = "cabal"

# Ambient variables that make the compiler or solver see package
# databases other than the ones we hand them.
SCRUBBED_ENV_VARS = (
    "GHC_PACKAGE_PATH",
    "GHC_ENVIRONMENT",
    "HASKELL_PACKAGE_SANDBOX",
    "HASKELL_PACKAGE_SANDBOXES",
    "HASKELL_DIST_DIR",
)

_NUMERIC_VERSION = re.compile(r"(\d+(?:\.\d+)*)")


class CompilerProvisioner(ABC):
    """Provides a compiler; knows nothing about the solver."""

    @abstractmethod
    def ensure_compiler(
        self, wanted: CompilerVersion, policy: InstallPolicy,
    ) -> list[Path]:
        """Return extra PATH entries that provide ``wanted``.

        Raises:
            EnvironmentProvisionFailed: If no suitable compiler is
                available and none could be installed.
        """


def build_solver_env(extra_paths: list[Path], base_env: dict[str, str]) -> dict[str, str]:
    """Copy ``base_env`` with ``extra_paths`` prepended to PATH."""
    env = {k: v for k, v in base_env.items() if k not in SCRUBBED_ENV_VARS}
    parts = [str(p) for p in extra_paths]
    if env.get("PATH"):
        parts.append(env["PATH"])
    env["PATH"] = os.pathsep.join(parts)
    return env


def _query_version(cmd: list[str], env: dict[str, str]) -> Version | None:
    result = run_process(cmd, env=env, timeout=30)
    if not result["ok"]:
        return None
    match = _NUMERIC_VERSION.search(result["stdout"])
    if not match:
        return None
    return Version.parse(match.group(1))


def detect_compiler_version(
    flavor: CompilerFlavor, env: dict[str, str],
) -> CompilerVersion | None:
    """Ask the compiler on ``env``'s PATH for its version.

    Returns:
        The installed CompilerVersion, or None if there is no such
        compiler or it printed something unexpected.
    """
    exe = flavor.executable
    version = _query_version([exe, "--numeric-version"], env)
    if version is None:
        return None
    if flavor is CompilerFlavor.GHCJS:
        ghc_version = _query_version([exe, "--numeric-ghc-version"], env)
        if ghc_version is None:
            return None
        return CompilerVersion(flavor, version, ghc_version)
    return CompilerVersion(flavor, version)


def missing_compiler_message(wanted: CompilerVersion) -> str:
    return (
        f"Compiler version ({wanted}) required by your resolver specification "
        "cannot be found.\n\n"
        "Please use '--install-compiler' command line switch to automatically "
        "install the compiler or '--system-compiler' to use a suitable "
        "compiler available on your PATH."
    )


class LocalCompilerProvisioner(CompilerProvisioner):
    """Find a compiler on PATH or under ``<root>/programs``, or install one.

    Managed installs live in ``<root>/programs/<compiler>/bin``, e.g.
    ``~/.depsolver/programs/ghc-7.10.3/bin``.
    """

    def __init__(
        self,
        settings: SolverSettings,
        base_env: dict[str, str] | None = None,
    ) -> None:
        self.settings = settings
        self.base_env = dict(os.environ) if base_env is None else base_env

    def managed_bin_dir(self, wanted: CompilerVersion) -> Path:
        return self.settings.programs_dir / str(wanted) / "bin"

    def ensure_compiler(
        self, wanted: CompilerVersion, policy: InstallPolicy,
    ) -> list[Path]:
        if policy.prefer_system:
            installed = detect_compiler_version(wanted.flavor, self.base_env)
            if installed is not None:
                check = check_compiler_version(installed, wanted, policy.compiler_check)
                if check["valid"]:
                    logger.debug("Using system compiler %s", installed)
                    return []
                logger.debug("System compiler rejected: %s", check["message"])

        bin_dir = self.managed_bin_dir(wanted)
        if self._has_managed(bin_dir, wanted):
            logger.debug("Using managed compiler in %s", bin_dir)
            return [bin_dir]

        if not policy.allow_install:
            raise EnvironmentProvisionFailed(missing_compiler_message(wanted))

        self._install(wanted, bin_dir.parent)
        if not self._has_managed(bin_dir, wanted):
            raise EnvironmentProvisionFailed(
                f"Installing {wanted} did not produce a compiler in {bin_dir}"
            )
        return [bin_dir]

    def _has_managed(self, bin_dir: Path, wanted: CompilerVersion) -> bool:
        return (bin_dir / wanted.flavor.executable).is_file()

    def _install(self, wanted: CompilerVersion, prefix: Path) -> None:
        cmd = [
            part.format(
                flavor=wanted.flavor.value,
                version=wanted.version,
                prefix=prefix,
            )
            for part in self.settings.install_command
        ]
        logger.info("Installing %s into %s", wanted, prefix)
        prefix.mkdir(parents=True, exist_ok=True)
        result = run_process(cmd, env=self.base_env, timeout=None)
        if not result["ok"]:
            message = f"Failed to install {wanted}"
            detail = result.get("error") or result.get("stderr")
            if detail:
                message += f": {detail.strip()}"
            raise EnvironmentProvisionFailed(message)


def provision(
    wanted: CompilerVersion,
    policy: InstallPolicy,
    provisioner: CompilerProvisioner,
    base_env: dict[str, str] | None = None,
) -> SolverEnvironment:
    """Provision an environment able to run the solver against ``wanted``.

    Raises:
        EnvironmentProvisionFailed: The compiler could not be provided.
        MissingSolverExecutable: ``cabal`` is not on the augmented PATH.
        CompilerDetectionFailed: The compiler's version cannot be determined.
    """
    base_env = dict(os.environ) if base_env is None else base_env

    try:
        extra_paths = provisioner.ensure_compiler(wanted, policy)
    except OSError as e:
        raise EnvironmentProvisionFailed(f"Cannot provision {wanted}: {e}", cause=e) from e

    env = build_solver_env(extra_paths, base_env)

    solver = resolve_executable(SOLVER_EXECUTABLE, env)
    if solver is None:
        raise MissingSolverExecutable(SOLVER_EXECUTABLE)

    installed = detect_compiler_version(wanted.flavor, env)
    if installed is None:
        raise CompilerDetectionFailed(
            f"Failed to determine the version of '{wanted.flavor.executable}' "
            f"on the search path (wanted {wanted})."
        )
    logger.info("Solver: using compiler %s", installed)

    return SolverEnvironment(
        extra_paths=list(extra_paths),
        env=env,
        solver_executable=solver,
        compiler=installed,
    )
