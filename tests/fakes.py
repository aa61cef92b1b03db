"""
Fakes for process-level tests: ``cabal`` / ``ghc`` scripts and a
static compiler provisioner.

The scripts only use shell builtins, so they work on a PATH that
contains nothing but the fake bin directory.
"""

import stat
import textwrap
from pathlib import Path

from depsolver.core.services.solver.environment import CompilerProvisioner

PLAN_OUTPUT = [
    "Reading available packages...",
    "Resolving dependencies...",
    "In order, the following would be installed:",
    "text-1.2.1.3 -developer (latest: 1.2.2.0)",
    "aeson-0.9.0.1 +old-locale (new package)",
]


def make_executable(bin_dir: Path, name: str, body: str) -> Path:
    """Write an executable ``#!/bin/sh`` script into ``bin_dir``."""
    bin_dir.mkdir(parents=True, exist_ok=True)
    path = bin_dir / name
    path.write_text("#!/bin/sh\n" + textwrap.dedent(body))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def fake_ghc(bin_dir: Path, version: str = "7.10.3") -> Path:
    return make_executable(bin_dir, "ghc", f"""\
        if [ "$1" = "--numeric-version" ]; then
            printf '%s\\n' "{version}"
            exit 0
        fi
        exit 1
        """)


def fake_cabal(
    bin_dir: Path,
    lines: list[str] | None = None,
    exit_code: int = 0,
    record_dir: Path | None = None,
) -> Path:
    """A cabal that prints ``lines`` and optionally records how it was run.

    With ``record_dir``, the arguments, working directory,
    ``GHC_PACKAGE_PATH`` and a copy of the ``--config-file`` are written
    there before the output is printed.
    """
    lines = PLAN_OUTPUT if lines is None else lines
    body = ""
    if record_dir is not None:
        body += textwrap.dedent(f"""\
            printf '%s\\n' "$@" > '{record_dir}/args'
            pwd > '{record_dir}/cwd'
            printf '%s\\n' "${{GHC_PACKAGE_PATH:-unset}}" > '{record_dir}/ghc_package_path'
            for arg in "$@"; do
                case "$arg" in
                    --config-file=*)
                        cfg="${{arg#--config-file=}}"
                        printf '%s\\n' "$cfg" > '{record_dir}/config_path'
                        while IFS= read -r line; do
                            printf '%s\\n' "$line"
                        done < "$cfg" > '{record_dir}/cabal.config'
                        ;;
                esac
            done
            """)
    if lines:
        body += "printf '%s\\n' " + " ".join(f"'{line}'" for line in lines) + "\n"
    body += f"exit {exit_code}\n"
    return make_executable(bin_dir, "cabal", body)


class StaticProvisioner(CompilerProvisioner):
    """Hands out fixed PATH entries, or fails with a given error."""

    def __init__(self, paths=None, error=None):
        self.paths = paths or []
        self.error = error
        self.calls = []

    def ensure_compiler(self, wanted, policy):
        self.calls.append((wanted, policy))
        if self.error:
            raise self.error
        return list(self.paths)
