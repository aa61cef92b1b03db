"""
Tests for environment provisioning — PATH handling, compiler detection
and the local compiler provisioner.
"""

from pathlib import Path

import pytest

from depsolver.core.config.settings import SolverSettings
from depsolver.core.errors import (
    CompilerDetectionFailed,
    EnvironmentProvisionFailed,
    MissingSolverExecutable,
)
from depsolver.core.models import CompilerCheck, CompilerVersion, InstallPolicy
from depsolver.core.services.process_runner import run_process
from depsolver.core.services.solver.environment import (
    LocalCompilerProvisioner,
    build_solver_env,
    detect_compiler_version,
    provision,
)
from tests.fakes import StaticProvisioner, fake_cabal, fake_ghc, make_executable

GHC_7103 = CompilerVersion.ghc("7.10.3")


class TestRunProcess:
    def test_missing_executable(self, base_env):
        result = run_process(["cabal", "--version"], env=base_env)
        assert result["ok"] is False
        assert result["returncode"] is None
        assert "cabal" in result["error"]

    def test_captures_output(self, fake_bin: Path, base_env):
        make_executable(fake_bin, "hello", "printf 'hi\\n'\nexit 3\n")
        result = run_process(["hello"], env=base_env)
        assert result["returncode"] == 3
        assert result["ok"] is False
        assert result["stdout"] == "hi\n"

    def test_binary(self, fake_bin: Path, base_env):
        make_executable(fake_bin, "hello", "printf 'hi\\n'\n")
        assert run_process(["hello"], env=base_env, binary=True)["stdout"] == b"hi\n"


class TestBuildSolverEnv:
    def test_prepends_paths(self):
        env = build_solver_env([Path("/a"), Path("/b")], {"PATH": "/usr/bin", "HOME": "/h"})
        assert env["PATH"] == "/a:/b:/usr/bin"
        assert env["HOME"] == "/h"

    def test_no_existing_path(self):
        assert build_solver_env([Path("/a")], {})["PATH"] == "/a"

    def test_scrubs_package_db_vars(self):
        base = {"PATH": "/usr/bin", "GHC_PACKAGE_PATH": "/x", "HASKELL_DIST_DIR": "d"}
        env = build_solver_env([], base)
        assert "GHC_PACKAGE_PATH" not in env
        assert "HASKELL_DIST_DIR" not in env
        # base mapping is left alone
        assert base["GHC_PACKAGE_PATH"] == "/x"


class TestDetectCompilerVersion:
    def test_ghc(self, fake_bin: Path, base_env):
        fake_ghc(fake_bin, "7.10.3")
        assert detect_compiler_version(GHC_7103.flavor, base_env) == GHC_7103

    def test_missing(self, base_env):
        assert detect_compiler_version(GHC_7103.flavor, base_env) is None

    def test_garbage_output(self, fake_bin: Path, base_env):
        make_executable(fake_bin, "ghc", "printf 'no idea\\n'\n")
        assert detect_compiler_version(GHC_7103.flavor, base_env) is None

    def test_ghcjs(self, fake_bin: Path, base_env):
        make_executable(fake_bin, "ghcjs", """\
            case "$1" in
                --numeric-version) printf '0.2.0\\n' ;;
                --numeric-ghc-version) printf '7.10.3\\n' ;;
                *) exit 1 ;;
            esac
            """)
        wanted = CompilerVersion.parse("ghcjs-0.2.0_ghc-7.10.3")
        assert detect_compiler_version(wanted.flavor, base_env) == wanted


class TestProvision:
    def test_success(self, tmp_path: Path, fake_bin: Path, base_env):
        compiler_bin = tmp_path / "ghc-bin"
        fake_ghc(compiler_bin, "7.10.3")
        fake_cabal(fake_bin)
        provisioner = StaticProvisioner([compiler_bin])

        env = provision(GHC_7103, InstallPolicy(), provisioner, base_env)

        assert env.extra_paths == [compiler_bin]
        assert env.env["PATH"] == f"{compiler_bin}:{fake_bin}"
        assert env.solver_executable == fake_bin / "cabal"
        assert env.compiler == GHC_7103
        assert provisioner.calls == [(GHC_7103, InstallPolicy())]

    def test_reports_installed_version(self, fake_bin: Path, base_env):
        fake_ghc(fake_bin, "7.10.3.1")
        fake_cabal(fake_bin)
        env = provision(GHC_7103, InstallPolicy(), StaticProvisioner(), base_env)
        assert str(env.compiler) == "ghc-7.10.3.1"

    def test_missing_solver(self, fake_bin: Path, base_env):
        fake_ghc(fake_bin)
        with pytest.raises(MissingSolverExecutable):
            provision(GHC_7103, InstallPolicy(), StaticProvisioner(), base_env)

    def test_missing_compiler(self, fake_bin: Path, base_env):
        fake_cabal(fake_bin)
        with pytest.raises(CompilerDetectionFailed):
            provision(GHC_7103, InstallPolicy(), StaticProvisioner(), base_env)

    def test_provisioner_error_propagates(self, base_env):
        error = EnvironmentProvisionFailed("no compiler")
        with pytest.raises(EnvironmentProvisionFailed, match="no compiler"):
            provision(GHC_7103, InstallPolicy(), StaticProvisioner(error=error), base_env)

    def test_os_error_wrapped(self, base_env):
        provisioner = StaticProvisioner(error=PermissionError("denied"))
        with pytest.raises(EnvironmentProvisionFailed) as exc_info:
            provision(GHC_7103, InstallPolicy(), provisioner, base_env)
        assert isinstance(exc_info.value.cause, PermissionError)


class TestLocalCompilerProvisioner:
    def test_missing_without_install(self, settings: SolverSettings, base_env):
        provisioner = LocalCompilerProvisioner(settings, base_env)
        with pytest.raises(EnvironmentProvisionFailed) as exc_info:
            provisioner.ensure_compiler(GHC_7103, InstallPolicy())
        message = str(exc_info.value)
        assert "Compiler version (ghc-7.10.3) required by your resolver" in message
        assert "--install-compiler" in message
        assert "--system-compiler" in message

    def test_managed_install(self, settings: SolverSettings, base_env):
        provisioner = LocalCompilerProvisioner(settings, base_env)
        bin_dir = settings.programs_dir / "ghc-7.10.3" / "bin"
        fake_ghc(bin_dir)
        assert provisioner.managed_bin_dir(GHC_7103) == bin_dir
        assert provisioner.ensure_compiler(GHC_7103, InstallPolicy()) == [bin_dir]

    def test_system_compiler(self, settings: SolverSettings, fake_bin: Path, base_env):
        fake_ghc(fake_bin, "7.10.3")
        provisioner = LocalCompilerProvisioner(settings, base_env)
        assert provisioner.ensure_compiler(GHC_7103, InstallPolicy(prefer_system=True)) == []

    def test_system_compiler_rejected(self, settings: SolverSettings, fake_bin: Path, base_env):
        fake_ghc(fake_bin, "7.8.4")
        provisioner = LocalCompilerProvisioner(settings, base_env)
        with pytest.raises(EnvironmentProvisionFailed):
            provisioner.ensure_compiler(GHC_7103, InstallPolicy(prefer_system=True))

    def test_system_compiler_check_mode(self, settings: SolverSettings, fake_bin: Path, base_env):
        fake_ghc(fake_bin, "7.10.4")
        provisioner = LocalCompilerProvisioner(settings, base_env)
        policy = InstallPolicy(prefer_system=True, compiler_check=CompilerCheck.NEWER_MINOR)
        assert provisioner.ensure_compiler(GHC_7103, policy) == []

    def test_system_compiler_ignored_without_flag(
        self, settings: SolverSettings, fake_bin: Path, base_env,
    ):
        fake_ghc(fake_bin, "7.10.3")
        provisioner = LocalCompilerProvisioner(settings, base_env)
        with pytest.raises(EnvironmentProvisionFailed):
            provisioner.ensure_compiler(GHC_7103, InstallPolicy())

    def test_install(self, tmp_path: Path, fake_bin: Path, base_env):
        settings = SolverSettings(
            root=tmp_path / "root",
            install_command=["fake-install", "{flavor}-{version}", "--prefix", "{prefix}"],
        )
        provisioner = LocalCompilerProvisioner(settings, base_env)
        bin_dir = provisioner.managed_bin_dir(GHC_7103)
        bin_dir.mkdir(parents=True)
        make_executable(fake_bin, "fake-install", f"""\
            [ "$1" = "ghc-7.10.3" ] || exit 2
            [ "$3" = "{bin_dir.parent}" ] || exit 3
            : > "$3/bin/ghc"
            """)

        policy = InstallPolicy(allow_install=True)
        assert provisioner.ensure_compiler(GHC_7103, policy) == [bin_dir]
        assert (bin_dir / "ghc").is_file()

    def test_install_failure(self, settings: SolverSettings, fake_bin: Path, base_env):
        make_executable(fake_bin, "ghcup", "printf 'download failed\\n' >&2\nexit 1\n")
        provisioner = LocalCompilerProvisioner(settings, base_env)
        with pytest.raises(EnvironmentProvisionFailed, match="download failed"):
            provisioner.ensure_compiler(GHC_7103, InstallPolicy(allow_install=True))

    def test_install_produces_nothing(self, settings: SolverSettings, fake_bin: Path, base_env):
        make_executable(fake_bin, "ghcup", "exit 0\n")
        provisioner = LocalCompilerProvisioner(settings, base_env)
        with pytest.raises(EnvironmentProvisionFailed, match="did not produce"):
            provisioner.ensure_compiler(GHC_7103, InstallPolicy(allow_install=True))
