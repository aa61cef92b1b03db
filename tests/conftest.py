"""
Shared test fixtures and configuration.

Process-level tests run against the fake executables in ``fakes.py``
on a PATH that contains nothing else, so a real toolchain on the test
machine never leaks in.
"""

import textwrap
from pathlib import Path

import pytest

from depsolver.core.config.settings import PackageIndex, SolverSettings


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def fake_bin(tmp_path: Path) -> Path:
    """An empty directory for fake executables."""
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.fixture
def base_env(fake_bin: Path) -> dict[str, str]:
    """An environment whose PATH only contains ``fake_bin``."""
    return {"PATH": str(fake_bin), "HOME": str(fake_bin.parent)}


@pytest.fixture
def settings(tmp_path: Path) -> SolverSettings:
    """Settings rooted in a temp dir with one package index cache."""
    root = tmp_path / "root"
    index = root / "indices" / "hackage.haskell.org" / "00-index.tar"
    index.parent.mkdir(parents=True)
    index.write_bytes(b"fake index")
    return SolverSettings(
        root=root,
        package_indices=[PackageIndex(name="hackage.haskell.org")],
    )


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A project with one local package and a project.yml."""
    proj = tmp_path / "proj"
    (proj / "mylib").mkdir(parents=True)
    (proj / "mylib" / "mylib.cabal").write_text("name: mylib\nversion: 0.1.0.0\n")
    (proj / "project.yml").write_text(textwrap.dedent("""\
        # managed by hand
        resolver: ghc-7.10.3
        packages:
          - mylib
        extra-deps:
          - text-1.2.1.3
        flags:
          text:
            developer: false
        custom-key:
          keep: me
    """))
    return proj
