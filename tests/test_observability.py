"""
Tests for logging setup.
"""

import logging
from pathlib import Path

import pytest

from depsolver.core.observability.logging_config import (
    _parse_level,
    resolve_level,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestResolveLevel:
    @pytest.mark.parametrize("flags,expected", [
        ({"debug": True, "verbose": True, "quiet": True}, "DEBUG"),
        ({"verbose": True, "quiet": True}, "INFO"),
        ({"quiet": True}, "ERROR"),
    ])
    def test_switches(self, flags, expected, monkeypatch):
        monkeypatch.setenv("DEPSOLVER_LOG_LEVEL", "CRITICAL")
        assert resolve_level(**flags) == expected

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("DEPSOLVER_LOG_LEVEL", "INFO")
        assert resolve_level() == "INFO"

    def test_default(self, monkeypatch):
        monkeypatch.delenv("DEPSOLVER_LOG_LEVEL", raising=False)
        assert resolve_level() == "WARNING"


class TestSetupLogging:
    def test_console_level(self, monkeypatch):
        monkeypatch.delenv("DEPSOLVER_LOG_FILE", raising=False)
        setup_logging(level="INFO")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_file_handler(self, tmp_path: Path):
        log_file = tmp_path / "depsolver.log"
        setup_logging(level="WARNING", log_file=str(log_file), log_file_level="DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2

        logging.getLogger("depsolver.test").debug("solver details")
        for handler in root.handlers:
            handler.flush()
        assert "solver details" in log_file.read_text()

    def test_file_from_environment(self, tmp_path: Path, monkeypatch):
        log_file = tmp_path / "env.log"
        monkeypatch.setenv("DEPSOLVER_LOG_FILE", str(log_file))
        monkeypatch.setenv("DEPSOLVER_LOG_FILE_LEVEL", "INFO")
        setup_logging(level="ERROR")
        assert logging.getLogger().level == logging.INFO

        logging.getLogger("depsolver.test").info("Solver: using compiler ghc-7.10.3")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "ghc-7.10.3" in log_file.read_text()

    @pytest.mark.parametrize("name,expected", [
        ("debug", logging.DEBUG),
        ("ERROR", logging.ERROR),
        ("nonsense", logging.WARNING),
        (None, logging.WARNING),
    ])
    def test_parse_level(self, name, expected):
        assert _parse_level(name) == expected
