"""
Solver errors — everything that can abort a solve.

None of these are retried: each means either a missing external
dependency or output that cannot be trusted.
"""

from __future__ import annotations


class SolverError(Exception):
    """Base class for solver pipeline failures."""


class MissingSolverExecutable(SolverError):
    def __init__(self, executable: str = "cabal") -> None:
        self.executable = executable
        super().__init__(
            f"Solver executable '{executable}' not found on the search path. "
            f"Install {executable} (cabal-install) to use the solver."
        )


class CompilerDetectionFailed(SolverError):
    """The provisioned environment has no usable compiler we can identify."""


class EnvironmentProvisionFailed(SolverError):
    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)


class UnparseableOutputLines(SolverError):
    """The solver printed lines we could not understand.

    Carries every offending line so format drift can be diagnosed in
    one pass.
    """

    def __init__(self, lines: list[str], reason: str = "") -> None:
        self.lines = list(lines)
        head = reason or "Could not parse solver output"
        detail = "\n".join(f"  {line}" for line in self.lines)
        super().__init__(f"{head}:\n{detail}" if detail else head)


class ConfigDocumentUnreadable(SolverError):
    """project.yml could not be re-read or written back with the changes."""


class BuildPlanError(SolverError):
    """A snapshot or custom build plan could not be loaded."""


class SolverInvocationFailed(SolverError):
    """The solver process could not be started or timed out."""
