"""
Solver output parser — turn cabal's dry-run report into a SolverResult.

The interesting part of the report looks like::

    Resolving dependencies...
    In order, the following would be installed:
    text-1.2.1.3 (latest: 1.2.2.0) -developer
    aeson-0.8.0.2 +old-locale (new package)

Everything up to and including the ``In order, `` line is ignored.  Each
following line is ``name-version`` plus flag tokens, with parenthesised
notes stripped.  Any line that does not fit fails the whole parse.
"""

from __future__ import annotations

from depsolver.core.errors import UnparseableOutputLines
from depsolver.core.models.identifiers import (
    FlagAssignment,
    FlagName,
    PackageIdentifier,
    PackageName,
    SolverResult,
    Version,
)

PLAN_MARKER = "In order, "
PLAN_HEADER = "In order, the following would be installed:"
NOTHING_TO_DO_MARKER = "All the requested packages are already installed"

_TAIL_LINES = 10


def parse_flag_token(token: str) -> tuple[FlagName, bool]:
    """``-f`` → disabled; ``+f`` and bare ``f`` → enabled."""
    if token.startswith("-"):
        return FlagName.parse(token[1:]), False
    if token.startswith("+"):
        return FlagName.parse(token[1:]), True
    return FlagName.parse(token), True


def parse_plan_line(line: str) -> tuple[PackageName, tuple[Version, FlagAssignment]]:
    """Parse one plan line.

    Raises:
        ValueError: If the identifier or a flag token is malformed.
    """
    tokens = line.split("(", 1)[0].split()
    if not tokens:
        raise ValueError(f"Empty plan line: {line!r}")
    ident = PackageIdentifier.parse(tokens[0])
    flags: FlagAssignment = dict(parse_flag_token(t) for t in tokens[1:])
    return ident.name, (ident.version, flags)


def parse_solver_output(raw: bytes | str, require_marker: bool = False) -> SolverResult:
    """Parse the solver's report.

    Args:
        raw: Solver stdout.
        require_marker: If True, output with no plan section is an error
            unless the solver said there was nothing to install.  If
            False, it is an empty result.

    Raises:
        UnparseableOutputLines: Some plan lines could not be parsed (all
            of them are reported), or the plan is missing in strict mode.
    """
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    lines = text.splitlines()

    start = next(
        (i for i, line in enumerate(lines) if line.startswith(PLAN_MARKER)),
        None,
    )
    if start is None:
        if require_marker and not any(NOTHING_TO_DO_MARKER in line for line in lines):
            raise UnparseableOutputLines(
                lines[-_TAIL_LINES:],
                reason="Solver output contains no build plan",
            )
        return {}

    errors: list[str] = []
    result: SolverResult = {}
    for line in lines[start + 1:]:
        if not line.strip():
            continue
        try:
            name, entry = parse_plan_line(line)
        except ValueError:
            errors.append(line)
            continue
        result[name] = entry

    if errors:
        raise UnparseableOutputLines(errors)
    return result


def render_solver_plan(result: SolverResult) -> str:
    """Render a SolverResult in the solver's own report format."""
    lines = [PLAN_HEADER]
    for name, (version, flags) in sorted(result.items()):
        tokens = [f"{name}-{version}"]
        tokens.extend(
            f"{'+' if enabled else '-'}{flag}" for flag, enabled in sorted(flags.items())
        )
        lines.append(" ".join(tokens))
    return "\n".join(lines) + "\n"
