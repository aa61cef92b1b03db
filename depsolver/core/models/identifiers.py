"""
Package identifiers — names, versions and flags as validated value types.

These are the keys of every mapping the solver pipeline builds, so they
are immutable, hashable and totally ordered.  Parsing never guesses:
anything that does not match the grammar raises ``ValueError``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_NAME_COMPONENT = re.compile(r"^[A-Za-z0-9]*[A-Za-z][A-Za-z0-9]*$")
_FLAG_NAME = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_-]*$")
_VERSION = re.compile(r"^\d+(\.\d+)*$")


@dataclass(frozen=True, order=True)
class PackageName:
    """A package name such as ``aeson`` or ``http-client-tls``.

    One or more ``-``-separated alphanumeric components, each with at
    least one letter (so ``foo-1`` is never mistaken for a name).
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value or not all(
            _NAME_COMPONENT.match(part) for part in self.value.split("-")
        ):
            raise ValueError(f"Invalid package name: {self.value!r}")

    @classmethod
    def parse(cls, text: str) -> PackageName:
        return cls(text.strip())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, order=True)
class FlagName:
    """A build flag name such as ``developer`` or ``use_fast``."""

    value: str

    def __post_init__(self) -> None:
        if not _FLAG_NAME.match(self.value):
            raise ValueError(f"Invalid flag name: {self.value!r}")

    @classmethod
    def parse(cls, text: str) -> FlagName:
        return cls(text.strip())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, order=True)
class Version:
    """A dotted numeric version, ordered component-wise.

    ``1.2`` and ``1.2.0`` are different versions: the text form is kept
    exactly as parsed.
    """

    parts: tuple[int, ...]

    def __post_init__(self) -> None:
        if not self.parts or any(p < 0 for p in self.parts):
            raise ValueError(f"Invalid version components: {self.parts!r}")

    @classmethod
    def parse(cls, text: str) -> Version:
        text = text.strip()
        if not _VERSION.match(text):
            raise ValueError(f"Invalid version: {text!r}")
        return cls(tuple(int(p) for p in text.split(".")))

    def prefix(self, n: int) -> tuple[int, ...]:
        """First ``n`` components (shorter if the version is shorter)."""
        return self.parts[:n]

    def __str__(self) -> str:
        return ".".join(str(p) for p in self.parts)


@dataclass(frozen=True, order=True)
class PackageIdentifier:
    """``name-version``, e.g. ``text-1.2.1.3``."""

    name: PackageName
    version: Version

    @classmethod
    def parse(cls, text: str) -> PackageIdentifier:
        text = text.strip()
        name, sep, version = text.rpartition("-")
        if not sep:
            raise ValueError(f"Invalid package identifier: {text!r}")
        return cls(PackageName.parse(name), Version.parse(version))

    def __str__(self) -> str:
        return f"{self.name}-{self.version}"


# Type aliases used across the pipeline
FlagAssignment = dict[FlagName, bool]
ConstraintSet = dict[PackageName, Version]
UserFlagMap = dict[PackageName, FlagAssignment]
SolverResult = dict[PackageName, tuple[Version, FlagAssignment]]


def parse_flag_assignment(raw: dict) -> FlagAssignment:
    """Parse a ``{flag: bool}`` mapping as found in ``project.yml``."""
    flags: FlagAssignment = {}
    for key, value in raw.items():
        if not isinstance(value, bool):
            raise ValueError(f"Flag {key!r} must be true or false, got {value!r}")
        flags[FlagName.parse(str(key))] = value
    return flags


def flags_to_plain(flags: UserFlagMap) -> dict[str, dict[str, bool]]:
    """Convert a flag map back to plain strings for YAML/JSON output."""
    return {
        str(pkg): {str(flag): enabled for flag, enabled in sorted(assign.items())}
        for pkg, assign in sorted(flags.items())
    }
