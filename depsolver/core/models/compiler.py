"""
Compiler identity — which compiler (and version) a resolver implies.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from depsolver.core.models.identifiers import Version

_GHC = re.compile(r"^ghc-(\d+(?:\.\d+)*)$")
_GHCJS = re.compile(r"^ghcjs-(\d+(?:\.\d+)*)_ghc-(\d+(?:\.\d+)*)$")


class CompilerFlavor(str, Enum):
    GHC = "ghc"
    GHCJS = "ghcjs"

    @property
    def executable(self) -> str:
        return self.value


@dataclass(frozen=True, order=True)
class CompilerVersion:
    """A compiler flavor plus version.

    GHCJS releases are tied to the GHC they were built against, so they
    carry that version too (``ghcjs-0.2.0_ghc-7.10.3``).
    """

    flavor: CompilerFlavor
    version: Version
    ghc_version: Version | None = None

    @classmethod
    def parse(cls, text: str) -> CompilerVersion:
        text = text.strip()
        m = _GHC.match(text)
        if m:
            return cls(CompilerFlavor.GHC, Version.parse(m.group(1)))
        m = _GHCJS.match(text)
        if m:
            return cls(
                CompilerFlavor.GHCJS,
                Version.parse(m.group(1)),
                Version.parse(m.group(2)),
            )
        raise ValueError(f"Invalid compiler version: {text!r}")

    @classmethod
    def ghc(cls, version: str) -> CompilerVersion:
        return cls(CompilerFlavor.GHC, Version.parse(version))

    @staticmethod
    def looks_like(text: str) -> bool:
        """True if ``text`` is a compiler string rather than a snapshot name."""
        return bool(_GHC.match(text.strip()) or _GHCJS.match(text.strip()))

    @property
    def is_ghcjs(self) -> bool:
        return self.flavor is CompilerFlavor.GHCJS

    def __str__(self) -> str:
        if self.flavor is CompilerFlavor.GHCJS:
            return f"ghcjs-{self.version}_ghc-{self.ghc_version}"
        return f"ghc-{self.version}"
