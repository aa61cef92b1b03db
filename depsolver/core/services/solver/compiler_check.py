"""
Compiler check — does an installed compiler satisfy the wanted one (pure).

No I/O, no subprocess.
"""

from __future__ import annotations

from depsolver.core.models.compiler import CompilerVersion
from depsolver.core.models.solver import CompilerCheck


def check_compiler_version(
    installed: CompilerVersion,
    wanted: CompilerVersion,
    mode: CompilerCheck = CompilerCheck.MATCH_MINOR,
) -> dict:
    """Validate an installed compiler against the wanted one.

    Check modes:
        - ``match-minor``: first three version components equal
        - ``match-exact``: every component equal
        - ``newer-minor``: same major.minor, installed >= wanted

    GHCJS must additionally be built against the same GHC (exact match).

    Returns:
        ``{"valid": True}`` or ``{"valid": False, "message": "..."}``
    """
    if installed.flavor is not wanted.flavor:
        return {
            "valid": False,
            "message": f"Compiler flavor mismatch: {installed} vs {wanted}.",
        }

    if wanted.is_ghcjs and installed.ghc_version != wanted.ghc_version:
        return {
            "valid": False,
            "message": (
                f"{installed} is built against ghc-{installed.ghc_version}, "
                f"need ghc-{wanted.ghc_version}."
            ),
        }

    have, want = installed.version, wanted.version

    if mode is CompilerCheck.MATCH_EXACT:
        if have == want:
            return {"valid": True}
        return {
            "valid": False,
            "message": f"Version {have} != {want}. Exact match required.",
        }

    if mode is CompilerCheck.NEWER_MINOR:
        if have.prefix(2) == want.prefix(2) and have >= want:
            return {"valid": True}
        return {
            "valid": False,
            "message": f"Version {have} is not a newer minor release of {want}.",
        }

    if have.prefix(3) == want.prefix(3):
        return {"valid": True}
    return {
        "valid": False,
        "message": f"Version {have} does not match {want} on major.minor.patch.",
    }
