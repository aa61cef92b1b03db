"""
Process runner — the single place where external programs are spawned.

Used for the solver, compiler version queries and compiler installs.
The caller always passes the full environment; ``os.environ`` is only
read as a default, never modified.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_TAIL = 2000


def resolve_executable(name: str, env: dict[str, str]) -> Path | None:
    """Find ``name`` on the PATH of ``env`` (not of the current process)."""
    found = shutil.which(name, path=env.get("PATH", ""))
    return Path(found) if found else None


def run_process(
    cmd: list[str],
    *,
    env: dict[str, str] | None = None,
    cwd: Path | str | None = None,
    timeout: int | None = 120,
    binary: bool = False,
) -> dict[str, Any]:
    """Run a command and capture its output.

    A non-zero exit is reported, not raised: callers decide whether the
    output is still useful.

    Args:
        cmd: Command list for ``subprocess.run()``.  ``cmd[0]`` is looked
            up on the PATH of ``env``.
        env: Full environment for the child (default: current process).
        cwd: Working directory for the command.
        timeout: Seconds before giving up, or None for no limit.
        binary: Return stdout as bytes instead of text.

    Returns:
        ``{"ok": bool, "returncode": int, "stdout": ..., "stderr": "...",
        "elapsed_ms": N}``, or ``{"ok": False, "returncode": None,
        "error": "..."}`` when the process could not run at all.
    """
    env = dict(os.environ) if env is None else env

    exe = resolve_executable(cmd[0], env)
    if exe is None:
        return {"ok": False, "returncode": None, "error": f"Executable not found: {cmd[0]}"}
    argv = [str(exe), *cmd[1:]]

    logger.debug("Running: %s (cwd=%s)", " ".join(cmd), cwd)
    start = time.monotonic()
    try:
        result = subprocess.run(
            argv,
            capture_output=True,
            timeout=timeout,
            env=env,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired:
        return {"ok": False, "returncode": None, "error": f"Command timed out ({timeout}s)"}
    except OSError as e:
        logger.exception("Subprocess error: %s", cmd)
        return {"ok": False, "returncode": None, "error": str(e)}

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stderr = result.stderr.decode("utf-8", errors="replace")[-_TAIL:]
    stdout: bytes | str = result.stdout
    if not binary:
        stdout = result.stdout.decode("utf-8", errors="replace")

    return {
        "ok": result.returncode == 0,
        "returncode": result.returncode,
        "stdout": stdout,
        "stderr": stderr,
        "elapsed_ms": elapsed_ms,
    }
