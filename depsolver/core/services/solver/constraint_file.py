"""
Constraint file — render the ``cabal.config`` handed to the solver.

The solver only ever sees local copies of the package indices, bound to
an unreachable URL so it can never go to the network::

    remote-repo-cache: /tmp/cabal-solver-x1y2
    remote-repo: hackage.haskell.org:http://0.0.0.0/fake-url
    constraint: aeson==0.8.0.2
    constraint: text==1.2.1.3
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Iterable
from pathlib import Path

from depsolver.core.config.settings import INDEX_CACHE_FILE, PackageIndex
from depsolver.core.models.identifiers import ConstraintSet

logger = logging.getLogger(__name__)

PLACEHOLDER_URL = "http://0.0.0.0/fake-url"


def stage_index_cache(source: Path, dest_dir: Path) -> bool:
    """Copy an index cache file into ``dest_dir``.

    Returns:
        True if the copy succeeded, False otherwise.  Never raises.
    """
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, dest_dir / INDEX_CACHE_FILE)
    except OSError as e:
        logger.debug("Could not stage index %s: %s", source, e)
        return False
    return True


def build_constraint_file(
    temp_dir: Path,
    package_indices: Iterable[PackageIndex],
    constraints: ConstraintSet,
    index_locator: Callable[[PackageIndex], Path],
) -> str:
    """Build the solver config text, staging index caches under ``temp_dir``.

    Args:
        temp_dir: Cache root for the solver; created if missing.
        package_indices: Indices to expose to the solver, in order.
        constraints: Pinned versions, emitted as ``==`` constraints.
        index_locator: Maps an index to its local cache file.

    Raises:
        OSError: If ``temp_dir`` cannot be created.
    """
    temp_dir.mkdir(parents=True, exist_ok=True)

    lines = [f"remote-repo-cache: {temp_dir}"]
    for index in package_indices:
        staged = stage_index_cache(index_locator(index), temp_dir / index.name)
        if not staged:
            # A missing index only leaves the solver with less to choose from.
            logger.warning("Package index '%s' not available to the solver", index.name)
        lines.append(f"remote-repo: {index.name}:{PLACEHOLDER_URL}")

    for name, version in sorted(constraints.items()):
        lines.append(f"constraint: {name}=={version}")

    return "\n".join(lines) + "\n"
