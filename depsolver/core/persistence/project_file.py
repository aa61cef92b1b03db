"""
Project file persistence — merge solver changes into project.yml.

The document is re-read right before writing and handled as a plain
mapping, so keys depsolver does not know about survive untouched.
Writes are atomic (write to temp file, then rename).

Merging is additive: existing ``extra-deps`` and ``flags`` entries win,
new packages are added.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Any

import yaml

from depsolver.core.config.loader import ConfigError, load_document
from depsolver.core.errors import ConfigDocumentUnreadable
from depsolver.core.models.identifiers import (
    PackageIdentifier,
    flags_to_plain,
    parse_flag_assignment,
)
from depsolver.core.models.solver import ReconciliationOutcome

logger = logging.getLogger(__name__)

EXTRA_DEPS_KEY = "extra-deps"
FLAGS_KEY = "flags"


def merge_outcome(document: dict[str, Any], outcome: ReconciliationOutcome) -> dict[str, Any]:
    """Return a copy of ``document`` with the outcome merged in.

    Raises:
        ConfigDocumentUnreadable: If existing extra-deps or flags are malformed.
    """
    merged = dict(document)

    existing_deps = {}
    try:
        for entry in document.get(EXTRA_DEPS_KEY) or []:
            ident = PackageIdentifier.parse(str(entry))
            existing_deps[ident.name] = ident.version
    except (TypeError, ValueError) as e:
        raise ConfigDocumentUnreadable(f"Invalid '{EXTRA_DEPS_KEY}' entry: {e}") from e

    deps = dict(outcome.new_dependencies)
    deps.update(existing_deps)
    merged[EXTRA_DEPS_KEY] = [f"{name}-{ver}" for name, ver in sorted(deps.items())]

    existing_flags = document.get(FLAGS_KEY) or {}
    if not isinstance(existing_flags, dict):
        raise ConfigDocumentUnreadable(f"'{FLAGS_KEY}' must be a mapping")
    for pkg, assignment in existing_flags.items():
        if not isinstance(assignment, dict):
            raise ConfigDocumentUnreadable(f"Flags of '{pkg}' must be a mapping")
        try:
            parse_flag_assignment(assignment)
        except ValueError as e:
            raise ConfigDocumentUnreadable(f"Invalid flags for '{pkg}': {e}") from e
    flags = flags_to_plain(outcome.new_flags)
    flags.update(existing_flags)
    if flags or FLAGS_KEY in document:
        merged[FLAGS_KEY] = flags

    return merged


def write_document(document: dict[str, Any], path: Path) -> None:
    """Write a YAML mapping to ``path`` atomically."""
    content = yaml.safe_dump(document, sort_keys=False, default_flow_style=False)

    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".project_", suffix=".tmp")
    tmp = Path(tmp_path)
    try:
        with open(fd, "w", encoding="utf-8") as f:
            f.write(content)
        if path.exists():
            shutil.copymode(path, tmp)
        tmp.replace(path)
        logger.debug("Project file saved to %s", path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise


def update_project_file(path: Path, outcome: ReconciliationOutcome) -> dict[str, Any]:
    """Re-read ``path``, merge ``outcome`` and write it back.

    Returns:
        The document as written.

    Raises:
        ConfigDocumentUnreadable: If the current file cannot be parsed or
            the merged document cannot be written.
    """
    try:
        document = load_document(path)
    except ConfigError as e:
        raise ConfigDocumentUnreadable(str(e)) from e

    merged = merge_outcome(document, outcome)
    try:
        write_document(merged, path)
    except OSError as e:
        raise ConfigDocumentUnreadable(f"Cannot write {path}: {e}") from e
    logger.debug("Merged %d new extra-deps into %s", len(outcome.new_dependencies), path)
    return merged
