"""Search-path expansion and candidate enumeration.

Raw search paths may use ``~`` for the user's home directory and
``%VAR%`` placeholders for environment variables (``%ProgramFiles%``,
``%ANDROID_HOME%``). Expansion never raises: a path whose placeholders
cannot be filled, or which does not exist as a directory, is dropped.

Enumerating the immediate subdirectories of a resolved root is the one
operation here that may fail loudly, since a root that exists but cannot be
listed means the detection pass cannot be trusted.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable, Mapping
from pathlib import Path

from androidlib.exceptions import DetectionError

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"%([^%]+)%")


def _lookup(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(name)
    if value is None:
        # Windows variable names are case-insensitive.
        folded = name.upper()
        for key, candidate in environ.items():
            if key.upper() == folded:
                return candidate
    return value


def expand_path(raw: str, environ: Mapping[str, str] | None = None) -> Path | None:
    """Expand ``~`` and ``%VAR%`` placeholders into an absolute path.

    Args:
        raw: Path string as written in a profile or passed by a caller.
        environ: Mapping used for placeholder lookup (defaults to
            ``os.environ``).

    Returns:
        The absolute path, or None when the string is empty or references
        an unset or empty variable.
    """
    if not raw or not raw.strip():
        return None
    env = os.environ if environ is None else environ
    unresolved = False

    def _substitute(match: re.Match[str]) -> str:
        nonlocal unresolved
        value = _lookup(env, match.group(1))
        if not value:
            unresolved = True
            return ""
        return value

    expanded = _PLACEHOLDER.sub(_substitute, raw)
    if unresolved:
        return None
    return Path(os.path.abspath(os.path.expanduser(expanded)))


def resolve(raw_paths: Iterable[str], environ: Mapping[str, str] | None = None) -> list[Path]:
    """Expand raw paths and keep those that exist as directories.

    Input order is preserved and duplicates are kept.

    Args:
        raw_paths: Raw search paths.
        environ: Mapping used for placeholder lookup.

    Returns:
        Absolute paths of existing directories.
    """
    resolved: list[Path] = []
    for raw in raw_paths:
        try:
            path = expand_path(raw, environ)
            if path is not None and path.is_dir():
                resolved.append(path)
        except (OSError, ValueError):
            logger.debug("Dropping malformed search path: %r", raw)
    return resolved


def _subdirectories(directory: Path) -> list[Path]:
    # Sorted so candidate order never depends on directory listing order.
    return sorted(entry for entry in directory.iterdir() if entry.is_dir())


def expand_candidates(roots: Iterable[Path], depth: int) -> list[Path]:
    """List each root followed by its subdirectories up to ``depth`` levels.

    Args:
        roots: Resolved, existing root directories in priority order.
        depth: Number of levels below each root to include.

    Returns:
        Candidate directories, deduplicated, in deterministic order.

    Raises:
        DetectionError: If a root exists but cannot be listed.
    """
    candidates: list[Path] = []
    for root in roots:
        candidates.append(root)
        if depth < 1:
            continue
        try:
            level = _subdirectories(root)
        except OSError as exc:
            raise DetectionError(f"Cannot enumerate search root {root}: {exc}") from exc
        for current_depth in range(1, depth + 1):
            candidates.extend(level)
            if current_depth == depth:
                break
            next_level: list[Path] = []
            for directory in level:
                try:
                    next_level.extend(_subdirectories(directory))
                except OSError:
                    logger.debug("Skipping unreadable directory: %s", directory)
            level = next_level
    return list(dict.fromkeys(candidates))


def nearest_existing_ancestor(path: Path) -> Path | None:
    """Return the closest ancestor of ``path`` that is an existing directory."""
    for parent in path.parents:
        try:
            if parent.is_dir():
                return parent
        except OSError:
            continue
    return None
