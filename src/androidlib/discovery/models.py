"""Data models for the discovery module.

Contains the value types that flow through detection and watching: the
validated ``InstallationDescriptor``, the normalised ``DetectionRequest``,
and the tagged ``WatchEvent`` emitted by a ``WatchSession``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Union


@dataclass(frozen=True)
class InstallationDescriptor:
    """A validated installation found in one directory.

    Descriptors are immutable once built and safe to share across threads.
    Two descriptors compare equal when every field is equal, which is how a
    watch session decides whether a re-scan changed anything.

    Attributes:
        path: Absolute installation directory.
        home: First existing per-user data directory, or None.
        executables: Logical executable name mapped to an absolute file path.
            Every entry existed as a file when the descriptor was built.
        version: Version string read from the installation, when known.
    """

    path: Path
    home: Path | None = None
    executables: Mapping[str, Path] = field(default_factory=dict)
    version: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "executables", MappingProxyType(dict(self.executables)))

    def __hash__(self) -> int:
        return hash((self.path, self.home, tuple(sorted(self.executables.items())), self.version))

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "path": str(self.path),
            "home": str(self.home) if self.home is not None else None,
            "executables": {name: str(p) for name, p in self.executables.items()},
            "version": self.version,
        }


# What one detection pass produces: a single descriptor (or None) by
# default, or a list of descriptors when ``multiple`` is requested.
DetectionResult = Union[InstallationDescriptor, list[InstallationDescriptor], None]


def _normalize_paths(
    paths: str | os.PathLike[str] | Sequence[str | os.PathLike[str]] | None,
) -> tuple[str, ...] | None:
    if paths is None:
        return None
    if isinstance(paths, (str, os.PathLike)):
        return (os.fspath(paths),)
    return tuple(os.fspath(p) for p in paths)


@dataclass(frozen=True)
class DetectionRequest:
    """Parameters of one detection (or watch) request.

    Attributes:
        paths: Explicit search paths overriding env vars and platform
            defaults, or None to use them.
        force: Bypass the result cache (the fresh result is still cached).
        watch: The request belongs to a watch session.
        multiple: Keep every match instead of the first one.
    """

    paths: tuple[str, ...] | None = None
    force: bool = False
    watch: bool = False
    multiple: bool = False

    @classmethod
    def create(
        cls,
        paths: str | os.PathLike[str] | Sequence[str | os.PathLike[str]] | None = None,
        *,
        force: bool = False,
        watch: bool = False,
        multiple: bool = False,
    ) -> DetectionRequest:
        """Build a request, accepting a single path or a sequence of paths."""
        return cls(
            paths=_normalize_paths(paths),
            force=force,
            watch=watch,
            multiple=multiple,
        )


class WatchEventKind(str, Enum):
    """Channels a ``WatchSession`` emits on."""

    READY = "ready"
    RESULTS = "results"
    ERROR = "error"


@dataclass(frozen=True)
class WatchEvent:
    """One event emitted by a ``WatchSession``.

    Attributes:
        kind: Which channel the event belongs to.
        result: The current detection result (``READY`` and ``RESULTS``).
        error: The failure cause (``ERROR`` only).
    """

    kind: WatchEventKind
    result: DetectionResult = None
    error: BaseException | None = None
