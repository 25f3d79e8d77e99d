"""Validators decide whether a directory is a genuine installation.

Every detector plugs a ``Validator`` into its ``DetectionEngine``. The
engine only needs the asynchronous ``validate(directory)`` coroutine, which
returns an ``InstallationDescriptor`` on a match and ``None`` otherwise.

``ProfileValidator`` implements the common, platform-agnostic algorithm on
top of a ``DetectorProfile``:

1. The directory must exist.
2. Every executable listed in the profile must exist as a file.
3. Every marker directory listed in the profile must exist.
4. The first existing per-user home directory is recorded as ``home``.
5. ``read_version()`` (a hook for subclasses) fills in ``version``.

It exposes the same check through two entry points: ``try_parse`` never
raises for a non-match and is what the scanning engine uses, while
``parse_strict`` raises a distinct error for each way a directory argument
can be wrong and is meant for callers that name a directory explicitly.
"""

from __future__ import annotations

import asyncio
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from androidlib.discovery.models import InstallationDescriptor
from androidlib.discovery.paths import expand_path
from androidlib.discovery.profiles import DetectorProfile
from androidlib.exceptions import (
    DirectoryNotFoundError,
    InvalidDirectoryError,
    NotAnInstallationError,
)


class Validator(ABC):
    """Abstract base class for installation validators."""

    @abstractmethod
    async def validate(self, directory: Path) -> InstallationDescriptor | None:
        """Check one candidate directory.

        Must return None, not raise, when the directory is simply not an
        installation. Unexpected I/O errors may propagate; the engine logs
        them and treats the candidate as "no match".

        Args:
            directory: Absolute candidate directory.

        Returns:
            A descriptor when the directory is a valid installation.
        """


class ProfileValidator(Validator):
    """Validates directories against a ``DetectorProfile``.

    Attributes:
        profile: The platform profile describing a valid installation.
    """

    def __init__(self, profile: DetectorProfile) -> None:
        self.profile = profile

    def executable_paths(self, directory: Path) -> dict[str, Path]:
        """Map each logical executable name to its path under ``directory``."""
        return {
            name: directory.joinpath(*relative.split("/"))
            for name, relative in self.profile.executables.items()
        }

    def missing_entries(self, directory: Path) -> list[str]:
        """Return the profile entries absent from ``directory``."""
        missing = [
            self.profile.executables[name]
            for name, path in self.executable_paths(directory).items()
            if not path.is_file()
        ]
        missing.extend(m for m in self.profile.marker_dirs if not (directory / m).is_dir())
        return missing

    def find_home(self) -> Path | None:
        """Return the first existing per-user home directory, if any."""
        for raw in self.profile.home_dirs:
            home = expand_path(raw)
            if home is not None and home.is_dir():
                return home
        return None

    def read_version(self, directory: Path) -> str | None:
        """Read the installation's version. The base profile knows none."""
        return None

    def _build(self, directory: Path) -> InstallationDescriptor:
        return InstallationDescriptor(
            path=directory,
            home=self.find_home(),
            executables=self.executable_paths(directory),
            version=self.read_version(directory),
        )

    def try_parse(self, directory: Path) -> InstallationDescriptor | None:
        """Return a descriptor for ``directory`` or None if it does not match."""
        if not directory.is_dir() or self.missing_entries(directory):
            return None
        return self._build(directory)

    def parse_strict(self, directory: Any) -> InstallationDescriptor:
        """Build a descriptor for a caller-supplied directory.

        Args:
            directory: Path string (``~`` and ``%VAR%`` are expanded) or
                path-like object.

        Returns:
            The descriptor for the installation.

        Raises:
            InvalidDirectoryError: If ``directory`` is missing, empty, or not
                a string.
            DirectoryNotFoundError: If the directory does not exist.
            NotAnInstallationError: If required executables or marker
                directories are missing.
        """
        if isinstance(directory, os.PathLike):
            directory = os.fspath(directory)
        if not isinstance(directory, str) or not directory:
            raise InvalidDirectoryError()

        path = expand_path(directory)
        if path is None or not path.is_dir():
            raise DirectoryNotFoundError()

        missing = self.missing_entries(path)
        if missing:
            raise NotAnInstallationError(self.profile.name, missing)
        return self._build(path)

    async def validate(self, directory: Path) -> InstallationDescriptor | None:
        return await asyncio.to_thread(self.try_parse, directory)
