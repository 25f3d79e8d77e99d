"""Per-tool facade over a ``DetectionEngine``.

A ``Detector`` bundles one tool's profile, validator, engine and cache and
exposes the public operations the tool modules re-export (``detect``,
``watch``, ``reset_cache``, ``parse_strict``, ``try_parse``).
"""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from typing import Any

from androidlib.discovery.cache import ResultCache
from androidlib.discovery.engine import DetectionEngine
from androidlib.discovery.models import (
    DetectionRequest,
    DetectionResult,
    InstallationDescriptor,
)
from androidlib.discovery.paths import expand_path
from androidlib.discovery.profiles import DetectorProfile
from androidlib.discovery.validator import ProfileValidator
from androidlib.discovery.watch import WatchSession

PathsArg = str | os.PathLike[str] | Sequence[str | os.PathLike[str]] | None


class Detector:
    """One independently cached, independently watchable detection pipeline.

    Attributes:
        validator: The tool's validator.
        engine: The engine running detection passes; owns the cache.
    """

    def __init__(
        self,
        validator: ProfileValidator,
        *,
        cache: ResultCache | None = None,
    ) -> None:
        self.validator = validator
        self.engine = DetectionEngine(validator.profile, validator, cache or ResultCache())

    @property
    def profile(self) -> DetectorProfile:
        return self.validator.profile

    async def detect(
        self,
        paths: PathsArg = None,
        *,
        force: bool = False,
        multiple: bool = False,
    ) -> DetectionResult:
        """Detect the tool.

        Args:
            paths: One or more directories to search instead of the
                env-var overrides and platform defaults.
            force: Bypass the cache and re-scan (the result is re-cached).
            multiple: Return every installation found instead of the first.

        Returns:
            An ``InstallationDescriptor`` or None, or a list of descriptors
            when ``multiple`` is set.

        Raises:
            DetectionError: If a search root cannot be enumerated.
        """
        request = DetectionRequest.create(paths, force=force, multiple=multiple)
        return await self.engine.detect(request)

    def watch(
        self,
        paths: PathsArg = None,
        *,
        multiple: bool = False,
        debounce: float | None = None,
        observer_factory: Callable[[], Any] | None = None,
    ) -> WatchSession:
        """Detect the tool and keep watching for changes.

        Must be called while an asyncio event loop is running. The caller
        owns the returned session and must ``stop()`` it.

        Args:
            paths: Directories to search and watch (see ``detect``).
            multiple: Track every installation instead of the first.
            debounce: Override the quiet period before re-detecting.
            observer_factory: Alternative watchdog observer constructor.
        """
        request = DetectionRequest.create(paths, force=True, watch=True, multiple=multiple)
        return self.engine.watch(request, debounce=debounce, observer_factory=observer_factory)

    def reset_cache(self) -> None:
        """Clear this tool's cached results (other tools are unaffected)."""
        self.engine.reset_cache()

    def parse_strict(self, directory: Any) -> InstallationDescriptor:
        """Describe the installation in ``directory`` or raise why it is not one.

        Raises:
            InvalidDirectoryError: ``directory`` is missing, empty or not a string.
            DirectoryNotFoundError: The directory does not exist.
            NotAnInstallationError: Required files are missing.
        """
        return self.validator.parse_strict(directory)

    def try_parse(self, directory: Any) -> InstallationDescriptor | None:
        """Describe the installation in ``directory``, or return None.

        Never raises for a bad argument; anything that is not a non-empty
        path string or path-like object yields None.
        """
        if isinstance(directory, os.PathLike):
            directory = os.fspath(directory)
        if not isinstance(directory, str) or not directory:
            return None
        path = expand_path(directory)
        if path is None:
            return None
        return self.validator.try_parse(path)
