"""Detection engine: resolve candidates, validate, reduce, cache.

One ``DetectionEngine`` exists per detector. It combines a
``DetectorProfile`` (where to look), a ``Validator`` (what counts as an
installation) and a ``ResultCache`` (what was found last time).

Detection Algorithm:
    1. Unless the request is forced, return the cached result for an
       identical request.
    2. Collect raw search paths: the request's explicit paths if given;
       otherwise the detector's env-var overrides followed by the platform
       default roots (each source can be switched off via ``Settings``).
    3. Resolve them to existing directories and add the subdirectories up
       to the profile's depth.
    4. Validate every candidate concurrently. A candidate whose validation
       raises is logged and counts as "no match".
    5. Reduce: with ``multiple=False`` keep the first match in candidate
       order (never completion order); otherwise keep all matches.
    6. Cache the outcome, including an explicit None, and return it.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable, Hashable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from androidlib.config import Settings
from androidlib.discovery.cache import ResultCache
from androidlib.discovery.models import (
    DetectionRequest,
    DetectionResult,
    InstallationDescriptor,
)
from androidlib.discovery.paths import expand_candidates, expand_path, resolve
from androidlib.discovery.profiles import DetectorProfile
from androidlib.discovery.validator import Validator

if TYPE_CHECKING:
    from androidlib.discovery.watch import WatchSession

logger = logging.getLogger(__name__)


class DetectionEngine:
    """Runs detection passes for one detector.

    Usage::

        engine = DetectionEngine(profile, ProfileValidator(profile))
        result = await engine.detect(DetectionRequest.create("/opt/genymotion"))

    Attributes:
        profile: The platform profile for this detector.
        validator: Decides whether a candidate is an installation.
        cache: Results of previous passes.
    """

    def __init__(
        self,
        profile: DetectorProfile,
        validator: Validator,
        cache: ResultCache | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.profile = profile
        self.validator = validator
        self.cache = cache if cache is not None else ResultCache()
        self._settings = settings

    @property
    def name(self) -> str:
        return self.profile.short_name

    def settings(self, *, watch: bool = False) -> Settings:
        """Return the fixed settings, or read them from the environment.

        Watch-only settings are read from the environment only when
        ``watch`` is set.
        """
        return self._settings if self._settings is not None else Settings.from_env(watch=watch)

    def cache_key(self, request: DetectionRequest) -> Hashable:
        return (self.name, request.paths, request.multiple)

    def raw_search_paths(self, request: DetectionRequest, settings: Settings) -> list[str]:
        """Collect unexpanded search paths for a request, in priority order."""
        if request.paths is not None:
            return list(request.paths)
        raw: list[str] = []
        if not settings.skip_environment_paths:
            for var in self.profile.env_vars:
                value = os.environ.get(var)
                if value:
                    raw.append(value)
        if not settings.skip_global_search_paths:
            raw.extend(self.profile.search_paths)
        return raw

    def candidates(self, request: DetectionRequest, settings: Settings | None = None) -> list[Path]:
        """Resolve the candidate directories for a request.

        Raises:
            DetectionError: If an existing search root cannot be listed.
        """
        settings = settings or self.settings()
        roots = resolve(self.raw_search_paths(request, settings))
        return expand_candidates(roots, self.profile.depth)

    def watch_targets(self, request: DetectionRequest, settings: Settings | None = None) -> list[Path]:
        """Expanded search roots to watch, including ones that do not exist yet."""
        settings = settings or self.settings()
        targets: list[Path] = []
        for raw in self.raw_search_paths(request, settings):
            try:
                path = expand_path(raw)
            except (OSError, ValueError):
                continue
            if path is not None:
                targets.append(path)
        return list(dict.fromkeys(targets))

    async def _validate(self, candidate: Path) -> InstallationDescriptor | None:
        try:
            return await self.validator.validate(candidate)
        except Exception:
            logger.warning("%s: failed to validate %s", self.name, candidate, exc_info=True)
            return None

    async def detect(self, request: DetectionRequest) -> DetectionResult:
        """Run (or answer from cache) one detection request.

        Args:
            request: What to look for and how.

        Returns:
            The first matching descriptor or None, or a list of every
            matching descriptor when ``request.multiple`` is set.

        Raises:
            DetectionError: If a search root cannot be enumerated.
        """
        key = self.cache_key(request)
        if not request.force:
            entry = self.cache.get(key)
            if entry is not None:
                logger.debug("%s: cache hit", self.name)
                return list(entry.value) if isinstance(entry.value, list) else entry.value

        ticket = self.cache.reserve()
        settings = self.settings()
        candidates = await asyncio.to_thread(self.candidates, request, settings)
        logger.debug("%s: validating %d candidate(s)", self.name, len(candidates))

        # gather() returns results in argument order regardless of which
        # validation finishes first.
        results = await asyncio.gather(*(self._validate(c) for c in candidates))
        matches = [r for r in results if r is not None]

        outcome: DetectionResult
        if request.multiple:
            outcome = matches
        else:
            outcome = matches[0] if matches else None

        self.cache.put(key, outcome, ticket)
        return list(outcome) if isinstance(outcome, list) else outcome

    async def scan(self, request: DetectionRequest) -> DetectionResult:
        """Run a forced detection pass for ``request``."""
        if not request.force:
            request = DetectionRequest(
                paths=request.paths, force=True, watch=request.watch, multiple=request.multiple,
            )
        return await self.detect(request)

    def watch(
        self,
        request: DetectionRequest,
        *,
        debounce: float | None = None,
        observer_factory: Callable[[], Any] | None = None,
    ) -> WatchSession:
        """Start a watch session for ``request``.

        Must be called while an asyncio event loop is running. The session
        performs its initial detection once the caller yields to the loop,
        so handlers registered right after this call see every event.
        """
        from androidlib.discovery.watch import WatchSession

        settings = self.settings(watch=debounce is None)
        session = WatchSession(
            self,
            request,
            targets=self.watch_targets(request, settings),
            debounce=debounce if debounce is not None else settings.watch_debounce,
            observer_factory=observer_factory,
        )
        return session.start()

    def reset_cache(self) -> None:
        """Forget every cached result for this detector."""
        self.cache.invalidate()
