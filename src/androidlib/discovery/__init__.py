"""Detection and watch engine for locally installed developer tools.

Scans candidate directories (explicit paths, env-var overrides, platform
defaults and one level below each), validates each against a detector
profile, caches the result, and optionally keeps watching the filesystem.

Public API::

    from androidlib.discovery import DetectionEngine, DetectionRequest
    from androidlib.discovery import ProfileValidator, get_profile

    profile = get_profile("genymotion")
    engine = DetectionEngine(profile, ProfileValidator(profile))
    result = await engine.detect(DetectionRequest.create("/opt"))
"""

from __future__ import annotations

from androidlib.discovery.cache import CacheEntry, ResultCache
from androidlib.discovery.detector import Detector
from androidlib.discovery.engine import DetectionEngine
from androidlib.discovery.models import (
    DetectionRequest,
    DetectionResult,
    InstallationDescriptor,
    WatchEvent,
    WatchEventKind,
)
from androidlib.discovery.profiles import (
    DEFAULT_SEARCH_DEPTH,
    DETECTOR_PROFILES,
    DetectorProfile,
    get_profile,
)
from androidlib.discovery.validator import ProfileValidator, Validator
from androidlib.discovery.watch import WatchSession, WatchState

__all__ = [
    "CacheEntry",
    "DEFAULT_SEARCH_DEPTH",
    "DETECTOR_PROFILES",
    "DetectionEngine",
    "DetectionRequest",
    "DetectionResult",
    "Detector",
    "DetectorProfile",
    "InstallationDescriptor",
    "ProfileValidator",
    "ResultCache",
    "Validator",
    "WatchEvent",
    "WatchEventKind",
    "WatchSession",
    "WatchState",
    "get_profile",
]
