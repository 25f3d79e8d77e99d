"""Genymotion detection.

A Genymotion installation is a directory holding both the ``genymotion``
manager executable and the ``player`` executable. On macOS the directory is
``Genymotion.app/Contents/MacOS`` and the player sits inside a nested
``player.app`` bundle. The first existing per-user data directory
(``~/.Genymobile/Genymotion`` or ``~/.Genymotion``; on Windows
``~/AppData/Local/Genymobile/Genymotion``) is reported as ``home``.

``parse_strict(directory)`` is for callers that already know where
Genymotion should be and want to be told what is wrong; ``detect()`` and
``watch()`` never raise for a directory that merely is not Genymotion.
"""

from __future__ import annotations

from androidlib.discovery.detector import Detector
from androidlib.discovery.profiles import get_profile
from androidlib.discovery.validator import ProfileValidator

PROFILE = get_profile("genymotion")

detector = Detector(ProfileValidator(PROFILE))

detect = detector.detect
watch = detector.watch
reset_cache = detector.reset_cache
parse_strict = detector.parse_strict
try_parse = detector.try_parse
