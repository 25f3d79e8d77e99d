"""Android NDK detection.

An NDK installation is a directory holding the ``ndk-build`` and
``ndk-gdb`` scripts plus the ``build``, ``prebuilt`` and ``platforms``
subdirectories. Override paths are read from ``ANDROID_NDK``,
``ANDROID_NDK_HOME`` and ``ANDROID_NDK_ROOT`` before the platform default
roots are scanned.

Version Extraction:
    NDKs up to r10 ship ``release.txt`` whose first line is the release
    name (``r10e``). From r11 on the file is gone and the version is the
    ``Pkg.Revision`` key of ``source.properties`` (``11.0.2``). If neither
    yields a value the version is left as None.

Public API::

    from androidlib import ndk

    info = await ndk.detect()
    if info is not None:
        print(info.version, info.executables["ndkbuild"])
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from androidlib.discovery.detector import Detector
from androidlib.discovery.profiles import get_profile
from androidlib.discovery.validator import ProfileValidator

logger = logging.getLogger(__name__)

RELEASE_FILE = "release.txt"
SOURCE_PROPERTIES_FILE = "source.properties"

_REVISION = re.compile(r"^[ \t]*Pkg\.Revision[ \t]*=[ \t]*(.*)$", re.MULTILINE)


def _find_release_file(directory: Path) -> Path | None:
    # Older NDKs are not consistent about the file name's case.
    for entry in directory.iterdir():
        if entry.name.lower() == RELEASE_FILE and entry.is_file():
            return entry
    return None


def read_release_version(directory: Path) -> str | None:
    """Return the first line of ``release.txt``, or None if absent or blank."""
    release = _find_release_file(directory)
    if release is None:
        return None
    lines = release.read_text(encoding="utf-8", errors="replace").splitlines()
    version = lines[0].strip() if lines else ""
    return version or None


def read_source_properties_version(directory: Path) -> str | None:
    """Return ``Pkg.Revision`` from ``source.properties``, or None."""
    props = directory / SOURCE_PROPERTIES_FILE
    if not props.is_file():
        return None
    match = _REVISION.search(props.read_text(encoding="utf-8", errors="replace"))
    if match is None:
        return None
    return match.group(1).strip() or None


class NDKValidator(ProfileValidator):
    """Profile validator that also reads the NDK version."""

    def read_version(self, directory: Path) -> str | None:
        version = read_release_version(directory) or read_source_properties_version(directory)
        if version is None:
            logger.debug("No version metadata in %s", directory)
        return version


PROFILE = get_profile("ndk")

detector = Detector(NDKValidator(PROFILE))

detect = detector.detect
watch = detector.watch
reset_cache = detector.reset_cache
parse_strict = detector.parse_strict
try_parse = detector.try_parse
