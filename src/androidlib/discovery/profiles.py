"""Static registry of detector profiles, one per (tool, platform) pair.

Each ``DetectorProfile`` describes where a tool is usually installed on one
platform and what a genuine installation looks like on disk: which
executables must exist, which marker subdirectories must exist, and which
per-user data directories to probe for the ``home`` field. The validation
algorithm in ``androidlib.discovery.validator`` is platform-agnostic; all
platform knowledge lives in this table and is selected once at import time
by the detector modules.

Search roots may contain ``~`` and ``%VAR%`` placeholders. Roots whose
placeholders cannot be expanded (e.g. ``%ANDROID_HOME%`` when the variable
is unset) are silently dropped by the path resolver.

Platform Notes:
    Genymotion ships as an application bundle on macOS, so the search roots
    point inside ``Genymotion.app/Contents/MacOS`` and the player lives in a
    nested ``player.app`` bundle. On Linux it is usually unpacked one level
    below ``/opt``, ``/usr`` or the home directory. On Windows both binaries
    carry an ``.exe`` suffix and the NDK scripts a ``.cmd`` suffix.
"""

from __future__ import annotations

import platform as _platform
from dataclasses import dataclass, field

from androidlib.exceptions import UnknownProfileError

# Installations are typically nested one level under a vendor or generic
# root (``/opt/genymotion``, ``~/android-ndk-r10e``), so every resolved root
# is expanded with its immediate subdirectories.
DEFAULT_SEARCH_DEPTH: int = 1

PLATFORMS: tuple[str, ...] = ("macos", "linux", "windows")

_EXE_SUFFIX: dict[str, str] = {"windows": ".exe"}
_CMD_SUFFIX: dict[str, str] = {"windows": ".cmd"}


def current_platform() -> str:
    """Return the current platform identifier ("macos", "linux", "windows")."""
    system = _platform.system().lower()
    if system == "darwin":
        return "macos"
    return "windows" if system == "windows" else "linux"


def exe_name(name: str, platform: str) -> str:
    """Append the platform's binary suffix (``.exe`` on Windows)."""
    return name + _EXE_SUFFIX.get(platform, "")


def cmd_name(name: str, platform: str) -> str:
    """Append the platform's script suffix (``.cmd`` on Windows)."""
    return name + _CMD_SUFFIX.get(platform, "")


@dataclass(frozen=True)
class DetectorProfile:
    """Describes how to find and recognise one tool on one platform.

    Attributes:
        name: Human-readable display name (e.g., "Android NDK").
        short_name: Detector identity, also the cache key (e.g., "ndk").
        platform: Target platform ("macos", "linux" or "windows").
        search_paths: Default search roots, in priority order.
        env_vars: Environment variables holding override paths, in priority
            order. Their values are searched before ``search_paths``.
        executables: Logical executable name mapped to its path relative to
            the installation root (``/``-separated).
        marker_dirs: Subdirectories that must exist in an installation.
        home_dirs: Per-user data directories; the first existing one is
            reported as the installation's ``home``.
        depth: How many directory levels below each root are candidates.
    """

    name: str
    short_name: str
    platform: str
    search_paths: list[str] = field(default_factory=list)
    env_vars: list[str] = field(default_factory=list)
    executables: dict[str, str] = field(default_factory=dict)
    marker_dirs: list[str] = field(default_factory=list)
    home_dirs: list[str] = field(default_factory=list)
    depth: int = DEFAULT_SEARCH_DEPTH


def _genymotion_profile(platform: str) -> DetectorProfile:
    if platform == "macos":
        search_paths = [
            "/Applications/Genymotion.app/Contents/MacOS",
            "~/Applications/Genymotion.app/Contents/MacOS",
        ]
        player = "player.app/Contents/MacOS/player"
    elif platform == "windows":
        search_paths = [
            "%ProgramFiles%\\Genymobile\\Genymotion",
            "%ProgramFiles%\\Genymotion",
            "%ProgramFiles(x86)%\\Genymobile\\Genymotion",
            "%ProgramFiles(x86)%\\Genymotion",
        ]
        player = exe_name("player", platform)
    else:
        search_paths = ["/opt", "/usr", "~"]
        player = "player"

    if platform == "windows":
        home_dirs = ["~/AppData/Local/Genymobile/Genymotion"]
    else:
        home_dirs = ["~/.Genymobile/Genymotion", "~/.Genymotion"]

    return DetectorProfile(
        name="Genymotion",
        short_name="genymotion",
        platform=platform,
        search_paths=search_paths,
        executables={
            "genymotion": exe_name("genymotion", platform),
            "player": player,
        },
        home_dirs=home_dirs,
    )


def _ndk_profile(platform: str) -> DetectorProfile:
    # SDK-bundled NDKs: <sdk>/ndk-bundle is a child of the SDK root and
    # side-by-side installs live in <sdk>/ndk/<version>.
    search_paths = [
        "%ANDROID_HOME%",
        "%ANDROID_SDK_ROOT%",
        "%ANDROID_HOME%/ndk",
        "%ANDROID_SDK_ROOT%/ndk",
    ]
    if platform == "windows":
        search_paths += ["%SystemDrive%\\", "%ProgramFiles%", "%ProgramFiles(x86)%", "~"]
    else:
        search_paths += ["/opt", "/opt/local", "/usr", "/usr/local", "~"]
        if platform == "macos":
            search_paths.append("~/Library/Android")

    return DetectorProfile(
        name="Android NDK",
        short_name="ndk",
        platform=platform,
        search_paths=search_paths,
        env_vars=["ANDROID_NDK", "ANDROID_NDK_HOME", "ANDROID_NDK_ROOT"],
        executables={
            "ndkbuild": cmd_name("ndk-build", platform),
            "ndkgdb": cmd_name("ndk-gdb", platform),
        },
        marker_dirs=["build", "prebuilt", "platforms"],
    )


def _build_profiles() -> list[DetectorProfile]:
    """Build the complete list of detector profiles.

    Returns:
        One profile per (detector, platform) pair.
    """
    profiles: list[DetectorProfile] = []
    for platform in PLATFORMS:
        profiles.append(_ndk_profile(platform))
        profiles.append(_genymotion_profile(platform))
    return profiles


# Module-level constant: the canonical list of all detector profiles.
DETECTOR_PROFILES: list[DetectorProfile] = _build_profiles()


def get_profile(short_name: str, platform: str | None = None) -> DetectorProfile:
    """Look up the profile for a detector on a platform.

    Args:
        short_name: Detector identity ("ndk" or "genymotion").
        platform: Platform identifier; defaults to the running platform.

    Returns:
        The matching ``DetectorProfile``.

    Raises:
        UnknownProfileError: If no profile matches.
    """
    target = platform or current_platform()
    for profile in DETECTOR_PROFILES:
        if profile.short_name == short_name and profile.platform == target:
            return profile
    raise UnknownProfileError(f"No detector profile for {short_name!r} on {target!r}")
