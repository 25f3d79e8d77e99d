"""Shared test helpers for creating fake tool installations.

Each helper lays out a minimal directory tree that passes (or, with
``omit``, deliberately fails) validation for the running platform's
profile. They are used across the discovery, NDK and Genymotion tests.
"""

from __future__ import annotations

from pathlib import Path

from androidlib.discovery.models import InstallationDescriptor
from androidlib.discovery.profiles import DetectorProfile
from androidlib.genymotion import PROFILE as GENYMOTION_PROFILE
from androidlib.ndk import PROFILE as NDK_PROFILE


def create_installation(
    directory: Path, profile: DetectorProfile, omit: str | None = None
) -> Path:
    """Create every executable and marker directory the profile requires.

    Args:
        directory: Installation root to create.
        profile: Profile describing the required layout.
        omit: Relative entry (executable or marker) to leave out.

    Returns:
        The installation root.
    """
    directory.mkdir(parents=True, exist_ok=True)
    for relative in profile.executables.values():
        if relative == omit:
            continue
        exe = directory.joinpath(*relative.split("/"))
        exe.parent.mkdir(parents=True, exist_ok=True)
        exe.write_text("#!/bin/sh\nexit 0\n")
        exe.chmod(0o755)
    for marker in profile.marker_dirs:
        if marker != omit:
            (directory / marker).mkdir(exist_ok=True)
    return directory


def create_genymotion(directory: Path, omit: str | None = None) -> Path:
    """Create a fake Genymotion installation."""
    return create_installation(directory, GENYMOTION_PROFILE, omit)


def create_ndk(
    directory: Path,
    *,
    release: str | None = None,
    source_properties: str | None = None,
    omit: str | None = None,
) -> Path:
    """Create a fake Android NDK, optionally with version metadata files."""
    create_installation(directory, NDK_PROFILE, omit)
    if release is not None:
        (directory / "release.txt").write_text(release)
    if source_properties is not None:
        (directory / "source.properties").write_text(source_properties)
    return directory


def create_genymotion_home(home: Path, relative: str = ".Genymobile/Genymotion") -> Path:
    """Create a Genymotion per-user data directory under ``home``."""
    data = home.joinpath(*relative.split("/"))
    data.mkdir(parents=True, exist_ok=True)
    return data


def assert_valid_descriptor(result: InstallationDescriptor, profile: DetectorProfile) -> None:
    """Check the invariants every detected descriptor must satisfy."""
    assert isinstance(result, InstallationDescriptor)
    assert result.path.is_absolute()
    assert result.path.is_dir()
    assert set(result.executables) == set(profile.executables)
    for exe in result.executables.values():
        assert exe.is_file()
    if result.home is not None:
        assert result.home.is_dir()
