"""Shared fixtures for androidlib tests."""

import pathlib
from collections.abc import Iterator

import pytest

from androidlib import genymotion, ndk

_ISOLATED_VARS = (
    "ANDROID_NDK",
    "ANDROID_NDK_HOME",
    "ANDROID_NDK_ROOT",
    "ANDROID_HOME",
    "ANDROID_SDK_ROOT",
    "ANDROIDLIB_SKIP_ENVIRONMENT_PATHS",
    "ANDROIDLIB_WATCH_DEBOUNCE",
)


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[pathlib.Path]:
    """Keep tests away from real installations and shared caches.

    Platform default roots are skipped, NDK override variables are removed,
    and the home directory points at an empty temporary directory.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.setenv("ANDROIDLIB_SKIP_GLOBAL_SEARCH_PATHS", "1")
    for name in _ISOLATED_VARS:
        monkeypatch.delenv(name, raising=False)
    ndk.reset_cache()
    genymotion.reset_cache()
    yield home
    ndk.reset_cache()
    genymotion.reset_cache()


@pytest.fixture
def home(isolated_environment: pathlib.Path) -> pathlib.Path:
    """The temporary home directory used by the current test."""
    return isolated_environment
