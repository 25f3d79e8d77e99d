"""Tests for Android NDK detection and version extraction."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from androidlib import ndk
from androidlib.exceptions import NotAnInstallationError

from tests.discovery.helpers import assert_valid_descriptor, create_ndk


# ---------------------------------------------------------------------------
# Version extraction
# ---------------------------------------------------------------------------


class TestVersion:
    """release.txt wins; source.properties is the fallback."""

    def test_release_txt_first_line(self, tmp_path: Path) -> None:
        install = create_ndk(tmp_path / "android-ndk-r10e", release="r10e\nfoo\n")
        assert ndk.try_parse(install).version == "r10e"

    def test_release_txt_is_trimmed(self, tmp_path: Path) -> None:
        install = create_ndk(tmp_path / "ndk", release="  r9d (64-bit)  \r\n")
        assert ndk.try_parse(install).version == "r9d (64-bit)"

    def test_release_txt_case_insensitive(self, tmp_path: Path) -> None:
        install = create_ndk(tmp_path / "ndk")
        (install / "RELEASE.TXT").write_text("r8e\n")
        assert ndk.read_release_version(install) == "r8e"

    def test_source_properties(self, tmp_path: Path) -> None:
        install = create_ndk(
            tmp_path / "ndk",
            source_properties="Pkg.Desc = Android NDK\nPkg.Revision = 11.0.2\n",
        )
        assert ndk.try_parse(install).version == "11.0.2"

    def test_release_txt_preferred(self, tmp_path: Path) -> None:
        install = create_ndk(
            tmp_path / "ndk", release="r10e\n", source_properties="Pkg.Revision = 11.0.2\n",
        )
        assert ndk.try_parse(install).version == "r10e"

    def test_blank_release_txt_falls_back(self, tmp_path: Path) -> None:
        install = create_ndk(
            tmp_path / "ndk", release="\n", source_properties="Pkg.Revision=25.2.9519653\n",
        )
        assert ndk.try_parse(install).version == "25.2.9519653"

    def test_no_metadata(self, tmp_path: Path) -> None:
        install = create_ndk(tmp_path / "ndk")
        assert ndk.try_parse(install).version is None

    def test_empty_revision_does_not_read_next_line(self, tmp_path: Path) -> None:
        install = create_ndk(
            tmp_path / "ndk", source_properties="Pkg.Revision =\nPkg.Desc = Android NDK\n",
        )
        assert ndk.read_source_properties_version(install) is None

    def test_source_properties_without_revision(self, tmp_path: Path) -> None:
        install = create_ndk(tmp_path / "ndk", source_properties="Pkg.Desc = Android NDK\n")
        assert ndk.read_source_properties_version(install) is None


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


class TestDetect:

    def test_detect_in_explicit_path(self, tmp_path: Path) -> None:
        install = create_ndk(tmp_path / "sdk" / "android-ndk-r10e", release="r10e\n")
        result = asyncio.run(ndk.detect(str(tmp_path / "sdk")))
        assert_valid_descriptor(result, ndk.PROFILE)
        assert result.path == install
        assert result.version == "r10e"
        assert result.executables["ndkbuild"] == install / ndk.PROFILE.executables["ndkbuild"]

    @pytest.mark.parametrize("marker", ["build", "prebuilt", "platforms"])
    def test_missing_marker_is_not_detected(self, tmp_path: Path, marker: str) -> None:
        create_ndk(tmp_path / "ndk", omit=marker)
        assert asyncio.run(ndk.detect(str(tmp_path))) is None

    def test_nothing_found(self, tmp_path: Path) -> None:
        assert asyncio.run(ndk.detect(str(tmp_path))) is None

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        install = create_ndk(tmp_path / "custom-ndk")
        monkeypatch.setenv("ANDROID_NDK", str(install))
        assert asyncio.run(ndk.detect()).path == install

    def test_env_override_order(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        first = create_ndk(tmp_path / "a" / "ndk")
        second = create_ndk(tmp_path / "b" / "ndk")
        monkeypatch.setenv("ANDROID_NDK", str(first))
        monkeypatch.setenv("ANDROID_NDK_HOME", str(second))
        assert asyncio.run(ndk.detect()).path == first

    def test_skip_environment_paths(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANDROID_NDK", str(create_ndk(tmp_path / "ndk")))
        monkeypatch.setenv("ANDROIDLIB_SKIP_ENVIRONMENT_PATHS", "1")
        assert asyncio.run(ndk.detect()) is None

    def test_multiple(self, tmp_path: Path) -> None:
        create_ndk(tmp_path / "sdk" / "android-ndk-r10e")
        create_ndk(tmp_path / "sdk" / "android-ndk-r9d")
        results = asyncio.run(ndk.detect(str(tmp_path / "sdk"), multiple=True))
        assert [r.path.name for r in results] == ["android-ndk-r10e", "android-ndk-r9d"]

    def test_to_dict(self, tmp_path: Path) -> None:
        install = create_ndk(tmp_path / "ndk", release="r10e\n")
        data = asyncio.run(ndk.detect(str(install))).to_dict()
        assert data["path"] == str(install)
        assert data["version"] == "r10e"
        assert data["home"] is None
        assert set(data["executables"]) == {"ndkbuild", "ndkgdb"}


class TestParseStrict:

    def test_reports_missing_entries(self, tmp_path: Path) -> None:
        install = create_ndk(tmp_path / "ndk", omit="platforms")
        with pytest.raises(NotAnInstallationError, match="Android NDK") as info:
            ndk.parse_strict(str(install))
        assert info.value.missing == ["platforms"]

    def test_valid(self, tmp_path: Path) -> None:
        install = create_ndk(tmp_path / "ndk", release="r10e\n")
        assert ndk.parse_strict(str(install)).version == "r10e"
