"""Tests for manifest entries and entry resolution."""

from __future__ import annotations

import pytest
from pathlib import Path

from fetchdocs.config import RemoteConfig
from fetchdocs.entries import Entry, dest_path_of, load_manifest
from fetchdocs.errors import ManifestError, ReleaseLookupError, ValidationError
from fetchdocs.resolver import (
    is_plugin_name,
    package_name_from_repo_name,
    resolve_entry,
)

from conftest import EDIT_BASE, FETCH_BASE


@pytest.fixture
def remote() -> RemoteConfig:
    return RemoteConfig(fetch_base=FETCH_BASE, edit_base=EDIT_BASE)


def _no_lookup(package: str) -> str:
    raise AssertionError(f"unexpected release lookup for {package}")


CAMERA = {
    "src": {"repoName": "apache/cordova-plugin-camera", "commit": "8.0.0", "path": "README.md"},
    "dest": {"path": "camera/index.md"},
}


class TestEntry:
    def test_from_mapping(self):
        entry = Entry.from_mapping(CAMERA, 3)
        assert entry.src.repo_name == "apache/cordova-plugin-camera"
        assert entry.src.commit == "8.0.0"
        assert entry.src.package_name is None
        assert entry.dest.path == "camera/index.md"
        assert "#3" in entry.label

    @pytest.mark.parametrize(
        "raw, field",
        [
            ({"dest": {"path": "a.md"}}, "src"),
            ({"src": {"path": "README.md"}, "dest": {"path": "a.md"}}, "repoName"),
            ({"src": {"repoName": "o/r"}}, "dest"),
            ({"src": {"repoName": "o/r"}, "dest": {}}, "dest"),
            ({"src": {"repoName": "o/r"}, "dest": {"path": ""}}, "path"),
            ("not a mapping", "src"),
        ],
    )
    def test_missing_required_field(self, raw, field):
        with pytest.raises(ValidationError) as info:
            Entry.from_mapping(raw, 0)
        assert info.value.field == field
        assert field in str(info.value)

    def test_dest_path_ignores_src(self):
        assert dest_path_of({"dest": {"path": "x/y.md"}}) == "x/y.md"

    def test_dest_path_missing(self):
        with pytest.raises(ValidationError, match="'path' in 'dest'"):
            dest_path_of({"src": {"repoName": "o/r"}, "dest": {"other": 1}})


class TestLoadManifest:
    def test_list(self, tmp_path: Path):
        path = tmp_path / "fetch.yml"
        path.write_text(
            "- src:\n    repoName: apache/cordova-plugin-file\n  dest:\n    path: file/index.md\n",
            encoding="utf-8",
        )
        rows = load_manifest(path)
        assert rows == [
            {"src": {"repoName": "apache/cordova-plugin-file"}, "dest": {"path": "file/index.md"}}
        ]

    def test_empty(self, tmp_path: Path):
        path = tmp_path / "fetch.yml"
        path.write_text("", encoding="utf-8")
        assert load_manifest(path) == []

    def test_not_a_list(self, tmp_path: Path):
        path = tmp_path / "fetch.yml"
        path.write_text("src: nope\n", encoding="utf-8")
        with pytest.raises(ManifestError, match="must be a list"):
            load_manifest(path)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ManifestError):
            load_manifest(tmp_path / "absent.yml")

    def test_bad_yaml(self, tmp_path: Path):
        path = tmp_path / "fetch.yml"
        path.write_text("- [unclosed\n", encoding="utf-8")
        with pytest.raises(ManifestError, match="cannot parse"):
            load_manifest(path)


class TestHelpers:
    def test_package_name_from_repo_name(self):
        assert package_name_from_repo_name("apache/cordova-plugin-camera") == "cordova-plugin-camera"

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("cordova-plugin-camera", True),
            ("cordova-plugin-", True),
            ("cordova-android", False),
            ("cordova-docs", False),
        ],
    )
    def test_is_plugin_name(self, name, expected):
        assert is_plugin_name(name) is expected


class TestResolveEntry:
    def test_plugin_entry(self, remote: RemoteConfig):
        spec = resolve_entry(CAMERA, remote, release_lookup=_no_lookup)
        assert spec.download_uri == (
            "https://raw.example.com/apache/cordova-plugin-camera/8.0.0/README.md"
        )
        assert spec.save_path == "camera/index.md"
        assert spec.front_matter == {
            "edit_link": "https://git.example.com/apache/cordova-plugin-camera/blob/8.0.0/README.md",
            "title": "cordova-plugin-camera",
            "plugin_name": "cordova-plugin-camera",
            "plugin_version": "8.0.0",
        }

    def test_non_plugin_has_no_plugin_fields(self, remote: RemoteConfig):
        raw = {
            "src": {"repoName": "apache/cordova-android", "commit": "13.0.0"},
            "dest": {"path": "android.md"},
        }
        spec = resolve_entry(raw, remote, release_lookup=_no_lookup)
        assert spec.front_matter["title"] == "cordova-android"
        assert "plugin_name" not in spec.front_matter
        assert "plugin_version" not in spec.front_matter

    def test_default_path(self, remote: RemoteConfig):
        raw = {"src": {"repoName": "o/repo", "commit": "main"}, "dest": {"path": "r.md"}}
        spec = resolve_entry(raw, remote, release_lookup=_no_lookup)
        assert spec.download_uri.endswith("/o/repo/main/README.md")
        assert spec.front_matter["edit_link"].endswith("/o/repo/blob/main/README.md")

    def test_explicit_package_name(self, remote: RemoteConfig):
        raw = {
            "src": {"repoName": "o/repo", "commit": "1.0.0", "packageName": "cordova-plugin-x"},
            "dest": {"path": "x.md"},
        }
        spec = resolve_entry(raw, remote, release_lookup=_no_lookup)
        assert spec.front_matter["title"] == "cordova-plugin-x"
        assert spec.front_matter["plugin_name"] == "cordova-plugin-x"

    def test_missing_commit_uses_latest_release(self, remote: RemoteConfig):
        seen = []

        def lookup(package: str) -> str:
            seen.append(package)
            return "7.1.0"

        raw = {"src": {"repoName": "apache/cordova-plugin-file"}, "dest": {"path": "f.md"}}
        spec = resolve_entry(raw, remote, release_lookup=lookup)
        assert seen == ["cordova-plugin-file"]
        assert spec.front_matter["plugin_version"] == "7.1.0"
        assert "/7.1.0/README.md" in spec.download_uri

    def test_release_lookup_failure_propagates(self, remote: RemoteConfig):
        def lookup(package: str) -> str:
            raise ReleaseLookupError(package, "offline")

        raw = {"src": {"repoName": "o/r"}, "dest": {"path": "f.md"}}
        with pytest.raises(ReleaseLookupError):
            resolve_entry(raw, remote, release_lookup=lookup)

    def test_missing_repo_name(self, remote: RemoteConfig):
        with pytest.raises(ValidationError):
            resolve_entry({"src": {}, "dest": {"path": "a.md"}}, remote, release_lookup=_no_lookup)

    def test_accepts_entry_object(self, remote: RemoteConfig):
        spec = resolve_entry(Entry.from_mapping(CAMERA), remote, release_lookup=_no_lookup)
        assert spec.entry is not None
        assert spec.save_path == "camera/index.md"
