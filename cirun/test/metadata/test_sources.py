"""Tests for cirun.metadata.sources module."""

from __future__ import annotations

import json
from pathlib import Path

from cirun.core.config import PathsConfig, RunnerConfig
from cirun.core.result import Err, Ok
from cirun.metadata.model import ReleaseBranch
from cirun.metadata.sources import (
    NO_LOCAL_CONFIG_WARNING,
    NO_RELEASE_CONFIG_WARNING,
    EmbeddedSource,
    FragmentSources,
    LocalFileSource,
    RemoteSource,
    parse_release_branches,
    validate_manifest_scripts,
)
from cirun.platform.http import HttpError, MockHttpClient

GLOBAL_URL = "https://config.example/pipeline.config.json"


class TestRemoteSource:
    def test_loads_json(self) -> None:
        http = MockHttpClient()
        http.set_json(GLOBAL_URL, {"npmAuditFailLevel": "high"})
        result = RemoteSource(url=GLOBAL_URL, http=http).load()

        assert isinstance(result, Ok)
        assert result.value.fragment == {"npmAuditFailLevel": "high"}
        assert result.value.warning is None

    def test_failure_is_fatal(self) -> None:
        http = MockHttpClient()
        http.set_json(GLOBAL_URL, HttpError(url=GLOBAL_URL, status=500, message="boom"))
        result = RemoteSource(url=GLOBAL_URL, http=http).load()

        assert isinstance(result, Err)
        assert result.error.kind == "config_load"
        assert result.error.message == f"failed to parse global pipeline config from {GLOBAL_URL}"


class TestLocalFileSource:
    def test_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text(json.dumps({"name": "pkg"}))
        result = LocalFileSource(path, required=True).load()

        assert isinstance(result, Ok)
        assert result.value.data == {"name": "pkg"}

    def test_toml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "release.config.toml"
        path.write_text('branches = ["main", "canary"]\n')
        result = LocalFileSource(path).load()

        assert isinstance(result, Ok)
        assert result.value.data == {"branches": ["main", "canary"]}

    def test_required_missing(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        result = LocalFileSource(path, required=True).load()

        assert isinstance(result, Err)
        assert result.error.message == f"could not find {path}"

    def test_optional_missing_warns(self, tmp_path: Path) -> None:
        path = tmp_path / "pipeline.config.toml"
        result = LocalFileSource(path, absent_warning=NO_LOCAL_CONFIG_WARNING).load()

        assert isinstance(result, Ok)
        assert result.value.fragment is None
        assert result.value.data == {}
        assert result.value.warning is not None
        assert result.value.warning.startswith(NO_LOCAL_CONFIG_WARNING)

    def test_optional_unparseable_is_fatal(self, tmp_path: Path) -> None:
        path = tmp_path / "pipeline.config.toml"
        path.write_text("this is = = not toml")
        result = LocalFileSource(path).load()

        assert isinstance(result, Err)
        assert result.error.message == f"failed to import {path}"

    def test_required_unparseable(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text("{not json")
        result = LocalFileSource(path, required=True).load()

        assert isinstance(result, Err)
        assert result.error.message == f"could not import {path}"

    def test_top_level_must_be_table(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text("[1, 2]")
        result = LocalFileSource(path, required=True).load()

        assert isinstance(result, Err)
        assert result.error.hint == "expected a table at the top level"


def test_embedded_source() -> None:
    source = EmbeddedSource({"a": 1}, name="fixture")
    assert source.label == "fixture"
    result = source.load()
    assert isinstance(result, Ok)
    assert result.value.data == {"a": 1}


def test_for_repository_layout(tmp_path: Path) -> None:
    config = RunnerConfig(
        global_config_url=GLOBAL_URL,
        paths=PathsConfig(local_config="ci.toml", manifest="package.json"),
    )
    sources = FragmentSources.for_repository(tmp_path, config, MockHttpClient())

    assert sources.global_config.label == GLOBAL_URL
    assert sources.local_config.label == str(tmp_path / "ci.toml")
    assert sources.manifest.label == str(tmp_path / "package.json")

    release = sources.release_config.load()
    assert isinstance(release, Ok)
    assert release.value.warning is not None
    assert NO_RELEASE_CONFIG_WARNING in release.value.warning


class TestValidateManifestScripts:
    def test_neither(self) -> None:
        assert validate_manifest_scripts({"scripts": {"build": "x"}}) == Ok(None)

    def test_both(self) -> None:
        scripts = {"build-externals": "x", "test-integration-externals": "y"}
        assert validate_manifest_scripts({"scripts": scripts}) == Ok(None)

    def test_only_one(self) -> None:
        result = validate_manifest_scripts({"scripts": {"build-externals": "x"}})
        assert isinstance(result, Err)
        assert result.error.kind == "validation"
        assert "test-integration-externals" in result.error.message

    def test_no_scripts(self) -> None:
        assert validate_manifest_scripts({}) == Ok(None)


class TestParseReleaseBranches:
    def test_absent(self) -> None:
        assert parse_release_branches({}) == Ok(())

    def test_single_string(self) -> None:
        assert parse_release_branches({"branches": "main"}) == Ok(("main",))

    def test_mixed_entries(self) -> None:
        raw = {
            "branches": [
                "+([0-9])?(.{+([0-9]),x}).x",
                "main",
                {"name": "canary", "channel": "canary", "prerelease": True},
                {"name": "beta", "prerelease": "beta"},
            ]
        }
        result = parse_release_branches(raw)

        assert isinstance(result, Ok)
        assert result.value == (
            "+([0-9])?(.{+([0-9]),x}).x",
            "main",
            ReleaseBranch(name="canary", channel="canary", prerelease=True),
            ReleaseBranch(name="beta", prerelease="beta"),
        )

    def test_entry_without_name(self) -> None:
        result = parse_release_branches({"branches": ["main", {"channel": "x"}]})
        assert isinstance(result, Err)
        assert result.error.message == "invalid release branch entry at index 1"

    def test_not_a_list(self) -> None:
        result = parse_release_branches({"branches": 42})
        assert isinstance(result, Err)
