"""Tests for cirun.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from cirun.core.config import (
    DEFAULT_ARTIFACT_DIR,
    DEFAULT_GLOBAL_CONFIG_URL,
    RUNNER_CONFIG_PATH,
    UPLOADED_METADATA_PATH,
    ConfigError,
    PathsConfig,
    RunnerConfig,
    load_config,
    load_config_or_default,
)
from cirun.core.result import Err, Ok


class TestRunnerConfig:
    def test_defaults(self) -> None:
        config = RunnerConfig()
        assert config.global_config_url == DEFAULT_GLOBAL_CONFIG_URL
        assert config.metadata_path == UPLOADED_METADATA_PATH
        assert config.artifact_dir == DEFAULT_ARTIFACT_DIR
        assert config.paths == PathsConfig()
        assert config.paths.local_config == ".github/pipeline.config.toml"
        assert config.paths.manifest == "package.json"
        assert config.paths.release_config == "release.config.toml"

    def test_frozen(self) -> None:
        config = RunnerConfig()
        with pytest.raises(AttributeError):
            config.global_config_url = "x"  # type: ignore[misc]

    def test_from_dict_overrides(self) -> None:
        config = RunnerConfig.from_dict(
            {
                "global_config_url": "https://example.test/global.json",
                "metadata_path": "/tmp/md.json",
                "paths": {"manifest": "pkg/package.json"},
            }
        )
        assert config.global_config_url == "https://example.test/global.json"
        assert config.metadata_path == Path("/tmp/md.json")
        assert config.paths.manifest == "pkg/package.json"
        assert config.paths.local_config == ".github/pipeline.config.toml"

    def test_from_dict_ignores_wrong_types(self) -> None:
        config = RunnerConfig.from_dict({"global_config_url": 42, "paths": "nope"})
        assert config == RunnerConfig()


class TestLoadConfig:
    def test_load_valid(self, tmp_path: Path) -> None:
        path = tmp_path / "cirun.toml"
        path.write_text('global_config_url = "https://x.test/c.json"\n', encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Ok)
        assert result.value.global_config_url == "https://x.test/c.json"

    def test_load_missing(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "missing.toml")
        assert isinstance(result, Err)
        assert isinstance(result.error, ConfigError)
        assert "not found" in result.error.message

    def test_load_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "cirun.toml"
        path.write_text("this is = = not toml", encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message
        assert result.error.path == path

    def test_or_default_without_file(self, tmp_path: Path) -> None:
        assert load_config_or_default(tmp_path) == RunnerConfig()

    def test_or_default_reads_repo_file(self, tmp_path: Path) -> None:
        path = tmp_path / RUNNER_CONFIG_PATH
        path.parent.mkdir(parents=True)
        path.write_text('[paths]\nrelease_config = ".releaserc.toml"\n', encoding="utf-8")

        config = load_config_or_default(tmp_path)

        assert config.paths.release_config == ".releaserc.toml"
