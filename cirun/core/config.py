"""Runner settings loaded from `.github/cirun.toml`.

The settings only locate things (where the global config lives, which files
hold the local fragments, where the metadata artifact is written). They never
carry pipeline policy; policy lives in the fragments themselves.
"""

from __future__ import annotations

import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_table

__all__ = [
    "RunnerConfig",
    "PathsConfig",
    "ConfigError",
    "load_config",
    "load_config_or_default",
    "RUNNER_CONFIG_PATH",
    "DEFAULT_GLOBAL_CONFIG_URL",
    "UPLOADED_METADATA_PATH",
    "DEFAULT_ARTIFACT_DIR",
]

RUNNER_CONFIG_PATH = ".github/cirun.toml"

DEFAULT_GLOBAL_CONFIG_URL = (
    "https://raw.githubusercontent.com/cirun-dev/pipeline-config/main/pipeline.config.json"
)

# Fixed location shared by the collect and download steps (fresh processes).
UPLOADED_METADATA_PATH = Path(tempfile.gettempdir()) / "cirun" / "metadata.json"

# Directory-backed artifact store used when no runner storage is configured.
DEFAULT_ARTIFACT_DIR = Path(tempfile.gettempdir()) / "cirun" / "artifacts"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when runner settings cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class PathsConfig:
    """Fragment locations, relative to the repository root."""

    local_config: str = ".github/pipeline.config.toml"
    manifest: str = "package.json"
    release_config: str = "release.config.toml"


@dataclass(frozen=True, slots=True)
class RunnerConfig:
    global_config_url: str = DEFAULT_GLOBAL_CONFIG_URL
    metadata_path: Path = UPLOADED_METADATA_PATH
    artifact_dir: Path = DEFAULT_ARTIFACT_DIR
    paths: PathsConfig = field(default_factory=PathsConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> RunnerConfig:
        """Create RunnerConfig from a mapping (parsed TOML)."""
        paths: StrDict = get_table(data, "paths") or {}
        metadata_path = get_str(data, "metadata_path")
        artifact_dir = get_str(data, "artifact_dir")

        return cls(
            global_config_url=get_str(data, "global_config_url") or DEFAULT_GLOBAL_CONFIG_URL,
            metadata_path=Path(metadata_path) if metadata_path else UPLOADED_METADATA_PATH,
            artifact_dir=Path(artifact_dir) if artifact_dir else DEFAULT_ARTIFACT_DIR,
            paths=PathsConfig(
                local_config=get_str(paths, "local_config") or ".github/pipeline.config.toml",
                manifest=get_str(paths, "manifest") or "package.json",
                release_config=get_str(paths, "release_config") or "release.config.toml",
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
        data = as_str_dict(tomllib.loads(content.decode("utf-8")))
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[RunnerConfig, ConfigError]:
    """Load runner settings from a TOML file.

    Args:
        path: Path to cirun.toml

    Returns:
        Ok(RunnerConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result
    return Ok(RunnerConfig.from_dict(result.value))


def load_config_or_default(root: Path) -> RunnerConfig:
    """Load `<root>/.github/cirun.toml`, falling back to defaults."""
    result = load_config(root / RUNNER_CONFIG_PATH)
    if isinstance(result, Ok):
        return result.value
    return RunnerConfig()
