"""Config fragment sources.

Each of the four fragments (global, local, manifest, release) comes from a
ConfigSource. Loading a source yields one of three outcomes:

- present: `Ok(Loaded(fragment=...))`
- absent but tolerated: `Ok(Loaded(fragment=None, warning=...))`
- fatal: `Err(PipelineError(kind="config_load", ...))`
"""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from cirun.core.config import RunnerConfig
from cirun.core.errors import PipelineError
from cirun.core.result import Err, Ok, Result
from cirun.core.structured import StrDict, as_obj_list, as_str_dict, get_bool, get_str, get_table
from cirun.platform.http import HttpClient

from .model import BranchReleaseEntry, ReleaseBranch

__all__ = [
    "ConfigSource",
    "EmbeddedSource",
    "FragmentSources",
    "Loaded",
    "LocalFileSource",
    "RemoteSource",
    "NO_LOCAL_CONFIG_WARNING",
    "NO_RELEASE_CONFIG_WARNING",
    "PAIRED_SCRIPTS",
    "parse_release_branches",
    "validate_manifest_scripts",
]

NO_LOCAL_CONFIG_WARNING = "no local pipeline config loaded"
NO_RELEASE_CONFIG_WARNING = "no release config loaded"

# Scripts that only make sense together.
PAIRED_SCRIPTS: tuple[tuple[str, str], ...] = (
    ("build-externals", "test-integration-externals"),
)


@dataclass(frozen=True, slots=True)
class Loaded:
    fragment: StrDict | None
    warning: str | None = None

    @property
    def data(self) -> StrDict:
        """The fragment, or an empty one when the source was absent."""
        return self.fragment if self.fragment is not None else {}


class ConfigSource(Protocol):
    @property
    def label(self) -> str: ...

    def load(self) -> Result[Loaded, PipelineError]: ...


@dataclass(frozen=True, slots=True)
class RemoteSource:
    """Operator-controlled config fetched over HTTP. Always required."""

    url: str
    http: HttpClient

    @property
    def label(self) -> str:
        return self.url

    def load(self) -> Result[Loaded, PipelineError]:
        result = self.http.get_json(self.url)
        if isinstance(result, Err):
            return Err(
                PipelineError(
                    kind="config_load",
                    message=f"failed to parse global pipeline config from {self.url}",
                    hint=str(result.error),
                )
            )
        return Ok(Loaded(fragment=result.value))


@dataclass(frozen=True, slots=True)
class LocalFileSource:
    """A JSON or TOML file in the repository.

    A required file must exist. An optional file may be absent, in which case
    `absent_warning` is surfaced; it is still fatal when the file exists but
    cannot be imported.
    """

    path: Path
    required: bool = False
    absent_warning: str | None = None

    @property
    def label(self) -> str:
        return str(self.path)

    def load(self) -> Result[Loaded, PipelineError]:
        if not self.path.is_file():
            if self.required:
                return Err(
                    PipelineError(kind="config_load", message=f"could not find {self.path}")
                )
            warning = self.absent_warning or f"no config loaded from {self.path}"
            return Ok(Loaded(fragment=None, warning=f"{warning} ({self.path} not found)"))

        verb = "could not import" if self.required else "failed to import"
        try:
            raw = self.path.read_text(encoding="utf-8")
            obj: object = tomllib.loads(raw) if self.path.suffix == ".toml" else json.loads(raw)
        except (OSError, UnicodeDecodeError, ValueError) as e:
            # JSONDecodeError and TOMLDecodeError are both ValueErrors.
            return Err(
                PipelineError(kind="config_load", message=f"{verb} {self.path}", hint=str(e))
            )

        data = as_str_dict(obj)
        if data is None:
            return Err(
                PipelineError(
                    kind="config_load",
                    message=f"{verb} {self.path}",
                    hint="expected a table at the top level",
                )
            )
        return Ok(Loaded(fragment=data))


@dataclass(frozen=True, slots=True)
class EmbeddedSource:
    """An in-memory fragment (tests, or configs handed over by a caller)."""

    data: Mapping[str, object]
    name: str = "<embedded>"

    @property
    def label(self) -> str:
        return self.name

    def load(self) -> Result[Loaded, PipelineError]:
        return Ok(Loaded(fragment=dict(self.data)))


@dataclass(frozen=True, slots=True)
class FragmentSources:
    global_config: ConfigSource
    local_config: ConfigSource
    manifest: ConfigSource
    release_config: ConfigSource

    @classmethod
    def for_repository(
        cls, root: Path, config: RunnerConfig, http: HttpClient
    ) -> FragmentSources:
        return cls(
            global_config=RemoteSource(url=config.global_config_url, http=http),
            local_config=LocalFileSource(
                root / config.paths.local_config,
                absent_warning=NO_LOCAL_CONFIG_WARNING,
            ),
            manifest=LocalFileSource(root / config.paths.manifest, required=True),
            release_config=LocalFileSource(
                root / config.paths.release_config,
                absent_warning=NO_RELEASE_CONFIG_WARNING,
            ),
        )


def validate_manifest_scripts(manifest: Mapping[str, object]) -> Result[None, PipelineError]:
    """Reject manifests declaring only one half of a script pair."""
    scripts = get_table(manifest, "scripts") or {}
    for first, second in PAIRED_SCRIPTS:
        if (first in scripts) != (second in scripts):
            present, missing = (first, second) if first in scripts else (second, first)
            return Err(
                PipelineError(
                    kind="validation",
                    message=(
                        f"expected both `{first}` and `{second}` scripts or neither "
                        f"(found `{present}` without `{missing}`)"
                    ),
                )
            )
    return Ok(None)


def parse_release_branches(
    release_config: Mapping[str, object],
) -> Result[tuple[BranchReleaseEntry, ...], PipelineError]:
    """Read the `branches` sequence of the release config."""
    raw = release_config.get("branches")
    if raw is None:
        return Ok(())

    items = as_obj_list(raw)
    if items is None:
        if isinstance(raw, str):
            return Ok((raw,))
        return Err(
            PipelineError(kind="validation", message="release config `branches` must be a list")
        )

    entries: list[BranchReleaseEntry] = []
    for index, item in enumerate(items):
        if isinstance(item, str):
            entries.append(item)
            continue

        table = as_str_dict(item)
        name = get_str(table, "name") if table is not None else None
        if table is None or name is None:
            return Err(
                PipelineError(
                    kind="validation",
                    message=f"invalid release branch entry at index {index}",
                    hint=repr(item),
                )
            )

        prerelease_str = get_str(table, "prerelease")
        prerelease: bool | str = (
            prerelease_str if prerelease_str is not None else bool(get_bool(table, "prerelease"))
        )
        entries.append(
            ReleaseBranch(name=name, channel=get_str(table, "channel"), prerelease=prerelease)
        )

    return Ok(tuple(entries))
