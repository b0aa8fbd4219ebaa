"""CI artifact storage.

`LocalArtifactStore` keeps each artifact as a directory named after its key,
with the retention deadline recorded next to the files. It stands in for the
runner's artifact service when jobs share a filesystem (self-hosted runners,
local dry runs).
"""

from __future__ import annotations

import json
import shutil
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Protocol

from cirun.core.errors import PipelineError
from cirun.core.result import Err, Ok, Result

__all__ = ["ArtifactStore", "LocalArtifactStore", "MockArtifactStore"]

_MANIFEST = ".artifact.json"


class ArtifactStore(Protocol):
    def upload(
        self, paths: Sequence[Path], key: str, retention_days: int
    ) -> Result[None, PipelineError]: ...

    def download(self, key: str, dest: Path) -> Result[list[Path], PipelineError]: ...


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class LocalArtifactStore:
    root: Path
    clock: Callable[[], datetime] = _now

    def _dir(self, key: str) -> Path:
        return self.root / key

    def upload(
        self, paths: Sequence[Path], key: str, retention_days: int
    ) -> Result[None, PipelineError]:
        target = self._dir(key)
        try:
            if target.exists():
                shutil.rmtree(target)
            target.mkdir(parents=True)
            for path in paths:
                if path.is_dir():
                    shutil.copytree(path, target / path.name)
                else:
                    shutil.copy2(path, target / path.name)
            expires = self.clock() + timedelta(days=retention_days)
            (target / _MANIFEST).write_text(
                json.dumps({"key": key, "expires": expires.isoformat()}), encoding="utf-8"
            )
        except OSError as e:
            return Err(
                PipelineError(kind="artifact", message=f"failed to upload artifact {key}", hint=str(e))
            )
        return Ok(None)

    def _expired(self, target: Path) -> bool:
        try:
            info = json.loads((target / _MANIFEST).read_text(encoding="utf-8"))
            expires = datetime.fromisoformat(str(info["expires"]))
        except (OSError, ValueError, KeyError):
            return False
        return self.clock() >= expires

    def download(self, key: str, dest: Path) -> Result[list[Path], PipelineError]:
        target = self._dir(key)
        if not target.is_dir() or self._expired(target):
            return Err(PipelineError(kind="artifact", message=f"no artifact named {key}"))

        restored: list[Path] = []
        try:
            dest.mkdir(parents=True, exist_ok=True)
            for item in sorted(target.iterdir()):
                if item.name == _MANIFEST:
                    continue
                out = dest / item.name
                if item.is_dir():
                    shutil.copytree(item, out, dirs_exist_ok=True)
                else:
                    shutil.copy2(item, out)
                restored.append(out)
        except OSError as e:
            return Err(
                PipelineError(
                    kind="artifact", message=f"failed to download artifact {key}", hint=str(e)
                )
            )
        return Ok(restored)


@dataclass(slots=True)
class MockArtifactStore:
    """In-memory store: key -> {file name: content}."""

    files: dict[str, dict[str, str]] = field(default_factory=dict)
    uploads: list[tuple[str, tuple[str, ...], int]] = field(default_factory=list)

    def upload(
        self, paths: Sequence[Path], key: str, retention_days: int
    ) -> Result[None, PipelineError]:
        self.uploads.append((key, tuple(p.name for p in paths), retention_days))
        stored = self.files.setdefault(key, {})
        for path in paths:
            if path.is_file():
                stored[path.name] = path.read_text(encoding="utf-8")
        return Ok(None)

    def download(self, key: str, dest: Path) -> Result[list[Path], PipelineError]:
        stored = self.files.get(key)
        if stored is None:
            return Err(PipelineError(kind="artifact", message=f"no artifact named {key}"))
        dest.mkdir(parents=True, exist_ok=True)
        restored: list[Path] = []
        for name, content in stored.items():
            out = dest / name
            out.write_text(content, encoding="utf-8")
            restored.append(out)
        return Ok(restored)
