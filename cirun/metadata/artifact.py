"""Metadata artifact codec.

The collect step writes Metadata as JSON to a well-known path so a later job,
running in a fresh process, can read it back verbatim. Keys use the camelCase
wire names. Skip patterns travel as `{"source": ..., "flags": ...}` pairs.
"""

from __future__ import annotations

import json
import re
from dataclasses import fields
from pathlib import Path

from cirun.core.errors import PipelineError
from cirun.core.result import Err, Ok, Result
from cirun.core.structured import StrDict, as_obj_list, as_str_dict, get_str

from .directives import compile_pattern, pattern_flags
from .model import Committer, Metadata, ReleaseBranch, wire_name
from .sources import parse_release_branches

__all__ = ["from_wire", "read_metadata", "to_wire", "write_metadata"]


def _encode(value: object) -> object:
    match value:
        case re.Pattern():
            return {"source": value.pattern, "flags": pattern_flags(value)}
        case Committer(name=name, email=email):
            return {"name": name, "email": email}
        case ReleaseBranch(name=name, channel=channel, prerelease=prerelease):
            entry: StrDict = {"name": name, "prerelease": prerelease}
            if channel is not None:
                entry["channel"] = channel
            return entry
        case tuple():
            return [_encode(item) for item in value]
        case _:
            return value


def to_wire(metadata: Metadata) -> StrDict:
    return {wire_name(f.name): _encode(getattr(metadata, f.name)) for f in fields(metadata)}


def _decode_pattern(value: object) -> re.Pattern[str] | None:
    table = as_str_dict(value)
    if table is None:
        return None
    source = table.get("source")
    if not isinstance(source, str):
        return None
    return compile_pattern(source, get_str(table, "flags") or "")


def _decode_scalar(key: str, annotation: str, raw: object) -> object:
    # Annotations are strings under `from __future__ import annotations`.
    base = annotation.removesuffix(" | None")
    if raw is None:
        if base != annotation:
            return None
        raise ValueError(f"`{key}` must not be null")
    match base:
        case "bool":
            valid = isinstance(raw, bool)
        case "int":
            valid = isinstance(raw, int) and not isinstance(raw, bool)
        case "str":
            valid = isinstance(raw, str)
        case _:
            valid = False
    if not valid:
        raise ValueError(f"`{key}` must be {base}, got {type(raw).__name__}")
    return raw


def from_wire(data: StrDict) -> Result[Metadata, PipelineError]:
    """Rebuild Metadata; missing keys keep their defaults, mistyped values are rejected."""
    defaults = Metadata()
    values: dict[str, object] = {}

    try:
        for f in fields(Metadata):
            key = wire_name(f.name)
            if key not in data:
                continue
            raw = data[key]
            default = getattr(defaults, f.name)

            if f.name == "release_branch_config":
                branches = parse_release_branches({"branches": raw})
                if isinstance(branches, Err):
                    return branches
                values[f.name] = branches.value
            elif isinstance(default, re.Pattern):
                pattern = _decode_pattern(raw)
                if pattern is None:
                    raise ValueError(f"`{key}` is not a {{source, flags}} pair")
                values[f.name] = pattern
            elif isinstance(default, Committer):
                table = as_str_dict(raw)
                if table is None:
                    raise ValueError(f"`{key}` must be a {{name, email}} table")
                values[f.name] = Committer(
                    name=get_str(table, "name") or "", email=get_str(table, "email") or ""
                )
            elif isinstance(default, tuple):
                items = as_obj_list(raw)
                if items is None or not all(isinstance(item, str) for item in items):
                    raise ValueError(f"`{key}` must be a list of strings")
                values[f.name] = tuple(items)
            else:
                values[f.name] = _decode_scalar(key, str(f.type), raw)
    except (re.error, ValueError) as e:
        return Err(PipelineError(kind="artifact", message="invalid metadata artifact", hint=str(e)))

    return Ok(Metadata(**values))  # type: ignore[arg-type]


def write_metadata(metadata: Metadata, path: Path) -> Result[Path, PipelineError]:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(to_wire(metadata), indent=2), encoding="utf-8")
    except OSError as e:
        return Err(
            PipelineError(kind="artifact", message=f"failed to write metadata to {path}", hint=str(e))
        )
    return Ok(path)


def read_metadata(path: Path) -> Result[Metadata, PipelineError]:
    try:
        obj: object = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        return Err(
            PipelineError(
                kind="artifact", message=f"failed to import metadata artifact {path}", hint=str(e)
            )
        )

    data = as_str_dict(obj)
    if data is None:
        return Err(
            PipelineError(
                kind="artifact",
                message=f"failed to import metadata artifact {path}",
                hint="expected a JSON object",
            )
        )
    return from_wire(data).map_err(
        lambda e: PipelineError(
            kind="artifact", message=f"failed to import metadata artifact {path}", hint=e.pretty()
        )
    )
