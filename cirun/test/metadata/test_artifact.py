"""Tests for cirun.metadata.artifact module."""

from __future__ import annotations

import json
import re
from pathlib import Path

import pytest

from cirun.core.result import Err, Ok
from cirun.metadata.artifact import from_wire, read_metadata, to_wire, write_metadata
from cirun.metadata.model import Committer, Metadata, ReleaseBranch


def _resolved() -> Metadata:
    return Metadata(
        package_name="pkg",
        package_version="1.0.0",
        has_bin=True,
        can_release=True,
        pr_number=12,
        committer=Committer(name="A", email="a@x"),
        node_test_versions=("18", "20"),
        ci_skip_regex=re.compile(r"\[nope\]", re.IGNORECASE | re.MULTILINE),
        release_branch_config=(
            "main",
            ReleaseBranch(name="canary", channel="canary", prerelease=True),
        ),
    )


class TestToWire:
    def test_camel_case_keys(self) -> None:
        wire = to_wire(_resolved())
        assert wire["packageName"] == "pkg"
        assert wire["hasBin"] is True
        assert wire["prNumber"] == 12
        assert wire["nodeTestVersions"] == ["18", "20"]

    def test_patterns_as_source_and_flags(self) -> None:
        wire = to_wire(_resolved())
        assert wire["ciSkipRegex"] == {"source": r"\[nope\]", "flags": "im"}

    def test_release_branches(self) -> None:
        wire = to_wire(_resolved())
        assert wire["releaseBranchConfig"] == [
            "main",
            {"name": "canary", "prerelease": True, "channel": "canary"},
        ]

    def test_json_serializable(self) -> None:
        json.dumps(to_wire(_resolved()))


class TestFromWire:
    def test_missing_keys_keep_defaults(self) -> None:
        assert from_wire({}) == Ok(Metadata())

    def test_verbatim_roundtrip(self) -> None:
        metadata = _resolved()
        decoded = from_wire(json.loads(json.dumps(to_wire(metadata))))
        assert decoded == Ok(metadata)

    def test_bad_pattern(self) -> None:
        result = from_wire({"cdSkipRegex": "[skip cd]"})
        assert isinstance(result, Err)
        assert result.error.kind == "artifact"

    def test_bad_list(self) -> None:
        result = from_wire({"nodeTestVersions": "20"})
        assert isinstance(result, Err)

    @pytest.mark.parametrize(
        "data",
        [
            {"hasBin": "no"},
            {"artifactRetentionDays": "ninety"},
            {"retryCeilingSeconds": "180"},
            {"retryCeilingSeconds": True},
            {"prNumber": "12"},
            {"packageName": None},
            {"npmIgnoreDistTags": ["latest", 5]},
            {"committer": "A <a@x>"},
        ],
    )
    def test_mistyped_value_rejected(self, data: dict[str, object]) -> None:
        result = from_wire(data)
        assert isinstance(result, Err)
        assert result.error.kind == "artifact"
        assert next(iter(data)) in (result.error.hint or "")

    def test_optional_values_accept_null(self) -> None:
        result = from_wire({"prNumber": None, "packageVersion": None, "debugString": None})
        assert result == Ok(Metadata())

    def test_read_mistyped_file(self, tmp_path: Path) -> None:
        path = tmp_path / "metadata.json"
        path.write_text(json.dumps({"hasBin": "no"}))
        result = read_metadata(path)
        assert isinstance(result, Err)
        assert result.error.message == f"failed to import metadata artifact {path}"


class TestFiles:
    def test_write_then_read(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "metadata.json"
        assert write_metadata(_resolved(), path) == Ok(path)
        assert read_metadata(path) == Ok(_resolved())

    def test_read_missing(self, tmp_path: Path) -> None:
        path = tmp_path / "metadata.json"
        result = read_metadata(path)
        assert isinstance(result, Err)
        assert result.error.message == f"failed to import metadata artifact {path}"

    def test_read_not_an_object(self, tmp_path: Path) -> None:
        path = tmp_path / "metadata.json"
        path.write_text("[]")
        result = read_metadata(path)
        assert isinstance(result, Err)
        assert result.error.hint == "expected a JSON object"

    def test_read_invalid_content(self, tmp_path: Path) -> None:
        path = tmp_path / "metadata.json"
        path.write_text(json.dumps({"ciSkipRegex": {"source": "[bad"}}))
        result = read_metadata(path)
        assert isinstance(result, Err)
        assert result.error.message == f"failed to import metadata artifact {path}"
