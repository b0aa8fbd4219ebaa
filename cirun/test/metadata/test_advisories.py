"""Tests for cirun.metadata.advisories module."""

from __future__ import annotations

from cirun.metadata.advisories import (
    DEBUG_MODE_WARNING,
    capability_advisories,
    debug_signal,
    emit_debug_warnings,
    reissued_advisories,
)
from cirun.metadata.model import Metadata
from cirun.output.console import MockConsole

FULL = Metadata(has_docs=True, can_upload_coverage=True, release_branch_config=("main",))


class TestCapabilityAdvisories:
    def test_nothing_missing(self) -> None:
        assert capability_advisories(FULL) == []

    def test_missing_docs_and_coverage(self) -> None:
        advisories = capability_advisories(Metadata())
        assert len(advisories) == 2
        assert "build-docs" in advisories[0]
        assert "canUploadCoverage" in advisories[1]

    def test_reissued_includes_release_config(self) -> None:
        advisories = reissued_advisories(Metadata(has_docs=True, can_upload_coverage=True))
        assert advisories == ["no release config loaded: release branch config is empty"]


class TestDebugSignal:
    def test_config_wins(self) -> None:
        assert debug_signal(Metadata(debug_string="cirun:*"), {"DEBUG": "other"}) == "cirun:*"

    def test_env_fallback(self) -> None:
        assert debug_signal(Metadata(), {"DEBUG": "x"}) == "x"

    def test_absent(self) -> None:
        assert debug_signal(Metadata(), {}) is None
        assert debug_signal(Metadata(), {"DEBUG": ""}) is None


class TestEmitDebugWarnings:
    def test_requires_force(self) -> None:
        console = MockConsole()
        emit_debug_warnings(Metadata(), console, {"DEBUG": "x"}, force_warnings=False)
        assert console.outputs == []

    def test_requires_signal(self) -> None:
        console = MockConsole()
        emit_debug_warnings(Metadata(), console, {}, force_warnings=True)
        assert console.outputs == []

    def test_reemits_with_banner(self) -> None:
        console = MockConsole()
        emit_debug_warnings(Metadata(), console, {"DEBUG": "x"}, force_warnings=True)

        assert len(console.warnings) == 4
        assert console.warnings[-1] == f"{DEBUG_MODE_WARNING} (debug: x)"

    def test_banner_only_when_nothing_missing(self) -> None:
        console = MockConsole()
        emit_debug_warnings(FULL, console, {"DEBUG": "x"}, force_warnings=True)
        assert console.warnings == [f"{DEBUG_MODE_WARNING} (debug: x)"]

    def test_reemits_source_warnings_first(self) -> None:
        console = MockConsole()
        emit_debug_warnings(
            FULL,
            console,
            {"DEBUG": "x"},
            force_warnings=True,
            source_warnings=["no local pipeline config loaded"],
        )
        assert console.warnings == [
            "no local pipeline config loaded",
            f"{DEBUG_MODE_WARNING} (debug: x)",
        ]
