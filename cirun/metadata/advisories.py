"""Advisory warnings about optional capabilities, and debug mode re-emission."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from cirun.output.console import ConsoleProtocol

from .model import Metadata
from .sources import NO_RELEASE_CONFIG_WARNING

__all__ = [
    "DEBUG_MODE_WARNING",
    "capability_advisories",
    "debug_signal",
    "emit_debug_warnings",
    "reissued_advisories",
]

DEBUG_MODE_WARNING = "PIPELINE IS RUNNING IN DEBUG MODE"


def capability_advisories(metadata: Metadata) -> list[str]:
    advisories: list[str] = []
    if not metadata.has_docs:
        advisories.append("no `build-docs` script defined in package.json; docs will not be built")
    if not metadata.can_upload_coverage:
        advisories.append("no code coverage upload: `canUploadCoverage` is disabled")
    return advisories


def reissued_advisories(metadata: Metadata, source_warnings: Sequence[str] = ()) -> list[str]:
    """Everything worth repeating when a run is forced to show warnings.

    `source_warnings` are the fragment loader warnings seen on this run, such as
    a missing local config.
    """
    advisories = [*source_warnings, *capability_advisories(metadata)]
    if not metadata.release_branch_config:
        advisories.append(f"{NO_RELEASE_CONFIG_WARNING}: release branch config is empty")
    return advisories


def debug_signal(metadata: Metadata, env: Mapping[str, str]) -> str | None:
    """The debug string from config, else the process DEBUG variable."""
    return metadata.debug_string or env.get("DEBUG") or None


def emit_debug_warnings(
    metadata: Metadata,
    console: ConsoleProtocol,
    env: Mapping[str, str],
    *,
    force_warnings: bool,
    source_warnings: Sequence[str] = (),
) -> None:
    """Re-emit advisories plus a debug mode banner.

    Emits nothing unless warnings are forced and a debug signal is present.
    """
    signal = debug_signal(metadata, env)
    if not force_warnings or signal is None:
        return

    for advisory in reissued_advisories(metadata, source_warnings):
        console.warning(advisory)
    console.warning(f"{DEBUG_MODE_WARNING} (debug: {signal})")
