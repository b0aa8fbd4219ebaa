"""Dist-tag reconciliation.

A live branch that matches a release branch entry claims its own name, plus
the entry's channel when it has one, whether or not the entry is a
prerelease. Every live dist-tag that is neither claimed nor ignored is stale.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from cirun.core.errors import PipelineError
from cirun.core.result import Err, Ok, Result
from cirun.metadata.model import BranchReleaseEntry, Metadata, ReleaseBranch
from cirun.output.console import ConsoleProtocol
from cirun.runtime import GitQueries
from cirun.services.npm import NpmProtocol

from .globmatch import glob_match

__all__ = [
    "CleanupReport",
    "claimed_tags",
    "cleanup_dist_tags",
    "entry_claims",
    "reconcile",
]


def entry_claims(entry: BranchReleaseEntry, branch: str) -> tuple[str, ...]:
    """Tags claimed by `branch` under one entry (empty if it does not match)."""
    match entry:
        case ReleaseBranch(name=name, channel=channel):
            if glob_match(name, branch) or (channel is not None and branch == channel):
                return (branch,) if channel is None else (branch, channel)
            return ()
        case str():
            return (branch,) if glob_match(entry, branch) else ()


def claimed_tags(
    branch_config: Iterable[BranchReleaseEntry], live_branches: Iterable[str]
) -> set[str]:
    entries = tuple(branch_config)
    claimed: set[str] = set()
    for branch in live_branches:
        for entry in entries:
            claimed.update(entry_claims(entry, branch))
    return claimed


def reconcile(
    branch_config: Sequence[BranchReleaseEntry],
    live_branches: Sequence[str],
    live_dist_tags: Sequence[str],
    ignore_list: Sequence[str],
) -> list[str]:
    """Dist-tags to delete, in the order they were listed (no duplicates)."""
    keep = claimed_tags(branch_config, live_branches) | set(ignore_list)
    stale: list[str] = []
    for tag in live_dist_tags:
        if tag not in keep and tag not in stale:
            stale.append(tag)
    return stale


@dataclass(frozen=True, slots=True)
class CleanupReport:
    deleted: tuple[str, ...] = ()
    failed: tuple[tuple[str, PipelineError], ...] = ()


def cleanup_dist_tags(
    metadata: Metadata,
    *,
    npm: NpmProtocol,
    git: GitQueries,
    npm_token: str,
    console: ConsoleProtocol,
) -> Result[CleanupReport, PipelineError]:
    """Remove stale dist-tags of the package, one at a time.

    Writing the npm token is the only fatal step. Listing failures leave the
    registry untouched; a failed deletion is reported and the rest proceed.
    """
    written = npm.write_token(npm_token)
    if isinstance(written, Err):
        return Err(
            PipelineError(
                kind="credential_write",
                message="one or more npm operations failed: unable to write npm token",
                hint=written.error.pretty(),
            )
        )

    branches = git.remote_branches()
    if isinstance(branches, Err):
        console.warning(f"skipping dist-tag cleanup: cannot list branches ({branches.error.message})")
        return Ok(CleanupReport())

    tags = npm.dist_tags(metadata.package_name)
    if isinstance(tags, Err):
        console.warning(f"skipping dist-tag cleanup: {tags.error.pretty()}")
        return Ok(CleanupReport())

    stale = reconcile(
        metadata.release_branch_config,
        branches.value,
        tags.value,
        metadata.npm_ignore_dist_tags,
    )
    console.debug(f"stale dist-tags of {metadata.package_name}: {', '.join(stale) or '(none)'}")

    deleted: list[str] = []
    failed: list[tuple[str, PipelineError]] = []
    for tag in stale:
        removed = npm.remove_dist_tag(metadata.package_name, tag)
        if isinstance(removed, Err):
            failed.append((tag, removed.error))
        else:
            deleted.append(tag)

    if failed:
        names = ", ".join(tag for tag, _ in failed)
        console.warning(f"one or more dist-tag deletions failed ({len(failed)}/{len(stale)}): {names}")
    return Ok(CleanupReport(deleted=tuple(deleted), failed=tuple(failed)))
