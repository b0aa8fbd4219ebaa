"""Release and auto-merge eligibility.

Every check is a whitelist lookup with case-insensitive comparison. A missing
whitelist entry yields False; nothing here raises.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace

from .model import Metadata, RunnerContext

__all__ = ["Authorization", "apply_authorization", "authorize"]


@dataclass(frozen=True, slots=True)
class Authorization:
    can_release: bool = False
    can_automerge: bool = False
    can_retry_automerge: bool = False


def _contains(whitelist: Iterable[str], value: str) -> bool:
    needle = value.casefold()
    return any(entry.casefold() == needle for entry in whitelist)


def authorize(metadata: Metadata, context: RunnerContext) -> Authorization:
    # Releases never run on pull request events.
    can_release = (
        _contains(metadata.release_repo_owner_whitelist, context.repo_owner)
        and _contains(metadata.release_actor_whitelist, context.actor)
        and not context.is_pull_request_event
    )

    # A push carrying a pull_request payload counts as PR context too.
    pr_number = metadata.pr_number if metadata.pr_number is not None else context.pr_number
    can_automerge = (
        _contains(metadata.automerge_actor_whitelist, context.actor)
        and pr_number is not None
        and not context.is_draft_pr
    )

    return Authorization(
        can_release=can_release,
        can_automerge=can_automerge,
        can_retry_automerge=metadata.can_retry_automerge,
    )


def apply_authorization(metadata: Metadata, context: RunnerContext) -> Metadata:
    auth = authorize(metadata, context)
    return replace(
        metadata,
        can_release=auth.can_release,
        can_automerge=auth.can_automerge,
        can_retry_automerge=auth.can_retry_automerge,
    )
