"""Runner context and the resolved Metadata record.

Metadata is produced once per pipeline run by the merge engine and is never
mutated afterwards; stages build new records with `dataclasses.replace`.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from cirun.core.structured import get_bool, get_int, get_table

from .directives import CD_SKIP_PATTERN, CI_SKIP_PATTERN

__all__ = [
    "AdminKey",
    "BranchReleaseEntry",
    "Committer",
    "Metadata",
    "ReleaseBranch",
    "RunnerContext",
    "UNKNOWN_PACKAGE_NAME",
    "DEFAULT_ARTIFACT_RETENTION_DAYS",
    "DEFAULT_RETRY_CEILING_SECONDS",
    "wire_name",
]

UNKNOWN_PACKAGE_NAME = "<unknown>"
DEFAULT_ARTIFACT_RETENTION_DAYS = 90
DEFAULT_RETRY_CEILING_SECONDS = 180
DEFAULT_NPM_AUDIT_FAIL_LEVEL = "high"


class AdminKey(StrEnum):
    """Options only the global config may set.

    Values are the wire names used in config fragments and in the metadata
    artifact.
    """

    RELEASE_ACTOR_WHITELIST = "releaseActorWhitelist"
    AUTOMERGE_ACTOR_WHITELIST = "automergeActorWhitelist"
    RELEASE_REPO_OWNER_WHITELIST = "releaseRepoOwnerWhitelist"
    NPM_IGNORE_DIST_TAGS = "npmIgnoreDistTags"
    CAN_RETRY_AUTOMERGE = "canRetryAutomerge"


def wire_name(attr: str) -> str:
    """`release_actor_whitelist` -> `releaseActorWhitelist`."""
    head, *rest = attr.split("_")
    return head + "".join(part.capitalize() for part in rest)


@dataclass(frozen=True, slots=True)
class RunnerContext:
    """What the CI runner tells us about the current workflow run."""

    actor: str
    event_name: str
    ref: str
    sha: str
    repo_owner: str
    repo_name: str
    payload: Mapping[str, object] = field(default_factory=dict)
    run_id: int = 0
    run_number: int = 0
    workflow: str = ""
    job: str = ""
    action: str = ""

    @property
    def is_pull_request_event(self) -> bool:
        # pull_request, pull_request_target, pull_request_review, ...
        return self.event_name.startswith("pull_request")

    @property
    def pull_request(self) -> Mapping[str, object] | None:
        return get_table(self.payload, "pull_request")

    @property
    def pr_number(self) -> int | None:
        pr = self.pull_request
        if pr is None:
            return None
        return get_int(pr, "number")

    @property
    def is_draft_pr(self) -> bool:
        pr = self.pull_request
        return bool(pr is not None and get_bool(pr, "draft"))

    @property
    def current_branch(self) -> str:
        """Branch (or tag) name parsed from the ref.

        `refs/heads/feature/x` -> `feature/x`; a bare name passes through.
        """
        parts = self.ref.split("/")
        if len(parts) > 2 and parts[0] == "refs":
            return "/".join(parts[2:])
        return self.ref


@dataclass(frozen=True, slots=True)
class Committer:
    name: str = ""
    email: str = ""


@dataclass(frozen=True, slots=True)
class ReleaseBranch:
    """Structured release branch entry: `{name, channel?, prerelease?}`.

    `prerelease` may be a bool or a prerelease identifier string.
    """

    name: str
    channel: str | None = None
    prerelease: bool | str = False

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)


# Plain branch names and glob patterns are kept as bare strings.
type BranchReleaseEntry = str | ReleaseBranch


@dataclass(frozen=True, slots=True)
class Metadata:
    """The resolved configuration every downstream step consumes read-only."""

    # Manifest
    package_name: str = UNKNOWN_PACKAGE_NAME
    package_version: str | None = None
    has_deploy: bool = False
    has_docs: bool = False
    has_externals: bool = False
    has_integration_node: bool = False
    has_integration_client: bool = False
    has_integration_webpack: bool = False
    has_integration_externals: bool = False
    has_bin: bool = False
    has_private: bool = False

    # Directives
    should_skip_ci: bool = False
    should_skip_cd: bool = False
    ci_skip_regex: re.Pattern[str] = CI_SKIP_PATTERN
    cd_skip_regex: re.Pattern[str] = CD_SKIP_PATTERN

    # Authorization
    can_release: bool = False
    can_automerge: bool = False
    can_retry_automerge: bool = False
    can_upload_coverage: bool = False
    release_actor_whitelist: tuple[str, ...] = ()
    automerge_actor_whitelist: tuple[str, ...] = ()
    release_repo_owner_whitelist: tuple[str, ...] = ()
    npm_ignore_dist_tags: tuple[str, ...] = ()

    # Context
    pr_number: int | None = None
    commit_sha: str = ""
    current_branch: str = ""

    # Options
    committer: Committer = field(default_factory=Committer)
    artifact_retention_days: int = DEFAULT_ARTIFACT_RETENTION_DAYS
    retry_ceiling_seconds: int = DEFAULT_RETRY_CEILING_SECONDS
    npm_audit_fail_level: str = DEFAULT_NPM_AUDIT_FAIL_LEVEL
    node_current_version: str | None = None
    node_test_versions: tuple[str, ...] = ()
    webpack_test_versions: tuple[str, ...] = ()
    debug_string: str | None = None

    # Release tooling
    release_branch_config: tuple[BranchReleaseEntry, ...] = ()
