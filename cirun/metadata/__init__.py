"""Metadata resolution: fragments in, one immutable Metadata record out."""

from cirun.metadata.authorize import Authorization, authorize
from cirun.metadata.collect import collect_metadata, download_metadata, metadata_artifact_key
from cirun.metadata.directives import CD_SKIP_PATTERN, CI_SKIP_PATTERN, detect
from cirun.metadata.merge import merge
from cirun.metadata.model import (
    AdminKey,
    BranchReleaseEntry,
    Committer,
    Metadata,
    ReleaseBranch,
    RunnerContext,
)

__all__ = [
    "AdminKey",
    "Authorization",
    "BranchReleaseEntry",
    "CD_SKIP_PATTERN",
    "CI_SKIP_PATTERN",
    "Committer",
    "Metadata",
    "ReleaseBranch",
    "RunnerContext",
    "authorize",
    "collect_metadata",
    "detect",
    "download_metadata",
    "merge",
    "metadata_artifact_key",
]
