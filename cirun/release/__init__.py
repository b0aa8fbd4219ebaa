"""Release tooling: dist-tag reconciliation and install verification retries."""

from cirun.release.globmatch import compile_glob, glob_match, is_glob
from cirun.release.reconcile import CleanupReport, cleanup_dist_tags, reconcile
from cirun.release.retry import RetrySession, RetryState, retry_until

__all__ = [
    "CleanupReport",
    "RetrySession",
    "RetryState",
    "cleanup_dist_tags",
    "compile_glob",
    "glob_match",
    "is_glob",
    "reconcile",
    "retry_until",
]
