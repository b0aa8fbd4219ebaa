"""Remove dist-tags no live release branch claims."""

from __future__ import annotations

from cirun.core.errors import missing_option
from cirun.core.result import Err, Ok
from cirun.metadata.model import RunnerContext
from cirun.release.reconcile import cleanup_dist_tags
from cirun.runtime import InvokerOptions, Runtime

from .base import ActionResult, ComponentAction, collect_for_action, skipped

__all__ = ["cleanup_npm"]


def cleanup_npm(context: RunnerContext, options: InvokerOptions, runtime: Runtime) -> ActionResult:
    if not options.npm_token:
        return Err(missing_option("npmToken"))

    metadata = collect_for_action(context, options, runtime)
    if isinstance(metadata, Err):
        return metadata
    if metadata.value.should_skip_ci:
        return skipped(ComponentAction.CLEANUP_NPM, runtime)

    report = cleanup_dist_tags(
        metadata.value,
        npm=runtime.npm,
        git=runtime.repository,
        npm_token=options.npm_token,
        console=runtime.console,
    )
    if isinstance(report, Err):
        return report

    for tag in report.value.deleted:
        runtime.console.info(f"removed dist-tag {tag}")
    return Ok(None)
