"""Shared plumbing for component actions."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from enum import StrEnum

from cirun.core.errors import PipelineError
from cirun.core.result import Err, Ok, Result
from cirun.metadata.collect import collect_metadata, download_metadata
from cirun.metadata.model import Metadata, RunnerContext
from cirun.runtime import InvokerOptions, Runtime

__all__ = [
    "Action",
    "ActionResult",
    "ComponentAction",
    "collect_for_action",
    "download_for_action",
    "install_and_run",
    "skipped",
]


class ComponentAction(StrEnum):
    AUDIT_RUNTIME = "audit-runtime"
    CLEANUP_NPM = "cleanup-npm"
    LINT = "lint"
    METADATA_COLLECT = "metadata-collect"
    METADATA_DOWNLOAD = "metadata-download"
    TEST_INTEGRATION_CLIENT = "test-integration-client"
    TEST_INTEGRATION_EXTERNALS = "test-integration-externals"
    TEST_INTEGRATION_NODE = "test-integration-node"
    TEST_INTEGRATION_WEBPACK = "test-integration-webpack"
    TEST_UNIT_THEN_BUILD = "test-unit-then-build"
    VERIFY_RELEASE = "verify-release"


type ActionResult = Result[Metadata | None, PipelineError]
type Action = Callable[[RunnerContext, InvokerOptions, Runtime], ActionResult]


def collect_for_action(
    context: RunnerContext, options: InvokerOptions, runtime: Runtime
) -> Result[Metadata, PipelineError]:
    """Metadata for a component action; fast skips are always on."""
    return collect_metadata(context, replace(options, enable_fast_skips=True), runtime)


def download_for_action(
    context: RunnerContext, options: InvokerOptions, runtime: Runtime
) -> Result[Metadata, PipelineError]:
    return download_metadata(
        context, replace(options, enable_fast_skips=True, repository=False), runtime
    )


def skipped(action: ComponentAction, runtime: Runtime) -> ActionResult:
    runtime.console.debug(f'skipped component action "{action}"')
    return Ok(None)


def install_and_run(runtime: Runtime, *scripts: str) -> Result[None, PipelineError]:
    """`npm ci`, then each npm script in order; stops at the first failure."""
    installed = runtime.npm.install_dependencies(runtime.root)
    if isinstance(installed, Err):
        return installed
    for script in scripts:
        ran = runtime.npm.run_script(runtime.root, script)
        if isinstance(ran, Err):
            return ran
    return Ok(None)
