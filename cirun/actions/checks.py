"""Audit, lint and integration test actions."""

from __future__ import annotations

from cirun.core.result import Err, Ok
from cirun.metadata.model import RunnerContext
from cirun.runtime import InvokerOptions, Runtime

from .base import (
    Action,
    ActionResult,
    ComponentAction,
    collect_for_action,
    install_and_run,
    skipped,
)

__all__ = [
    "audit_runtime",
    "lint",
    "test_integration_client",
    "test_integration_externals",
    "test_integration_node",
    "test_integration_webpack",
]


def audit_runtime(context: RunnerContext, options: InvokerOptions, runtime: Runtime) -> ActionResult:
    metadata = collect_for_action(context, options, runtime)
    if isinstance(metadata, Err):
        return metadata
    if metadata.value.should_skip_ci:
        return skipped(ComponentAction.AUDIT_RUNTIME, runtime)

    audited = runtime.npm.audit(runtime.root, metadata.value.npm_audit_fail_level)
    if isinstance(audited, Err):
        return audited
    return Ok(None)


def _scripted(action: ComponentAction, *scripts: str) -> Action:
    def run(context: RunnerContext, options: InvokerOptions, runtime: Runtime) -> ActionResult:
        metadata = collect_for_action(context, options, runtime)
        if isinstance(metadata, Err):
            return metadata
        if metadata.value.should_skip_ci:
            return skipped(action, runtime)

        ran = install_and_run(runtime, *scripts)
        if isinstance(ran, Err):
            return ran
        return Ok(None)

    run.__name__ = action.value.replace("-", "_")
    run.__doc__ = f"`npm ci`, then {', '.join(f'`npm run {s}`' for s in scripts)}."
    return run


lint = _scripted(ComponentAction.LINT, "lint")
test_integration_node = _scripted(
    ComponentAction.TEST_INTEGRATION_NODE, "test-integration-node"
)
test_integration_client = _scripted(
    ComponentAction.TEST_INTEGRATION_CLIENT, "test-integration-client"
)
test_integration_webpack = _scripted(
    ComponentAction.TEST_INTEGRATION_WEBPACK, "test-integration-webpack"
)
test_integration_externals = _scripted(
    ComponentAction.TEST_INTEGRATION_EXTERNALS, "test-integration-externals"
)
