"""Unit tests, then build, then upload the build output."""

from __future__ import annotations

from cirun.core.result import Err, Ok
from cirun.metadata.model import RunnerContext
from cirun.runtime import InvokerOptions, Runtime

from .base import ActionResult, ComponentAction, collect_for_action, install_and_run, skipped

__all__ = ["BUILD_OUTPUT_DIRS", "build_artifact_key", "test_unit_then_build"]

BUILD_OUTPUT_DIRS = ("dist", "docs")


def build_artifact_key(runner_os: str, sha: str) -> str:
    return f"build-{runner_os}-{sha}"


def test_unit_then_build(
    context: RunnerContext, options: InvokerOptions, runtime: Runtime
) -> ActionResult:
    metadata = collect_for_action(context, options, runtime)
    if isinstance(metadata, Err):
        return metadata
    md = metadata.value
    if md.should_skip_ci:
        return skipped(ComponentAction.TEST_UNIT_THEN_BUILD, runtime)

    scripts = ["test-unit", "build-dist"]
    if md.has_docs:
        scripts.append("build-docs")
    ran = install_and_run(runtime, *scripts)
    if isinstance(ran, Err):
        return ran

    outputs = [runtime.root / d for d in BUILD_OUTPUT_DIRS if (runtime.root / d).exists()]
    key = build_artifact_key(runtime.runner_os, md.commit_sha)
    uploaded = runtime.artifacts.upload(outputs, key, md.artifact_retention_days)
    if isinstance(uploaded, Err):
        return uploaded
    runtime.console.success(f"uploaded build artifact {key}")
    return Ok(None)
