"""Install the released package from the registry and smoke test it.

Private packages are not verified at all, including private packages that
declare a `bin`.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from cirun.core.errors import PipelineError
from cirun.core.result import Err, Ok
from cirun.metadata.model import Metadata, RunnerContext
from cirun.release.retry import RetrySession, retry_until
from cirun.runtime import InvokerOptions, Runtime

from .base import ActionResult, ComponentAction, download_for_action, skipped

__all__ = ["install_spec", "verify_release"]


def install_spec(metadata: Metadata) -> str:
    return f"{metadata.package_name}@{metadata.package_version or 'latest'}"


def _verify(metadata: Metadata, runtime: Runtime, workdir: Path) -> ActionResult:
    spec = install_spec(metadata)
    console = runtime.console

    def report_failure(session: RetrySession) -> None:
        if session.last_error is not None:
            console.debug(f"install attempt {session.attempts} failed: {session.last_error.pretty()}")

    installed = retry_until(
        lambda: runtime.npm.install_package(spec, workdir),
        metadata.retry_ceiling_seconds,
        subject=spec,
        clock=runtime.clock,
        on_failure=report_failure,
    )
    if isinstance(installed, Err):
        return installed

    required = runtime.npm.require_package(metadata.package_name, workdir)
    if isinstance(required, Err):
        return Err(
            PipelineError(
                kind="step_failed",
                message="generic execution test failed",
                hint=required.error.pretty(),
            )
        )

    if metadata.has_bin:
        npx = runtime.npm.npx_package(metadata.package_name, workdir)
        if isinstance(npx, Err):
            return Err(
                PipelineError(
                    kind="step_failed", message="npx cli test failed", hint=npx.error.pretty()
                )
            )

    console.success(f"verified {spec}")
    return Ok(None)


def verify_release(
    context: RunnerContext, options: InvokerOptions, runtime: Runtime
) -> ActionResult:
    metadata = download_for_action(context, options, runtime)
    if isinstance(metadata, Err):
        return metadata
    md = metadata.value
    if md.should_skip_ci or md.should_skip_cd:
        return skipped(ComponentAction.VERIFY_RELEASE, runtime)

    if md.has_private:
        # TODO: decide whether private packages with a `bin` should still get the npx check.
        runtime.console.debug(f"{md.package_name} is private; skipping install verification")
        return Ok(None)

    with tempfile.TemporaryDirectory(prefix="cirun-verify-") as tmp:
        return _verify(md, runtime, Path(tmp))
