"""Metadata actions: expose collect and download as component actions."""

from __future__ import annotations

from cirun.core.result import Err, Ok
from cirun.metadata.collect import collect_metadata, download_metadata
from cirun.metadata.model import RunnerContext
from cirun.runtime import InvokerOptions, Runtime

from .base import ActionResult

__all__ = ["metadata_collect", "metadata_download"]


def metadata_collect(
    context: RunnerContext, options: InvokerOptions, runtime: Runtime
) -> ActionResult:
    result = collect_metadata(context, options, runtime)
    if isinstance(result, Err):
        return result
    return Ok(result.value)


def metadata_download(
    context: RunnerContext, options: InvokerOptions, runtime: Runtime
) -> ActionResult:
    result = download_metadata(context, options, runtime)
    if isinstance(result, Err):
        return result
    return Ok(result.value)
