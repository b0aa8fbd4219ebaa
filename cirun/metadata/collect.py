"""Metadata entry points.

`collect_metadata` resolves Metadata from the four config fragments and the
runner context. `download_metadata` restores the record a previous job
uploaded, without reading any fragment.
"""

from __future__ import annotations

from cirun.core.errors import PipelineError, missing_option
from cirun.core.result import Err, Ok, Result
from cirun.git.repository import CloneOptions
from cirun.runtime import InvokerOptions, Runtime
from cirun.services.node import NodeOptions

from .advisories import capability_advisories, emit_debug_warnings
from .artifact import read_metadata, write_metadata
from .authorize import apply_authorization
from .merge import apply_directives, merge, resolve_options
from .model import Metadata, RunnerContext
from .sources import FragmentSources, validate_manifest_scripts

__all__ = ["collect_metadata", "download_metadata", "metadata_artifact_key"]


def metadata_artifact_key(runner_os: str, sha: str) -> str:
    return f"metadata-{runner_os}-{sha}"


def _require_token(options: InvokerOptions) -> Result[str, PipelineError]:
    if not options.github_token:
        return Err(missing_option("githubToken"))
    return Ok(options.github_token)


def _setup_node(
    metadata: Metadata, options: InvokerOptions, runtime: Runtime
) -> Result[None, PipelineError]:
    match options.node:
        case False:
            return Ok(None)
        case NodeOptions() as node:
            requested = node
        case _:
            requested = NodeOptions(version=metadata.node_current_version)

    installed = runtime.node.install(requested, options.npm_token)
    if isinstance(installed, Err):
        return installed
    runtime.console.debug(f"node {installed.value} ready")
    return Ok(None)


def _clone(
    context: RunnerContext, options: InvokerOptions, runtime: Runtime, token: str
) -> Result[None, PipelineError]:
    match options.repository:
        case False:
            return Ok(None)
        case CloneOptions() as clone:
            requested = clone
        case _:
            requested = CloneOptions(
                repository_owner=context.repo_owner,
                repository_name=context.repo_name,
                repository_path=runtime.root,
            )

    cloned = runtime.clone(requested, token)
    if isinstance(cloned, Err):
        return Err(
            PipelineError(
                kind="step_failed",
                message=f"failed to clone {requested.slug}",
                hint=cloned.error.message,
            )
        )
    runtime.console.debug(f"repository {requested.slug} ready at {requested.repository_path}")
    return Ok(None)


def collect_metadata(
    context: RunnerContext, options: InvokerOptions, runtime: Runtime
) -> Result[Metadata, PipelineError]:
    """Resolve Metadata for this run.

    With fast skips enabled, a skip-CI directive short-circuits the run right
    after the option merge: node setup, cloning and the manifest/release
    fragments are never touched.
    """
    token = _require_token(options)
    if isinstance(token, Err):
        return token

    console = runtime.console
    sources = FragmentSources.for_repository(runtime.root, runtime.config, runtime.http)

    global_config = sources.global_config.load()
    if isinstance(global_config, Err):
        return global_config

    local_config = sources.local_config.load()
    if isinstance(local_config, Err):
        return local_config
    if local_config.value.warning:
        console.warning(local_config.value.warning)

    message = runtime.repository.last_commit_message()
    if isinstance(message, Err):
        return Err(
            PipelineError(
                kind="step_failed",
                message="failed to read the last commit message",
                hint=message.error.message,
            )
        )

    resolved = resolve_options(global_config.value.data, local_config.value.data)
    if isinstance(resolved, Err):
        return resolved
    early = apply_directives(resolved.value, message.value)

    if options.enable_fast_skips and early.should_skip_ci:
        console.debug("skip-ci directive found; returning early")
        return Ok(early)

    node = _setup_node(early, options, runtime)
    if isinstance(node, Err):
        return node

    cloned = _clone(context, options, runtime, token.value)
    if isinstance(cloned, Err):
        return cloned

    manifest = sources.manifest.load()
    if isinstance(manifest, Err):
        return manifest

    scripts_ok = validate_manifest_scripts(manifest.value.data)
    if isinstance(scripts_ok, Err):
        return scripts_ok

    release_config = sources.release_config.load()
    if isinstance(release_config, Err):
        return release_config
    if release_config.value.warning:
        console.warning(release_config.value.warning)

    merged = merge(
        global_config.value.data,
        local_config.value.data,
        manifest.value.data,
        release_config.value.fragment,
        context,
        message.value,
    )
    if isinstance(merged, Err):
        return merged

    metadata = apply_authorization(merged.value, context)

    for advisory in capability_advisories(metadata):
        console.warning(advisory)
    local_warnings = [local_config.value.warning] if local_config.value.warning else []
    emit_debug_warnings(
        metadata,
        console,
        runtime.env,
        force_warnings=options.force_warnings,
        source_warnings=local_warnings,
    )

    if options.upload_artifact:
        uploaded = _upload(metadata, runtime)
        if isinstance(uploaded, Err):
            return uploaded

    return Ok(metadata)


def _upload(metadata: Metadata, runtime: Runtime) -> Result[None, PipelineError]:
    written = write_metadata(metadata, runtime.config.metadata_path)
    if isinstance(written, Err):
        return written

    key = metadata_artifact_key(runtime.runner_os, metadata.commit_sha)
    uploaded = runtime.artifacts.upload([written.value], key, metadata.artifact_retention_days)
    if isinstance(uploaded, Err):
        return uploaded
    runtime.console.debug(f"uploaded metadata artifact {key}")
    return Ok(None)


def download_metadata(
    context: RunnerContext, options: InvokerOptions, runtime: Runtime
) -> Result[Metadata, PipelineError]:
    """Restore the Metadata a previous job uploaded for this commit."""
    token = _require_token(options)
    if isinstance(token, Err):
        return token

    path = runtime.config.metadata_path
    key = metadata_artifact_key(runtime.runner_os, context.sha)
    downloaded = runtime.artifacts.download(key, path.parent)
    if isinstance(downloaded, Err):
        return Err(
            PipelineError(
                kind="artifact",
                message=f"failed to acquire metadata artifact {key}",
                hint=downloaded.error.pretty(),
            )
        )

    restored = read_metadata(path)
    if isinstance(restored, Err):
        return restored
    metadata = restored.value

    node = _setup_node(metadata, options, runtime)
    if isinstance(node, Err):
        return node

    cloned = _clone(context, options, runtime, token.value)
    if isinstance(cloned, Err):
        return cloned

    emit_debug_warnings(metadata, runtime.console, runtime.env, force_warnings=options.force_warnings)
    return Ok(metadata)
