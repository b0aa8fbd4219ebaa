"""Metadata merge engine.

Fragments are folded into one Metadata record in a fixed order:

1. global config options form the base
2. local config options overlay them, except administrative keys, which are
   dropped without a warning
3. manifest-derived capabilities and the release branch config
4. runner context (commit sha, branch, PR number)
5. commit message directives

Authorization is resolved afterwards by `cirun.metadata.authorize`.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import replace
from typing import assert_never

from cirun.core.errors import PipelineError
from cirun.core.result import Err, Ok, Result
from cirun.core.structured import as_obj_list, as_str_dict, get_str, get_table

from .directives import compile_pattern, detect
from .model import UNKNOWN_PACKAGE_NAME, AdminKey, Committer, Metadata, RunnerContext
from .sources import parse_release_branches

__all__ = [
    "ADMIN_KEYS_OPTION",
    "administrative_keys",
    "apply_context",
    "apply_directives",
    "apply_manifest",
    "apply_release_config",
    "merge",
    "resolve_options",
]

ADMIN_KEYS_OPTION = "administrativeKeys"

# Manifest script name -> Metadata attribute.
SCRIPT_CAPABILITIES: dict[str, str] = {
    "deploy": "has_deploy",
    "build-docs": "has_docs",
    "build-externals": "has_externals",
    "test-integration-node": "has_integration_node",
    "test-integration-client": "has_integration_client",
    "test-integration-webpack": "has_integration_webpack",
    "test-integration-externals": "has_integration_externals",
}


class _Invalid:
    pass


_INVALID = _Invalid()

type _Parser = Callable[[object], object]


def _str_tuple(value: object) -> object:
    items = as_obj_list(value)
    if items is None or not all(isinstance(item, str) for item in items):
        return _INVALID
    return tuple(str(item) for item in items)


def _flag(value: object) -> object:
    return value if isinstance(value, bool) else _INVALID


def _count(value: object) -> object:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return _INVALID
    return value


def _text(value: object) -> object:
    return value if isinstance(value, str) else _INVALID


def _committer(value: object) -> object:
    table = as_str_dict(value)
    if table is None:
        return _INVALID
    return Committer(name=get_str(table, "name") or "", email=get_str(table, "email") or "")


def _pattern(value: object) -> object:
    # A bare string is a case-insensitive source; a table is {source, flags}.
    source: str | None
    flags = "i"
    if isinstance(value, str):
        source = value
    else:
        table = as_str_dict(value)
        if table is None:
            return _INVALID
        source = get_str(table, "source")
        flags = get_str(table, "flags") or ""
    if source is None:
        return _INVALID
    try:
        return compile_pattern(source, flags)
    except re.error:
        return _INVALID


# Option wire name -> (Metadata attribute, parser). Anything else in a config
# fragment is not an option and is ignored.
_OPTIONS: dict[str, tuple[str, _Parser]] = {
    "releaseActorWhitelist": ("release_actor_whitelist", _str_tuple),
    "automergeActorWhitelist": ("automerge_actor_whitelist", _str_tuple),
    "releaseRepoOwnerWhitelist": ("release_repo_owner_whitelist", _str_tuple),
    "npmIgnoreDistTags": ("npm_ignore_dist_tags", _str_tuple),
    "canRetryAutomerge": ("can_retry_automerge", _flag),
    "canUploadCoverage": ("can_upload_coverage", _flag),
    "artifactRetentionDays": ("artifact_retention_days", _count),
    "retryCeilingSeconds": ("retry_ceiling_seconds", _count),
    "npmAuditFailLevel": ("npm_audit_fail_level", _text),
    "nodeCurrentVersion": ("node_current_version", _text),
    "nodeTestVersions": ("node_test_versions", _str_tuple),
    "webpackTestVersions": ("webpack_test_versions", _str_tuple),
    "debugString": ("debug_string", _text),
    "committer": ("committer", _committer),
    "ciSkipRegex": ("ci_skip_regex", _pattern),
    "cdSkipRegex": ("cd_skip_regex", _pattern),
}


def _admin_attr(key: AdminKey) -> str:
    match key:
        case AdminKey.RELEASE_ACTOR_WHITELIST:
            return "release_actor_whitelist"
        case AdminKey.AUTOMERGE_ACTOR_WHITELIST:
            return "automerge_actor_whitelist"
        case AdminKey.RELEASE_REPO_OWNER_WHITELIST:
            return "release_repo_owner_whitelist"
        case AdminKey.NPM_IGNORE_DIST_TAGS:
            return "npm_ignore_dist_tags"
        case AdminKey.CAN_RETRY_AUTOMERGE:
            return "can_retry_automerge"
        case _:
            assert_never(key)


def administrative_keys(
    global_config: Mapping[str, object],
) -> Result[frozenset[AdminKey], PipelineError]:
    """Keys locked by the global config.

    The global config may narrow the lock with `administrativeKeys`; without
    it every AdminKey is locked.
    """
    raw = global_config.get(ADMIN_KEYS_OPTION)
    if raw is None:
        return Ok(frozenset(AdminKey))

    items = as_obj_list(raw)
    if items is None:
        return Err(
            PipelineError(
                kind="config_load",
                message=f"global pipeline config `{ADMIN_KEYS_OPTION}` must be a list",
            )
        )

    keys: set[AdminKey] = set()
    for item in items:
        try:
            keys.add(AdminKey(str(item)))
        except ValueError:
            return Err(
                PipelineError(
                    kind="config_load",
                    message=f"unknown administrative key `{item}` in global pipeline config",
                    hint=", ".join(k.value for k in AdminKey),
                )
            )
    return Ok(frozenset(keys))


def _apply_options(
    metadata: Metadata, options: Mapping[str, object], origin: str
) -> Result[Metadata, PipelineError]:
    updates: dict[str, object] = {}
    for key, value in options.items():
        option = _OPTIONS.get(key)
        if option is None:
            continue
        attr, parser = option
        parsed = parser(value)
        if parsed is _INVALID:
            return Err(
                PipelineError(
                    kind="validation",
                    message=f"invalid value for `{key}` in {origin}",
                    hint=repr(value),
                )
            )
        updates[attr] = parsed
    return Ok(replace(metadata, **updates))


def resolve_options(
    global_config: Mapping[str, object],
    local_config: Mapping[str, object],
) -> Result[Metadata, PipelineError]:
    """Fold the global and local config options into Metadata."""
    admin = administrative_keys(global_config)
    if isinstance(admin, Err):
        return admin

    from_global = _apply_options(Metadata(), global_config, "global pipeline config")
    if isinstance(from_global, Err):
        return from_global

    locked = {key.value for key in admin.value} | {ADMIN_KEYS_OPTION}
    allowed = {k: v for k, v in local_config.items() if k not in locked}
    merged = _apply_options(from_global.value, allowed, "local pipeline config")
    if isinstance(merged, Err):
        return merged

    # Administrative values always come from the global pass.
    enforced = {
        _admin_attr(key): getattr(from_global.value, _admin_attr(key)) for key in admin.value
    }
    return Ok(replace(merged.value, **enforced))


def apply_manifest(metadata: Metadata, manifest: Mapping[str, object]) -> Metadata:
    """Derive package identity and capabilities from the manifest.

    Capabilities depend only on which scripts exist, never on their content.
    """
    scripts = get_table(manifest, "scripts") or {}
    capabilities = {attr: name in scripts for name, attr in SCRIPT_CAPABILITIES.items()}
    return replace(
        metadata,
        package_name=get_str(manifest, "name") or UNKNOWN_PACKAGE_NAME,
        package_version=get_str(manifest, "version"),
        has_bin="bin" in manifest,
        has_private=manifest.get("private") is True,
        **capabilities,
    )


def apply_release_config(
    metadata: Metadata, release_config: Mapping[str, object] | None
) -> Result[Metadata, PipelineError]:
    if release_config is None:
        return Ok(replace(metadata, release_branch_config=()))

    branches = parse_release_branches(release_config)
    if isinstance(branches, Err):
        return branches
    return Ok(replace(metadata, release_branch_config=branches.value))


def apply_context(metadata: Metadata, context: RunnerContext) -> Result[Metadata, PipelineError]:
    pr_number = context.pr_number
    if context.is_pull_request_event and pr_number is None:
        return Err(
            PipelineError(
                kind="validation",
                message=f"unable to resolve PR number for `{context.event_name}` event",
            )
        )

    return Ok(
        replace(
            metadata,
            commit_sha=context.sha,
            current_branch=context.current_branch,
            pr_number=pr_number,
        )
    )


def apply_directives(metadata: Metadata, commit_message: str) -> Metadata:
    return replace(
        metadata,
        should_skip_ci=detect(commit_message, metadata.ci_skip_regex),
        should_skip_cd=detect(commit_message, metadata.cd_skip_regex),
    )


def merge(
    global_config: Mapping[str, object],
    local_config: Mapping[str, object],
    manifest: Mapping[str, object],
    release_config: Mapping[str, object] | None,
    context: RunnerContext,
    commit_message: str,
) -> Result[Metadata, PipelineError]:
    """Merge every fragment into Metadata (authorization not yet resolved)."""
    options = resolve_options(global_config, local_config)
    if isinstance(options, Err):
        return options

    with_release = apply_release_config(apply_manifest(options.value, manifest), release_config)
    if isinstance(with_release, Err):
        return with_release

    with_context = apply_context(with_release.value, context)
    if isinstance(with_context, Err):
        return with_context

    return Ok(apply_directives(with_context.value, commit_message))
