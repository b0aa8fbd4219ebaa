"""Metadata command - resolve and print Metadata without running an action."""

from __future__ import annotations

import json
from pathlib import Path

import typer

from cirun.cli.commands._helpers import exit_on_error, token_from
from cirun.cli.context import build_context, build_runtime
from cirun.metadata.artifact import to_wire
from cirun.metadata.collect import collect_metadata, download_metadata
from cirun.metadata.model import Metadata
from cirun.runtime import InvokerOptions


def _rows(metadata: Metadata) -> list[tuple[str, str]]:
    return [(key, json.dumps(value)) for key, value in to_wire(metadata).items()]


def metadata(
    github_token: str | None = typer.Option(
        None, "--github-token", help="GitHub token (default: $GITHUB_TOKEN)", show_default=False
    ),
    download: bool = typer.Option(
        False, "--download", help="Read the uploaded artifact instead of the config fragments"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the metadata artifact JSON"),
    root: Path | None = typer.Option(
        None, "--root", help="Repository root (default: current directory)", show_default=False
    ),
) -> None:
    """Resolve Metadata for the current workflow run and print it."""
    ctx = build_context(root)
    runtime = build_runtime(ctx)
    options = InvokerOptions(
        github_token=token_from(github_token, "GITHUB_TOKEN"),
        node=False,
        repository=False,
        enable_fast_skips=False,
    )

    resolve = download_metadata if download else collect_metadata
    resolved = exit_on_error(resolve(ctx.runner, options, runtime), ctx)

    if as_json:
        typer.echo(json.dumps(to_wire(resolved), indent=2))
        return
    ctx.console.table(f"metadata ({resolved.package_name})", _rows(resolved))
