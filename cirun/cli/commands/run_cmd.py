"""Run command - execute one component action."""

from __future__ import annotations

from pathlib import Path

import typer

from cirun.actions import ACTIONS, ComponentAction
from cirun.cli.commands._helpers import exit_on_error, token_from
from cirun.cli.context import build_context, build_runtime
from cirun.runtime import InvokerOptions
from cirun.services.node import NodeOptions


def run(
    action: ComponentAction = typer.Argument(..., help="Component action to run"),
    github_token: str | None = typer.Option(
        None, "--github-token", help="GitHub token (default: $GITHUB_TOKEN)", show_default=False
    ),
    npm_token: str | None = typer.Option(
        None, "--npm-token", help="npm token (default: $NPM_TOKEN)", show_default=False
    ),
    force_warnings: bool = typer.Option(
        False, "--force-warnings", help="Re-issue advisories when debugging"
    ),
    fast_skips: bool = typer.Option(
        True, "--fast-skips/--no-fast-skips", help="Return early on a skip-ci directive"
    ),
    upload_artifact: bool = typer.Option(
        False, "--upload-artifact", help="Upload the resolved metadata (metadata-collect)"
    ),
    node: bool = typer.Option(True, "--node/--no-node", help="Set up node before running"),
    node_version: str | None = typer.Option(
        None, "--node-version", help="Required node version", show_default=False
    ),
    repository: bool = typer.Option(
        True, "--repository/--no-repository", help="Clone the repository before running"
    ),
    root: Path | None = typer.Option(
        None, "--root", help="Repository root (default: current directory)", show_default=False
    ),
) -> None:
    """Run a component action against the current workflow run."""
    ctx = build_context(root)
    runtime = build_runtime(ctx)

    node_option: NodeOptions | bool = (
        NodeOptions(version=node_version) if node and node_version else node
    )

    options = InvokerOptions(
        github_token=token_from(github_token, "GITHUB_TOKEN"),
        npm_token=token_from(npm_token, "NPM_TOKEN"),
        node=node_option,
        repository=repository,
        upload_artifact=upload_artifact,
        force_warnings=force_warnings,
        enable_fast_skips=fast_skips,
    )

    exit_on_error(ACTIONS[action](ctx.runner, options, runtime), ctx)
    ctx.console.success(f"{action} finished")
