from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import typer

from cirun.core.config import RunnerConfig, load_config_or_default
from cirun.core.errors import ErrorCode, PipelineError
from cirun.core.result import Err, Ok, Result
from cirun.core.structured import as_str_dict
from cirun.metadata.model import RunnerContext
from cirun.output.console import ConsoleProtocol, RichConsole
from cirun.platform.http import RealHttpClient
from cirun.runtime import Runtime
from cirun.services.artifacts import LocalArtifactStore


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: RunnerConfig
    console: ConsoleProtocol
    runner: RunnerContext


def _int_env(env: Mapping[str, str], name: str) -> int:
    try:
        return int(env.get(name, "0"))
    except ValueError:
        return 0


def runner_context_from_env(env: Mapping[str, str]) -> Result[RunnerContext, PipelineError]:
    """Build the RunnerContext from GitHub Actions environment variables."""
    repository = env.get("GITHUB_REPOSITORY", "")
    owner, _, name = repository.partition("/")
    if not owner or not name:
        return Err(
            PipelineError(
                kind="missing_option",
                message="GITHUB_REPOSITORY must be set to <owner>/<name>",
            )
        )

    payload: dict[str, object] = {}
    event_path = env.get("GITHUB_EVENT_PATH")
    if event_path:
        try:
            obj: object = json.loads(Path(event_path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            return Err(
                PipelineError(
                    kind="config_load", message=f"could not import {event_path}", hint=str(e)
                )
            )
        payload = as_str_dict(obj) or {}

    return Ok(
        RunnerContext(
            actor=env.get("GITHUB_ACTOR", ""),
            event_name=env.get("GITHUB_EVENT_NAME", ""),
            ref=env.get("GITHUB_REF", ""),
            sha=env.get("GITHUB_SHA", ""),
            repo_owner=owner,
            repo_name=name,
            payload=payload,
            run_id=_int_env(env, "GITHUB_RUN_ID"),
            run_number=_int_env(env, "GITHUB_RUN_NUMBER"),
            workflow=env.get("GITHUB_WORKFLOW", ""),
            job=env.get("GITHUB_JOB", ""),
            action=env.get("GITHUB_ACTION", ""),
        )
    )


def build_context(root: Path | None = None) -> CLIContext:
    console = RichConsole()
    runner = runner_context_from_env(os.environ)
    if isinstance(runner, Err):
        console.error(runner.error.pretty())
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    resolved = (root or Path.cwd()).resolve()
    return CLIContext(
        root=resolved,
        config=load_config_or_default(resolved),
        console=console,
        runner=runner.value,
    )


def build_runtime(ctx: CLIContext) -> Runtime:
    return Runtime(
        root=ctx.root,
        console=ctx.console,
        artifacts=LocalArtifactStore(ctx.config.artifact_dir),
        config=ctx.config,
        http=RealHttpClient(),
    )
