"""Shared helpers for CLI commands."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import typer

from cirun.core.errors import exit_code_for
from cirun.core.result import Err, Result
from cirun.output.console import Style

if TYPE_CHECKING:
    from cirun.cli.context import CLIContext
    from cirun.core.errors import PipelineError


def exit_on_error[T](result: Result[T, PipelineError], ctx: CLIContext) -> T:
    """Return the value of an Ok, or report the error and exit.

    The exit code follows the error kind (see `exit_code_for`).
    """
    if isinstance(result, Err):
        error = result.error
        ctx.console.error(error.message)
        if error.hint:
            ctx.console.print(f"hint: {error.hint}", Style.DIM)
        raise typer.Exit(code=int(exit_code_for(error)))
    return result.value


def token_from(option: str | None, env_var: str) -> str | None:
    """An explicit option wins over the environment."""
    return option or os.environ.get(env_var) or None
