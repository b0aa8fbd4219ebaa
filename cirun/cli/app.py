from __future__ import annotations

import typer

from cirun import __version__
from cirun.cli.commands.metadata_cmd import metadata
from cirun.cli.commands.run_cmd import run

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(run)
app.command()(metadata)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Run CI/CD component actions driven by resolved pipeline metadata."""


def main() -> None:
    app()
