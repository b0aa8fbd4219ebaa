"""Console output abstraction.

Pipeline steps report advisories, traces and errors through ConsoleProtocol so
that they never depend on a specific output library. RichConsole writes to the
runner log; MockConsole captures output for tests.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
    "debug_enabled",
]


def debug_enabled() -> bool:
    """True when the process-level DEBUG signal is set."""
    return bool(os.environ.get("DEBUG"))


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DEBUG = auto()
    DIM = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Protocol for console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None:
        """Print an advisory. Advisories never block a pipeline run."""
        ...

    def info(self, message: str) -> None: ...

    def debug(self, message: str) -> None:
        """Print a trace message; silent unless debugging is enabled."""
        ...

    def header(self, message: str) -> None: ...

    def table(self, title: str, rows: Sequence[tuple[str, str]]) -> None:
        """Print two-column key/value rows."""
        ...


class RichConsole:
    """Console implementation using Rich.

    Warnings are additionally emitted as GitHub Actions `::warning::` workflow
    commands when running inside a runner so they surface in the run summary.
    """

    def __init__(self, *, debug: bool | None = None) -> None:
        from rich.console import Console

        self._console = Console(highlight=False)
        self._debug = debug_enabled() if debug is None else debug
        self._in_actions = os.environ.get("GITHUB_ACTIONS") == "true"
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DEBUG: "magenta",
            Style.DIM: "dim",
            Style.HEADER: "blue bold",
        }

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def success(self, message: str) -> None:
        self._console.print(f"[green]OK[/green] {_escape(message)}")

    def error(self, message: str) -> None:
        self._console.print(f"[red bold]error:[/red bold] {_escape(message)}")

    def warning(self, message: str) -> None:
        if self._in_actions:
            self._console.print(f"::warning::{message}", markup=False)
            return
        self._console.print(f"[yellow]warning:[/yellow] {_escape(message)}")

    def info(self, message: str) -> None:
        self._console.print(f"[cyan]info:[/cyan] {_escape(message)}")

    def debug(self, message: str) -> None:
        if self._debug:
            self._console.print(f"[magenta]debug:[/magenta] {_escape(message)}")

    def header(self, message: str) -> None:
        self._console.print(f"\n[blue bold]{_escape(message)}[/blue bold]")

    def table(self, title: str, rows: Sequence[tuple[str, str]]) -> None:
        from rich.table import Table

        table = Table(title=title, show_header=True, header_style="blue bold")
        table.add_column("key", style="cyan", no_wrap=True)
        table.add_column("value")
        for key, value in rows:
            table.add_row(_escape(key), _escape(value))
        self._console.print(table)


def _escape(message: str) -> str:
    from rich.markup import escape

    return escape(message)


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing.

    Debug records are always captured, regardless of the DEBUG signal.
    """

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"OK {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"info: {message}", Style.INFO))

    def debug(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.DEBUG))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    def table(self, title: str, rows: Sequence[tuple[str, str]]) -> None:
        self.outputs.append(OutputRecord(title, Style.HEADER))
        for key, value in rows:
            self.outputs.append(OutputRecord(f"{key}: {value}", Style.DEFAULT))

    # Test helper methods

    def clear(self) -> None:
        self.outputs.clear()

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def warnings(self) -> list[str]:
        return [o.message for o in self.outputs if o.style == Style.WARNING]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_warning(self, substring: str | None = None) -> bool:
        """Check if a warning (optionally containing substring) was printed."""
        if substring is None:
            return any(o.style == Style.WARNING for o in self.outputs)
        return any(substring in w for w in self.warnings)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def count(self, style: Style) -> int:
        return sum(1 for o in self.outputs if o.style == style)
