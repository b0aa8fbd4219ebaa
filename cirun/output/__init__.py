"""Console output for pipeline steps."""

from .console import ConsoleProtocol, MockConsole, OutputRecord, RichConsole, Style, debug_enabled

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
    "debug_enabled",
]
