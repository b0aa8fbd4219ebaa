"""Pipeline error payload and CLI exit codes.

`PipelineError` is the one error shape that crosses module boundaries. Adapter
errors (process, http, git) are wrapped into it at the seam where the core
consumes them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Literal

__all__ = ["ErrorCode", "ErrorKind", "PipelineError", "missing_option", "exit_code_for"]


ErrorKind = Literal[
    "missing_option",
    "config_load",
    "validation",
    "retry_exceeded",
    "partial_failure",
    "credential_write",
    "step_failed",
    "artifact",
]


@dataclass(frozen=True, slots=True)
class PipelineError:
    """Canonical error payload for a failed pipeline step.

    Attributes:
        kind: Closed error category, used for exit code mapping.
        message: Human readable description naming the resource involved.
        hint: Optional underlying cause (stderr, wrapped error text).
    """

    kind: ErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (cause: {self.hint})"
        return self.message


def missing_option(name: str) -> PipelineError:
    return PipelineError(
        kind="missing_option",
        message=f"missing required option `{name}`",
    )


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (missing option, invalid manifest)
    - 2: Config error (a required fragment could not be loaded)
    - 3: Step error (a pipeline command failed)
    - 4: Network error (retry ceiling exceeded, artifact transfer failed)
    - 5: I/O error (credential file could not be written)
    """

    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    STEP_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")


def exit_code_for(error: PipelineError) -> ErrorCode:
    match error.kind:
        case "missing_option" | "validation":
            return ErrorCode.USER_ERROR
        case "config_load":
            return ErrorCode.CONFIG_ERROR
        case "step_failed" | "partial_failure":
            return ErrorCode.STEP_ERROR
        case "retry_exceeded" | "artifact":
            return ErrorCode.NETWORK_ERROR
        case "credential_write":
            return ErrorCode.IO_ERROR
