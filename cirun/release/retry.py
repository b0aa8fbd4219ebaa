"""Bounded retry with a wall-clock ceiling.

The ceiling bounds elapsed time, not attempts: a failure retries immediately
while less than `ceiling_seconds` have passed since the first attempt.

    Attempting --ok--> Succeeded
    Attempting --err, elapsed < ceiling--> Attempting
    Attempting --err, elapsed >= ceiling--> Exceeded
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from cirun.core.errors import PipelineError
from cirun.core.result import Err, Ok, Result
from cirun.metadata.model import DEFAULT_RETRY_CEILING_SECONDS

__all__ = ["RetrySession", "RetryState", "retry_until"]


class RetryState(StrEnum):
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    EXCEEDED = "exceeded"


@dataclass(slots=True)
class RetrySession:
    """State of one `retry_until` call."""

    started_at: float
    ceiling_seconds: float
    attempts: int = 0
    last_error: PipelineError | None = None
    state: RetryState = RetryState.ATTEMPTING

    def record_failure(self, error: PipelineError, now: float) -> RetryState:
        self.last_error = error
        if now - self.started_at >= self.ceiling_seconds:
            self.state = RetryState.EXCEEDED
        return self.state


def retry_until[T](
    operation: Callable[[], Result[T, PipelineError]],
    ceiling_seconds: float | None = None,
    *,
    subject: str = "package",
    clock: Callable[[], float] = time.monotonic,
    on_failure: Callable[[RetrySession], None] | None = None,
) -> Result[T, PipelineError]:
    """Run `operation` until it succeeds or the ceiling is reached.

    The clock is read once when the session starts and once after every
    failed attempt.

    Returns:
        The first successful result, or Err(kind="retry_exceeded") wrapping
        the last failure.
    """
    ceiling = DEFAULT_RETRY_CEILING_SECONDS if ceiling_seconds is None else ceiling_seconds
    session = RetrySession(started_at=clock(), ceiling_seconds=ceiling)

    while True:
        session.attempts += 1
        result = operation()
        if isinstance(result, Ok):
            session.state = RetryState.SUCCEEDED
            return result

        state = session.record_failure(result.error, clock())
        if on_failure is not None:
            on_failure(session)
        if state is RetryState.EXCEEDED:
            return Err(
                PipelineError(
                    kind="retry_exceeded",
                    message=(
                        f"unable to install {subject} after {session.attempts} attempt(s) "
                        f"in {ceiling:g}s"
                    ),
                    hint=result.error.pretty(),
                )
            )
