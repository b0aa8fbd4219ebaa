"""Tests for cirun.release.retry module."""

from __future__ import annotations

from collections.abc import Iterator

from cirun.core.errors import PipelineError
from cirun.core.result import Err, Ok, Result
from cirun.release.retry import RetrySession, RetryState, retry_until

FAILURE = PipelineError(kind="step_failed", message="npm install failed")


def fake_clock(*readings: float) -> Iterator[float]:
    return iter(readings)


class Flaky:
    """Fails `failures` times, then succeeds."""

    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.attempts = 0

    def __call__(self) -> Result[str, PipelineError]:
        self.attempts += 1
        if self.attempts <= self.failures:
            return Err(FAILURE)
        return Ok("installed")


class TestRetryUntil:
    def test_fails_once_ceiling_reached(self) -> None:
        operation = Flaky(failures=100)
        clock = fake_clock(0, 10, 50, 100, 179, 180, 1000)
        result = retry_until(operation, 180, clock=lambda: next(clock))

        assert isinstance(result, Err)
        assert operation.attempts == 5
        assert result.error.kind == "retry_exceeded"
        assert result.error.message == "unable to install package after 5 attempt(s) in 180s"
        assert result.error.hint == "npm install failed"

    def test_succeeds_before_ceiling(self) -> None:
        operation = Flaky(failures=2)
        clock = fake_clock(0, 1, 2)
        result = retry_until(operation, 180, clock=lambda: next(clock))

        assert result == Ok("installed")
        assert operation.attempts == 3

    def test_first_attempt_success_reads_clock_once(self) -> None:
        readings: list[float] = []

        def clock() -> float:
            readings.append(0.0)
            return 0.0

        assert retry_until(Flaky(failures=0), 10, clock=clock) == Ok("installed")
        assert len(readings) == 1

    def test_zero_ceiling_single_attempt(self) -> None:
        operation = Flaky(failures=1)
        result = retry_until(operation, 0, clock=lambda: 42.0)

        assert isinstance(result, Err)
        assert operation.attempts == 1

    def test_default_ceiling(self) -> None:
        clock = fake_clock(0, 179.9, 180)
        result = retry_until(Flaky(failures=5), clock=lambda: next(clock), subject="pkg@1.0.0")

        assert isinstance(result, Err)
        assert result.error.message == "unable to install pkg@1.0.0 after 2 attempt(s) in 180s"

    def test_on_failure_sees_session(self) -> None:
        seen: list[tuple[int, RetryState]] = []

        def record(session: RetrySession) -> None:
            seen.append((session.attempts, session.state))

        clock = fake_clock(0, 5, 20)
        retry_until(Flaky(failures=5), 10, clock=lambda: next(clock), on_failure=record)

        assert seen == [(1, RetryState.ATTEMPTING), (2, RetryState.EXCEEDED)]


def test_record_failure() -> None:
    session = RetrySession(started_at=100.0, ceiling_seconds=60.0)
    assert session.record_failure(FAILURE, 130.0) is RetryState.ATTEMPTING
    assert session.record_failure(FAILURE, 160.0) is RetryState.EXCEEDED
    assert session.last_error == FAILURE
