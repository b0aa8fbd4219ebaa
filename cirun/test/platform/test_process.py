"""Tests for cirun.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from cirun.core.result import Err, Ok
from cirun.platform.process import ProcessError, run, run_streaming


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(command=("git", "log"), returncode=128, stdout="", stderr="fatal")
        assert str(error) == "git log failed (exit 128)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("npm", "dist-tag", "rm", "pkg", "canary"), returncode=1, stdout="", stderr=""
        )
        assert str(error) == "npm dist-tag rm ... failed (exit 1)"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "hello" in result.value

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "import sys; sys.exit(42)"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 42

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1

    def test_extra_env_is_layered(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import os; print(os.environ['CIRUN_PROBE'])"],
            cwd=tmp_path,
            env={"CIRUN_PROBE": "layered"},
        )

        assert isinstance(result, Ok)
        assert result.value.strip() == "layered"

    def test_timeout(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import time; time.sleep(5)"], cwd=tmp_path, timeout=0.2
        )

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert "timed out" in result.error.stderr


class TestRunStreaming:
    def test_success(self, tmp_path: Path) -> None:
        assert run_streaming([sys.executable, "-c", "pass"], cwd=tmp_path) == Ok(None)

    def test_failure_keeps_exit_code(self, tmp_path: Path) -> None:
        result = run_streaming([sys.executable, "-c", "raise SystemExit(3)"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 3
