"""Tests for tagrel.platform.process."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from tagrel.core.result import Err, Ok
from tagrel.platform.process import ProcessError, merged_env, run, run_streaming


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(("git", "push"), 1, "", "rejected")
        assert str(error) == "git push failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(("git", "push", "upstream", "refs/tags/v1.0.0"), 1, "", "")
        assert str(error) == "git push upstream ... failed (exit 1)"

    def test_detail_prefers_stderr(self) -> None:
        assert ProcessError(("x",), 1, "out", " err \n").detail == "err"
        assert ProcessError(("x",), 1, "out\n", "").detail == "out"


def test_merged_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TAGREL_TEST_KEEP", "1")
    env = merged_env({"PUBLISH": "TRUE"})
    assert env["TAGREL_TEST_KEEP"] == "1"
    assert env["PUBLISH"] == "TRUE"


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

    def test_timeout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "import time; time.sleep(5)"], cwd=tmp_path, timeout=0.2)
        assert isinstance(result, Err)
        assert "timed out" in result.error.stderr


class TestRunStreaming:
    def test_preserves_exit_code(self, tmp_path: Path) -> None:
        result = run_streaming([sys.executable, "-c", "import sys; sys.exit(3)"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == 3

    def test_passes_environment(self, tmp_path: Path) -> None:
        script = "import os, sys; sys.exit(0 if os.environ.get('PUBLISH') == 'TRUE' else 9)"
        result = run_streaming([sys.executable, "-c", script], cwd=tmp_path, env=merged_env({"PUBLISH": "TRUE"}))
        assert result == Ok(None)

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
    def test_killed_by_signal_is_started(self, tmp_path: Path) -> None:
        result = run_streaming(["sh", "-c", "kill -TERM $$"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == -15
        assert result.error.started is True

    def test_command_not_found_is_not_started(self, tmp_path: Path) -> None:
        result = run_streaming(["nonexistent_command_12345"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.started is False
