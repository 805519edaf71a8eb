"""Tests for tagrel.core.result."""

import pytest

from tagrel.core.result import Err, Ok, Result, is_err, is_ok


class TestOk:
    def test_value_access(self) -> None:
        result = Ok(42)
        assert result.is_ok() is True
        assert result.is_err() is False
        assert result.unwrap() == 42
        assert result.unwrap_or(0) == 42


class TestErr:
    def test_error_access(self) -> None:
        result: Err[str] = Err("boom")
        assert result.is_ok() is False
        assert result.is_err() is True
        assert result.unwrap_or(7) == 7

    def test_unwrap_raises(self) -> None:
        with pytest.raises(ValueError, match="called unwrap on Err"):
            Err("boom").unwrap()


def test_type_guards() -> None:
    ok: Result[int, str] = Ok(1)
    err: Result[int, str] = Err("e")
    assert is_ok(ok) and not is_err(ok)
    assert is_err(err) and not is_ok(err)
