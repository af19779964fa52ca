"""Tests for codepush.core.result module."""

from __future__ import annotations

import pytest

from codepush.core.result import Err, Ok, Result, is_err, is_ok


def _parse_rollout(raw: str) -> Result[int, str]:
    if not raw.isdigit():
        return Err("not an integer")
    return Ok(int(raw))


class TestOk:
    def test_value_and_flags(self) -> None:
        result = Ok(25)
        assert result.value == 25
        assert result.is_ok()
        assert not result.is_err()

    def test_unwrap(self) -> None:
        assert Ok("x").unwrap() == "x"
        assert Ok("x").unwrap_or("y") == "x"

    def test_map(self) -> None:
        assert Ok(2).map(lambda v: v * 10) == Ok(20)

    def test_map_err_is_noop(self) -> None:
        assert Ok(2).map_err(lambda e: f"wrapped {e}") == Ok(2)

    def test_and_then_chains(self) -> None:
        assert Ok("50").and_then(_parse_rollout) == Ok(50)
        assert Ok("abc").and_then(_parse_rollout) == Err("not an integer")

    def test_frozen(self) -> None:
        result = Ok(1)
        with pytest.raises(AttributeError):
            result.value = 2  # type: ignore[misc]


class TestErr:
    def test_error_and_flags(self) -> None:
        result = Err("boom")
        assert result.error == "boom"
        assert result.is_err()
        assert not result.is_ok()

    def test_unwrap_raises(self) -> None:
        with pytest.raises(ValueError, match="boom"):
            Err("boom").unwrap()

    def test_unwrap_or_returns_default(self) -> None:
        assert Err("boom").unwrap_or(7) == 7

    def test_map_is_noop(self) -> None:
        assert Err("boom").map(lambda v: v) == Err("boom")

    def test_map_err(self) -> None:
        assert Err(404).map_err(lambda code: f"HTTP {code}") == Err("HTTP 404")

    def test_and_then_short_circuits(self) -> None:
        called: list[str] = []

        def step(value: str) -> Result[int, str]:
            called.append(value)
            return Ok(1)

        assert Err("first failure").and_then(step) == Err("first failure")
        assert called == []


def test_type_guards() -> None:
    assert is_ok(_parse_rollout("10"))
    assert is_err(_parse_rollout("ten"))


def test_pattern_matching() -> None:
    match _parse_rollout("75"):
        case Ok(value):
            assert value == 75
        case Err(_):
            pytest.fail("expected Ok")
