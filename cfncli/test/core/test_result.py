"""Tests for cfncli.core.result module."""

import pytest

from cfncli.core.result import Err, Ok, Result


class TestOk:
    def test_carries_value(self) -> None:
        assert Ok("stack-id").value == "stack-id"

    def test_equality(self) -> None:
        assert Ok(1) == Ok(1)
        assert Ok(1) != Err(1)

    def test_frozen(self) -> None:
        result = Ok(1)
        with pytest.raises(AttributeError):
            result.value = 2  # type: ignore[misc]


class TestErr:
    def test_carries_error(self) -> None:
        assert Err("throttled").error == "throttled"

    def test_repr(self) -> None:
        assert repr(Err("boom")) == "Err('boom')"
        assert repr(Ok(3)) == "Ok(3)"


def test_pattern_matching() -> None:
    result: Result[int, str] = Err("nope")
    match result:
        case Ok(value):
            pytest.fail(f"unexpected value {value}")
        case Err(error):
            assert error == "nope"
