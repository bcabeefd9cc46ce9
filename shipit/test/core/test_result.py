"""Tests for shipit.core.result."""

from __future__ import annotations

import pytest

from shipit.core.result import Err, Ok, Result, is_err, is_ok


def _parse_port(text: str) -> Result[int, str]:
    if not text.isdigit():
        return Err(f"not a port: {text}")
    return Ok(int(text))


class TestOkErr:
    def test_frozen(self) -> None:
        ok = Ok(1)
        with pytest.raises(AttributeError):
            ok.value = 2  # type: ignore[misc]

    def test_equality(self) -> None:
        assert Ok(22) == Ok(22)
        assert Ok(22) != Err(22)

    def test_repr(self) -> None:
        assert repr(Ok(1)) == "Ok(1)"
        assert repr(Err("x")) == "Err('x')"


class TestTypeGuards:
    def test_is_ok(self) -> None:
        assert is_ok(_parse_port("22"))
        assert not is_ok(_parse_port("ssh"))

    def test_is_err(self) -> None:
        result = _parse_port("ssh")
        assert is_err(result)
        assert result.error == "not a port: ssh"

    def test_match(self) -> None:
        match _parse_port("8080"):
            case Ok(value):
                assert value == 8080
            case Err(_):
                pytest.fail("expected Ok")
