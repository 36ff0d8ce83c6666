"""Tests for cfncli.core.errors module."""

import pytest

from cfncli.core.errors import ErrorCode


class TestErrorCodeValues:
    """Exit codes are part of the CLI contract."""

    @pytest.mark.parametrize(
        ("code", "value"),
        [
            (ErrorCode.OK, 0),
            (ErrorCode.USER_ERROR, 1),
            (ErrorCode.ENV_ERROR, 2),
            (ErrorCode.DEPLOY_ERROR, 3),
            (ErrorCode.NETWORK_ERROR, 4),
            (ErrorCode.IO_ERROR, 5),
            (ErrorCode.TIMEOUT, 6),
            (ErrorCode.NOOP, 7),
            (ErrorCode.CANCELLED, 130),
        ],
    )
    def test_value(self, code: ErrorCode, value: int) -> None:
        assert code == value
        assert int(code) == value
