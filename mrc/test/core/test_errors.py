"""Tests for mrc.core.errors module."""

import pytest

from mrc.core.errors import ErrorCode


class TestErrorCode:
    """Exit codes are stable integers."""

    @pytest.mark.parametrize(
        ("code", "value"),
        [
            (ErrorCode.OK, 0),
            (ErrorCode.USER_ERROR, 1),
            (ErrorCode.ENV_ERROR, 2),
            (ErrorCode.GIT_ERROR, 3),
        ],
    )
    def test_values(self, code: ErrorCode, value: int) -> None:
        assert int(code) == value

    def test_is_error(self) -> None:
        assert not ErrorCode.OK.is_error
        assert ErrorCode.GIT_ERROR.is_error

    def test_str(self) -> None:
        assert str(ErrorCode.ENV_ERROR) == "env error"
