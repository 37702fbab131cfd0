"""Tests for the error code catalog and exceptions."""

from __future__ import annotations

import pytest

from pypogoplug.native import ApiError, ErrorCode, TokenExpiredError, error_message
from pypogoplug.native.errors import ERROR_MESSAGES, UNKNOWN_ERROR_MESSAGE


class TestErrorMessage:
    """Tests for error_message lookup."""

    @pytest.mark.parametrize(
        ("ecode", "fragment"),
        [
            (400, "client error"),
            (500, "server error"),
            (600, "Invalid argument"),
            (601, "out of range"),
            (602, "not implemented"),
            (606, "valtoken is not valid"),
            (800, "User does not exist"),
            (801, "device does not exist"),
            (802, "service does not exist"),
            (803, "space does not exist"),
            (804, "file does not exist"),
            (805, "permission"),
            (806, "unavailable"),
        ],
    )
    def test_known_codes(self, ecode: int, fragment: str) -> None:
        """Test that every catalogued code has its message."""
        assert fragment in error_message(ecode)

    @pytest.mark.parametrize("ecode", [0, -1, 200, 404, 607, 999])
    def test_unknown_codes(self, ecode: int) -> None:
        """Test that unmapped codes fall back to the default message."""
        assert error_message(ecode) == UNKNOWN_ERROR_MESSAGE == "Unknown error"

    def test_catalog_covers_enum(self) -> None:
        """Test that each ErrorCode has a catalog entry."""
        assert set(ERROR_MESSAGES) == set(ErrorCode)


class TestApiError:
    """Tests for ApiError formatting."""

    def test_message_includes_context(self) -> None:
        """Test that the message names the code, method and URL."""
        error = ApiError(802, url="http://x/json/listFiles?serviceid=s9", method="listFiles")
        text = str(error)
        assert "The referenced service does not exist" in text
        assert "[802]" in text
        assert "method=listFiles" in text
        assert "serviceid=s9" in text

    def test_token_expired_is_api_error(self) -> None:
        """Test that TokenExpiredError can be caught as ApiError."""
        with pytest.raises(ApiError):
            raise TokenExpiredError(606, url="http://x", method="getUser")
