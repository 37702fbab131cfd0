"""Error codes and exceptions for the Pogoplug API.

Every failed API call answers with an ``HB-EXCEPTION`` object carrying a
numeric ``ecode``. This module maps those codes to readable messages and
defines the exceptions raised by the client.
"""

from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    """Numeric error codes returned in ``HB-EXCEPTION`` envelopes."""

    CLIENT_ERROR = 400
    SERVER_ERROR = 500
    INVALID_ARGUMENT = 600
    OUT_OF_RANGE = 601
    NOT_IMPLEMENTED = 602
    NOT_AUTHORIZED = 606
    NO_SUCH_USER = 800
    NO_SUCH_DEVICE = 801
    NO_SUCH_SERVICE = 802
    NO_SUCH_SPACE = 803
    NO_SUCH_FILE = 804
    INSUFFICIENT_PERMISSIONS = 805
    NOT_AVAILABLE = 806


ERROR_MESSAGES: dict[int, str] = {
    ErrorCode.CLIENT_ERROR: "Unspecified client error",
    ErrorCode.SERVER_ERROR: "Unspecified server error",
    ErrorCode.INVALID_ARGUMENT: "Invalid argument format or missing required argument",
    ErrorCode.OUT_OF_RANGE: "Index into list out of range (e.g. page offset)",
    ErrorCode.NOT_IMPLEMENTED: (
        "The request cannot be fulfilled because it is not implemented"
    ),
    ErrorCode.NOT_AUTHORIZED: "The valtoken is not valid or has expired",
    ErrorCode.NO_SUCH_USER: "User does not exist",
    ErrorCode.NO_SUCH_DEVICE: "The referenced device does not exist",
    ErrorCode.NO_SUCH_SERVICE: "The referenced service does not exist",
    ErrorCode.NO_SUCH_SPACE: "The referenced space does not exist",
    ErrorCode.NO_SUCH_FILE: "The referenced file does not exist",
    ErrorCode.INSUFFICIENT_PERMISSIONS: (
        "The user represented by the valtoken does not have permission to do this"
    ),
    ErrorCode.NOT_AVAILABLE: "Generic unavailable error response",
}

UNKNOWN_ERROR_MESSAGE = "Unknown error"


def error_message(ecode: int) -> str:
    """Return the human readable message for an API error code.

    Args:
        ecode: Numeric code from an ``HB-EXCEPTION`` envelope.

    Returns:
        The catalog message, or ``"Unknown error"`` for unmapped codes.
    """
    return ERROR_MESSAGES.get(ecode, UNKNOWN_ERROR_MESSAGE)


class PogoplugError(Exception):
    """Base exception for all Pogoplug client errors."""

    pass


class RequestError(PogoplugError):
    """Base for errors tied to a specific API request."""

    def __init__(self, message: str, *, url: str, method: str) -> None:
        self.url = url
        self.method = method
        super().__init__(f"{message} (method={method}, query={url})")


class TransportError(RequestError):
    """Raised when no response was received for a request."""

    pass


class DecodeError(RequestError):
    """Raised when a response body cannot be decoded into a payload."""

    pass


class ApiError(RequestError):
    """Raised when the API answers with an ``HB-EXCEPTION`` envelope."""

    def __init__(
        self,
        ecode: int,
        *,
        url: str,
        method: str,
        detail: str = "",
    ) -> None:
        self.ecode = ecode
        self.detail = detail
        message = f"API request failed! {error_message(ecode)} [{ecode}]"
        if detail:
            message += f": {detail}"
        super().__init__(message, url=url, method=method)


class TokenExpiredError(ApiError):
    """Raised when the valtoken is still rejected after a refresh."""

    pass
