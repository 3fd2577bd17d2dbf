"""
FileMaker Data API SDK Exceptions.

Custom exception hierarchy for the SDK.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .protocol.response import Response


class DataAPIError(Exception):
    """Base exception for all Data API SDK errors."""

    def __init__(self, message: str, code: int | str | None = None):
        self.message = message
        self.code = code
        super().__init__(message)


class ConnectionError(DataAPIError):
    """Raised when the transport cannot reach the server (network, TLS, encoding)."""

    pass


class ProtocolError(DataAPIError):
    """Raised when a reply has a malformed status line or a non-JSON body."""

    pass


class APIError(DataAPIError):
    """Raised when the server answers with an application error.

    ``code`` is the Data API message code when the server sent one, else the
    HTTP status. Numeric strings such as ``"401"`` are coerced to ``int``.
    """

    def __init__(self, message: str, code: int | str | None = None, response: "Response | None" = None):
        self.response = response
        super().__init__(message, _coerce_code(code))


class AuthenticationError(DataAPIError):
    """Raised when no bearer token can be produced for a protected call.

    This is always raised before any request is sent.
    """

    pass


class ValidationError(DataAPIError):
    """Raised when a caller supplies an invalid argument."""

    pass


def _coerce_code(code: Any) -> int | str | None:
    if isinstance(code, str) and code.strip().lstrip("-").isdigit():
        return int(code.strip())
    return code
