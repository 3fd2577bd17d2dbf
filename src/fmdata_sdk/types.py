"""
Type definitions for the FileMaker Data API SDK.

Enumerations for the wire-level constants, plus the small value types the
session and token layers return instead of bare booleans.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class DapiVersion(str, Enum):
    """Data API version tag used as the URL path prefix."""

    V1 = "v1"
    V2 = "v2"
    VLATEST = "vLatest"

    @classmethod
    def from_string(cls, value: str) -> "DapiVersion":
        """Parse a version tag case-insensitively.

        Raises:
            ValueError: If the tag is not a supported version.
        """
        lookup = {member.value.lower(): member for member in cls}
        try:
            return lookup[value.strip().lower()]
        except (KeyError, AttributeError):
            raise ValueError(
                f"Invalid API version: {value!r}. Supported versions are 'v1', 'v2', and 'vLatest'."
            ) from None


class HttpClientType(str, Enum):
    """Concrete transport binding selected by ``create_transport``."""

    HTTPX = "httpx"
    REQUESTS = "requests"

    @classmethod
    def from_string(cls, value: str) -> "HttpClientType":
        """Parse a client type case-insensitively.

        Raises:
            ValueError: If the name is not a supported client.
        """
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError):
            raise ValueError(
                f"Invalid HTTP client type: {value!r}. Supported types are 'httpx' and 'requests'."
            ) from None


class DateFormat(IntEnum):
    """Value of the ``dateformats`` request option."""

    DEFAULT = 0
    FILE_LOCALE = 1
    ISO8601 = 2


class ScriptType(str, Enum):
    """Point in the request at which a FileMaker script runs."""

    PREREQUEST = "prerequest"
    PRESORT = "presort"
    POSTREQUEST = "postrequest"


class RecoveryAction(str, Enum):
    """What ``find_records`` does with a remapped application error."""

    EMPTY_RESULT = "empty_result"
    TOKEN_EXPIRED = "token_expired"


# Data API message codes with special handling.
FILEMAKER_NO_RECORDS = 401
FILEMAKER_API_TOKEN_EXPIRED = 952

# Tokens are valid 15 minutes server-side; refresh a minute early.
TOKEN_LIFETIME_SECONDS = 14 * 60


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Success/failure result for internal setters and pre-flight steps.

    A stored value like ``"0"`` can never be mistaken for failure because
    callers check ``ok`` rather than the value's truthiness.

    Attributes:
        ok: Whether the step succeeded
        value: The produced value on success
        reason: Human readable cause on failure
    """

    ok: bool
    value: T | None = None
    reason: str = ""

    @classmethod
    def success(cls, value: T | None = None) -> "Outcome[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, reason: str) -> "Outcome[T]":
        return cls(ok=False, reason=reason)

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True)
class TokenExpired:
    """
    Returned by ``find_records`` when the server reports code 952.

    The token expired while the request was in flight. The session does not
    retry; the caller decides whether to call ``refresh_token()`` and re-run
    the find.
    """

    code: int = FILEMAKER_API_TOKEN_EXPIRED
    message: str = ""
    raw: dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return False
