"""
Session token lifecycle for the FileMaker Data API SDK.

``TokenManager`` owns the bearer token, the time it was last used and the
credentials needed to silently log in again. Every protected call asks it
for an ``Authorization`` header first.

Data API tokens expire 15 minutes after their last use, so each successful
``auth_header()`` renews the local timestamp (sliding window) and a token
idle for more than 14 minutes is treated as stale and replaced.

A manager is not safe for concurrent use: two calls racing on one instance
can interleave a refresh with a stale read. Use one session per worker, or
guard the authenticate-then-call sequence with a lock.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from ..exceptions import APIError
from ..types import TOKEN_LIFETIME_SECONDS, Outcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BasicCredentials:
    """Username/password pair replayed through Basic auth."""

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class OAuthCredentials:
    """OAuth request id and identifier replayed through the OAuth login headers."""

    request_id: str
    identifier: str = field(repr=False)


Credentials = BasicCredentials | OAuthCredentials


class TokenManager:
    """
    Gate for every authenticated call.

    Args:
        reauthenticate: Opens a new server session from stored credentials
            and returns its token. Supplied by the owning session.
        clock: Returns the current time in epoch seconds
        lifetime: Idle seconds after which the token is considered stale
    """

    def __init__(
        self,
        reauthenticate: Callable[[Credentials], str] | None = None,
        clock: Callable[[], float] = time.time,
        lifetime: float = TOKEN_LIFETIME_SECONDS,
    ):
        self._reauthenticate = reauthenticate
        self._clock = clock
        self.lifetime = lifetime
        self._token: str | None = None
        self._issued_at: float | None = None
        self._credentials: Credentials | None = None

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def issued_at(self) -> float | None:
        """Epoch seconds of the last issue or use of the token."""
        return self._issued_at

    @property
    def has_token(self) -> bool:
        return self._token is not None

    @property
    def credentials(self) -> Credentials | None:
        return self._credentials

    def set_token(self, token: str | None, issued_at: float | datetime | None = None) -> Outcome[str]:
        """
        Store a token.

        Args:
            token: The bearer token; empty or ``None`` is rejected
            issued_at: Issue time (epoch seconds or datetime); defaults to now
        """
        if token is None or token == "":
            return Outcome.failure("Token is empty")
        if isinstance(issued_at, datetime):
            issued_at = issued_at.timestamp()
        self._token = token
        self._issued_at = self._clock() if issued_at is None else float(issued_at)
        return Outcome.success(token)

    def is_expired(self) -> bool:
        """True when no issue time is recorded or the token idled past ``lifetime``."""
        if self._issued_at is None:
            return True
        return self._clock() - self._issued_at > self.lifetime

    def store_credentials(self, username: str, password: str) -> Outcome[Credentials]:
        """
        Keep Basic credentials as the re-authentication strategy.

        Any previously stored strategy is dropped first, so a rejected pair
        leaves nothing to refresh with.
        """
        self._credentials = None
        if not username or not password:
            return Outcome.failure("Username and password are required")
        self._credentials = BasicCredentials(username, password)
        return Outcome.success(self._credentials)

    def store_oauth(self, request_id: str, identifier: str) -> Outcome[Credentials]:
        """Keep OAuth identifiers as the re-authentication strategy."""
        self._credentials = None
        if not request_id or not identifier:
            return Outcome.failure("OAuth request id and identifier are required")
        self._credentials = OAuthCredentials(request_id, identifier)
        return Outcome.success(self._credentials)

    def refresh(self) -> Outcome[str]:
        """
        Replay the stored login to get a fresh token.

        Fails when no credentials were stored (manual token, or never logged
        in) or when the server rejects the login. Transport and protocol
        errors propagate.
        """
        if self._credentials is None:
            return Outcome.failure("No stored credentials to re-authenticate with")
        if self._reauthenticate is None:
            return Outcome.failure("No re-authentication method configured")

        try:
            token = self._reauthenticate(self._credentials)
        except APIError as e:
            logger.warning(f"Token refresh rejected by server (code {e.code}): {e.message}")
            return Outcome.failure(f"Re-authentication failed: {e.message}")

        logger.info("Session token refreshed")
        return self.set_token(token)

    def auth_header(self) -> Outcome[dict[str, str]]:
        """
        Produce the ``Authorization`` header for a protected call.

        A stale token is refreshed first; when that fails the token is
        dropped and a failure is returned. A fresh token has its timestamp
        renewed.
        """
        if self._token is None:
            return Outcome.failure("Not logged in")

        if self.is_expired():
            refreshed = self.refresh()
            if not refreshed.ok:
                self.clear()
                return Outcome.failure(refreshed.reason)
        else:
            self._issued_at = self._clock()

        return Outcome.success({"Authorization": f"Bearer {self._token}"})

    def clear(self, forget_credentials: bool = False) -> None:
        """Drop the token and its timestamp, and optionally the stored credentials."""
        self._token = None
        self._issued_at = None
        if forget_credentials:
            self._credentials = None


__all__ = [
    "BasicCredentials",
    "Credentials",
    "OAuthCredentials",
    "TokenManager",
]
