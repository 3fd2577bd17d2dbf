"""
Connection configuration dataclass for the FileMaker Data API SDK.

Provides an immutable configuration container, loadable from the process
environment (and a ``.env`` file) for scripts and integration tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from .types import DapiVersion, HttpClientType

_TRUE_VALUES = ("1", "true", "yes", "on")


def _env_flag(value: str | None, default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class ConnectionConfig:
    """
    Immutable configuration for one Data API session.

    Attributes:
        url: Data API root, e.g. "https://fms.example.com/fmi/data"
        database: Hosted file name
        username: Account name; when set, the session logs in on creation
        password: Account password
        ssl_verify: Verify the server's TLS certificate
        force_legacy_http: Restrict the exchange to HTTP/1.1
        http_client: Transport binding
        api_version: URL version prefix
        timeout: Request timeout in seconds
        return_raw_response: Return ``Response`` objects instead of payloads
        forget_credentials_on_logout: Drop stored credentials on ``logout()``
    """

    url: str
    database: str
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    ssl_verify: bool = True
    force_legacy_http: bool = False
    http_client: HttpClientType = HttpClientType.HTTPX
    api_version: DapiVersion = DapiVersion.V1
    timeout: float = 30.0
    return_raw_response: bool = False
    forget_credentials_on_logout: bool = True

    @classmethod
    def from_env(cls, prefix: str = "FM_", dotenv: bool = True) -> ConnectionConfig:
        """
        Build a configuration from ``<prefix>*`` environment variables.

        Reads ``SERVER_URL``, ``DATABASE``, ``USERNAME``, ``PASSWORD``,
        ``SSL_VERIFY``, ``FORCE_LEGACY_HTTP``, ``HTTP_CLIENT``,
        ``API_VERSION``, ``TIMEOUT``, ``RETURN_RAW_RESPONSE`` and
        ``FORGET_CREDENTIALS_ON_LOGOUT``. A ``.env`` file in the working
        directory is loaded first unless ``dotenv`` is false; variables
        already set in the environment win.

        Raises:
            ValueError: If the server URL or database is missing, or a value is invalid
        """
        if dotenv:
            load_dotenv()

        def get(name: str) -> str | None:
            return os.getenv(f"{prefix}{name}")

        url = get("SERVER_URL")
        database = get("DATABASE")
        if not url or not database:
            raise ValueError(f"{prefix}SERVER_URL and {prefix}DATABASE must be set")

        http_client = get("HTTP_CLIENT")
        api_version = get("API_VERSION")
        timeout = get("TIMEOUT")

        return cls(
            url=url,
            database=database,
            username=get("USERNAME") or None,
            password=get("PASSWORD") or None,
            ssl_verify=_env_flag(get("SSL_VERIFY"), True),
            force_legacy_http=_env_flag(get("FORCE_LEGACY_HTTP"), False),
            http_client=HttpClientType.from_string(http_client) if http_client else HttpClientType.HTTPX,
            api_version=DapiVersion.from_string(api_version) if api_version else DapiVersion.V1,
            timeout=float(timeout) if timeout else 30.0,
            return_raw_response=_env_flag(get("RETURN_RAW_RESPONSE"), False),
            forget_credentials_on_logout=_env_flag(get("FORGET_CREDENTIALS_ON_LOGOUT"), True),
        )


__all__ = ["ConnectionConfig"]
