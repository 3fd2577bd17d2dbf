"""
FileMaker Data API SDK - A Python client for the FileMaker Data API.

Talks to a FileMaker Server's Data API over HTTP(S) REST and handles the
session token lifecycle, request option encoding and error conventions.

Supports:
- Basic and OAuth logins with silent re-authentication of stale tokens
- Record create/edit/duplicate/delete/get and find requests
- Scripts (pre-request, pre-sort, post-request and stand-alone)
- Container uploads, global fields and metadata endpoints
- httpx (default) and requests transports
"""

from typing import Any

from .auth import BasicCredentials, Credentials, OAuthCredentials, TokenManager
from .config import ConnectionConfig
from .connection import BaseTransport, FileUpload, HTTPXTransport, RequestsTransport, TransportResponse, create_transport
from .exceptions import (
    APIError,
    AuthenticationError,
    ConnectionError,
    DataAPIError,
    ProtocolError,
    ValidationError,
)
from .protocol import (
    FindOptions,
    FindQueryItem,
    PortalSpec,
    QueryField,
    Response,
    ScriptSpec,
    SortSpec,
    compile_date_format,
    compile_find_query,
    compile_portals,
    compile_scripts,
    compile_sort,
    url_encode_segment,
)
from .session import FIND_ERROR_POLICY, DataAPI, recover_find_error
from .types import (
    FILEMAKER_API_TOKEN_EXPIRED,
    FILEMAKER_NO_RECORDS,
    DapiVersion,
    DateFormat,
    HttpClientType,
    Outcome,
    RecoveryAction,
    ScriptType,
    TokenExpired,
)

__version__ = "0.1.0"
__all__ = [
    # Session
    "DataAPI",
    "FileMaker",
    "ConnectionConfig",
    "FIND_ERROR_POLICY",
    "recover_find_error",
    # Auth
    "TokenManager",
    "Credentials",
    "BasicCredentials",
    "OAuthCredentials",
    # Transports
    "BaseTransport",
    "HTTPXTransport",
    "RequestsTransport",
    "TransportResponse",
    "FileUpload",
    "create_transport",
    # Protocol
    "Response",
    "ScriptSpec",
    "PortalSpec",
    "SortSpec",
    "FindQueryItem",
    "FindOptions",
    "QueryField",
    "compile_scripts",
    "compile_portals",
    "compile_sort",
    "compile_date_format",
    "compile_find_query",
    "url_encode_segment",
    # Types
    "DapiVersion",
    "DateFormat",
    "HttpClientType",
    "ScriptType",
    "RecoveryAction",
    "Outcome",
    "TokenExpired",
    "FILEMAKER_NO_RECORDS",
    "FILEMAKER_API_TOKEN_EXPIRED",
    # Exceptions
    "DataAPIError",
    "ConnectionError",
    "ProtocolError",
    "APIError",
    "AuthenticationError",
    "ValidationError",
]


class FileMaker:
    """
    Factory class for creating Data API sessions.

    Usage:
        # httpx transport (default)
        with FileMaker.httpx("https://fms.example.com/fmi/data", "Contacts", "admin", "secret") as api:
            records = api.get_records("People", limit=10)

        # requests transport
        api = FileMaker.requests("https://fms.example.com/fmi/data", "Contacts")
        api.login_oauth(request_id, identifier)

        # from FM_* environment variables / .env
        api = FileMaker.from_env()
    """

    @staticmethod
    def httpx(url: str, database: str, username: str | None = None, password: str | None = None, **kwargs: Any) -> DataAPI:
        """Create a session on the httpx transport."""
        return DataAPI(url, database, username, password, http_client=HttpClientType.HTTPX, **kwargs)

    @staticmethod
    def requests(url: str, database: str, username: str | None = None, password: str | None = None, **kwargs: Any) -> DataAPI:
        """Create a session on the requests transport."""
        return DataAPI(url, database, username, password, http_client=HttpClientType.REQUESTS, **kwargs)

    @staticmethod
    def from_env(prefix: str = "FM_", **kwargs: Any) -> DataAPI:
        """Create a session from ``<prefix>*`` environment variables."""
        return DataAPI.from_config(ConnectionConfig.from_env(prefix), **kwargs)
