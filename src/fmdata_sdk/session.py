"""
Session facade for the FileMaker Data API SDK.

``DataAPI`` is the public operation surface: login/logout, record CRUD,
finds, scripts, container uploads and metadata. Each protected call
compiles its options, asks the ``TokenManager`` for a bearer header (so a
stale token is silently replaced before anything is sent), issues the
request through the transport and applies the call's error policy.

Example::

    from fmdata_sdk import DataAPI

    with DataAPI("https://fms.example.com/fmi/data", "Contacts", "admin", "secret") as api:
        record_id = api.create_record("People", {"Name": "Ada"})
        found = api.find_records("People", [{"fields": [{"fieldname": "Name", "fieldvalue": "Ada"}]}])
"""

import base64
import logging
import os
import time
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any, Self

from .auth.token import BasicCredentials, Credentials, OAuthCredentials, TokenManager
from .config import ConnectionConfig
from .connection import BaseTransport, FileUpload, create_transport
from .exceptions import APIError, AuthenticationError, DataAPIError, ProtocolError, ValidationError
from .protocol.options import (
    compile_date_format,
    compile_find_query,
    compile_paging,
    compile_portals,
    compile_response_layout,
    compile_scripts,
    compile_sort,
    stringify_field_data,
    url_encode_segment,
)
from .protocol.response import Response
from .protocol.specs import PortalSpec, ScriptSpec, SortSpec
from .types import (
    FILEMAKER_API_TOKEN_EXPIRED,
    FILEMAKER_NO_RECORDS,
    DapiVersion,
    DateFormat,
    HttpClientType,
    Outcome,
    RecoveryAction,
    TokenExpired,
)

logger = logging.getLogger(__name__)

TOKEN_HEADER = "X-FM-Data-Access-Token"

Scripts = Iterable[ScriptSpec | Mapping[str, Any]] | None
Portals = Iterable[PortalSpec | Mapping[str, Any]] | None
Sort = str | Iterable[SortSpec | Mapping[str, Any]] | None

# Application error codes that find_records recovers from instead of raising.
FIND_ERROR_POLICY: Mapping[int, RecoveryAction] = MappingProxyType(
    {
        FILEMAKER_NO_RECORDS: RecoveryAction.EMPTY_RESULT,
        FILEMAKER_API_TOKEN_EXPIRED: RecoveryAction.TOKEN_EXPIRED,
    }
)


def recover_find_error(
    error: APIError,
    policy: Mapping[int, RecoveryAction] = FIND_ERROR_POLICY,
) -> list[dict[str, Any]] | TokenExpired | None:
    """
    Translate a find error through ``policy``.

    Returns:
        ``[]`` for an empty-result code, a ``TokenExpired`` signal for a
        token-expired code, or ``None`` when the error must propagate
    """
    action = policy.get(error.code) if isinstance(error.code, int) else None
    if action is RecoveryAction.EMPTY_RESULT:
        return []
    if action is RecoveryAction.TOKEN_EXPIRED:
        raw = error.response.body if error.response is not None and isinstance(error.response.body, dict) else {}
        return TokenExpired(code=error.code, message=error.message, raw=raw)
    return None


def _basic_auth(credentials: BasicCredentials) -> dict[str, str]:
    pair = f"{credentials.username}:{credentials.password}".encode()
    return {"Authorization": f"Basic {base64.b64encode(pair).decode('ascii')}"}


def _require(value: Any, name: str) -> None:
    if value is None or not str(value).strip():
        raise ValidationError(f"{name} must not be empty")


class DataAPI:
    """
    One authenticated session against a hosted database.

    The session moves from anonymous (no token) to authenticated on
    ``login``/``login_oauth`` and back on ``logout`` or when a stale token
    cannot be refreshed. It is meant to be driven by one caller at a time.

    Operations return the extracted payload (record id, records, script
    result, ...) unless ``return_raw_response`` is set, in which case the
    full ``Response`` is returned.
    """

    def __init__(
        self,
        url: str,
        database: str,
        username: str | None = None,
        password: str | None = None,
        *,
        ssl_verify: bool = True,
        force_legacy_http: bool = False,
        return_raw_response: bool = False,
        http_client: HttpClientType | str = HttpClientType.HTTPX,
        api_version: DapiVersion | str = DapiVersion.V1,
        timeout: float = 30.0,
        forget_credentials_on_logout: bool = True,
        transport: BaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize a session, logging in immediately when ``username`` is given.

        Args:
            url: Data API root, e.g. "https://fms.example.com/fmi/data"
            database: Hosted file name
            username: Account name for an immediate login
            password: Account password
            ssl_verify: Verify the server's TLS certificate
            force_legacy_http: Restrict the exchange to HTTP/1.1
            return_raw_response: Return ``Response`` objects instead of payloads
            http_client: Transport binding ("httpx" or "requests")
            api_version: URL version prefix ("v1", "v2" or "vLatest")
            timeout: Request timeout in seconds
            forget_credentials_on_logout: Drop stored credentials on ``logout()``
            transport: Pre-built transport, bypassing ``http_client``
            clock: Time source for token expiry

        Raises:
            ValueError: If ``http_client`` or ``api_version`` is unknown
            ValidationError: If ``database`` is empty
        """
        _require(database, "database")
        if not isinstance(http_client, HttpClientType):
            http_client = HttpClientType.from_string(http_client)
        if not isinstance(api_version, DapiVersion):
            api_version = DapiVersion.from_string(api_version)

        self.database = url_encode_segment(database)
        self.api_version = api_version
        self.return_raw_response = return_raw_response
        self.forget_credentials_on_logout = forget_credentials_on_logout
        self.transport = transport or create_transport(
            http_client,
            url,
            ssl_verify=ssl_verify,
            force_legacy_http=force_legacy_http,
            timeout=timeout,
        )
        self._tokens = TokenManager(reauthenticate=self._open_session, clock=clock)

        if username:
            try:
                self.login(username, password or "")
            except Exception:
                self.close()
                raise

    @classmethod
    def from_config(cls, config: ConnectionConfig, **kwargs: Any) -> "DataAPI":
        """Create a session from a ``ConnectionConfig``."""
        return cls(
            config.url,
            config.database,
            config.username,
            config.password,
            ssl_verify=config.ssl_verify,
            force_legacy_http=config.force_legacy_http,
            return_raw_response=config.return_raw_response,
            http_client=config.http_client,
            api_version=config.api_version,
            timeout=config.timeout,
            forget_credentials_on_logout=config.forget_credentials_on_logout,
            **kwargs,
        )

    def __repr__(self) -> str:
        state = "authenticated" if self.has_token else "anonymous"
        return f"DataAPI(database={self.database!r}, api_version={self.api_version.value!r}, {state})"

    # Context manager support

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        try:
            if self.has_token:
                self.logout()
        except DataAPIError as e:
            if exc_type is None:
                raise
            # keep the exception raised inside the block
            logger.warning(f"Logout after failed block did not complete: {e.message}")
        finally:
            self.close()

    def close(self) -> None:
        """Close the transport. Does not log out."""
        self.transport.close()

    # Token state

    @property
    def token(self) -> str | None:
        return self._tokens.token

    @property
    def token_issued_at(self) -> float | None:
        return self._tokens.issued_at

    @property
    def has_token(self) -> bool:
        return self._tokens.has_token

    @property
    def token_manager(self) -> TokenManager:
        return self._tokens

    def set_api_token(self, token: str, issued_at: float | None = None) -> Outcome[str]:
        """Adopt a token obtained elsewhere. It cannot be refreshed without stored credentials."""
        return self._tokens.set_token(token, issued_at)

    def is_api_token_expired(self) -> bool:
        return self._tokens.is_expired()

    def refresh_token(self) -> bool:
        """Log in again with the stored credentials."""
        return self._tokens.refresh().ok

    # Internals

    def _path(self, *segments: Any, database: bool = True) -> str:
        parts = [url_encode_segment(self.api_version.value)]
        if database:
            parts.extend(["databases", self.database])
        parts.extend(url_encode_segment(segment) for segment in segments)
        return "/" + "/".join(parts)

    def _auth_headers(self) -> dict[str, str]:
        outcome = self._tokens.auth_header()
        if not outcome.ok or outcome.value is None:
            raise AuthenticationError(f"Cannot authenticate request: {outcome.reason}")
        return outcome.value

    def _authorized_request(
        self,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        query_params: Mapping[str, Any] | None = None,
        file_upload: FileUpload | None = None,
    ) -> Response:
        headers = self._auth_headers()
        return self.transport.request(
            method,
            path,
            headers=headers,
            json_body=json_body,
            query_params=query_params,
            file_upload=file_upload,
        )

    def _result(self, response: Response, extract: Callable[[Response], Any]) -> Any:
        if self.return_raw_response:
            return response
        return extract(response)

    def _open_session(self, credentials: Credentials) -> str:
        """POST a session-open request and return the new token."""
        if isinstance(credentials, BasicCredentials):
            headers = _basic_auth(credentials)
        elif isinstance(credentials, OAuthCredentials):
            headers = {
                "X-FM-Data-Login-Type": "oauth",
                "X-FM-Data-OAuth-Request-Id": credentials.request_id,
                "X-FM-Data-OAuth-Identifier": credentials.identifier,
            }
        else:
            raise ValidationError(f"Unsupported credentials: {type(credentials).__name__}")

        response = self.transport.request(
            "POST",
            self._path("sessions"),
            headers={**headers, "Content-Type": "application/json"},
            json_body={},
        )
        token = response.payload.get("token") or response.get_header(TOKEN_HEADER)
        if not token:
            raise ProtocolError("Session-open response carried no token")
        return str(token)

    # Session

    def login(self, username: str, password: str) -> Self:
        """
        Open a session with Basic auth.

        The credentials are kept for silent re-authentication only once the
        server has accepted them.

        Raises:
            ValidationError: If ``username`` is empty
            APIError: If the server rejects the login
        """
        _require(username, "username")
        credentials = BasicCredentials(username, password)
        self._tokens.set_token(self._open_session(credentials))
        if not self._tokens.store_credentials(username, password).ok:
            logger.warning("Credentials not stored; silent refresh is unavailable for this session")
        logger.info(f"Logged in to {self.database} as {username}")
        return self

    def login_oauth(self, request_id: str, identifier: str) -> Self:
        """
        Open a session through an OAuth identity provider.

        Raises:
            ValidationError: If either value is empty
            APIError: If the server rejects the login
        """
        _require(request_id, "request_id")
        _require(identifier, "identifier")
        self._tokens.set_token(self._open_session(OAuthCredentials(request_id, identifier)))
        self._tokens.store_oauth(request_id, identifier)
        logger.info(f"Logged in to {self.database} via OAuth")
        return self

    def logout(self) -> Self:
        """
        Close the server session.

        Local token state is cleared only after the server call succeeds,
        so a failed logout can be retried.

        Raises:
            AuthenticationError: If there is no token to log out
        """
        token = self._tokens.token
        if token is None:
            raise AuthenticationError("Not logged in")

        self.transport.request("DELETE", self._path("sessions", token))
        self._tokens.clear(forget_credentials=self.forget_credentials_on_logout)
        logger.info(f"Logged out of {self.database}")
        return self

    def validate_token_with_server(self) -> bool:
        """Ask the server whether the current token is still valid. Never refreshes."""
        token = self._tokens.token
        if token is None:
            return False
        try:
            response = self.transport.request(
                "GET",
                self._path("validateSession", database=False),
                headers={"Authorization": f"Bearer {token}"},
            )
        except APIError:
            return False

        messages = response.messages
        valid = bool(messages) and str(messages[0].get("code")) == "0"
        if valid:
            self._tokens.set_token(token)
        return valid

    # Records

    def create_record(
        self,
        layout: str,
        data: Mapping[str, Any],
        scripts: Scripts = None,
        portal_data: Mapping[str, Any] | None = None,
    ) -> Any:
        """
        Create a record.

        Returns:
            The new record id
        """
        _require(layout, "layout")
        body: dict[str, Any] = {"fieldData": stringify_field_data(data)}
        if portal_data:
            body["portalData"] = dict(portal_data)
        body.update(compile_scripts(scripts))

        response = self._authorized_request("POST", self._path("layouts", layout, "records"), json_body=body)
        return self._result(response, lambda r: r.payload.get("recordId"))

    def edit_record(
        self,
        layout: str,
        record_id: str | int,
        data: Mapping[str, Any],
        last_modification_id: str | int | None = None,
        portal_data: Mapping[str, Any] | None = None,
        scripts: Scripts = None,
    ) -> Any:
        """
        Edit a record.

        Args:
            last_modification_id: When given, the edit fails unless the
                record's current ``modId`` matches

        Returns:
            The record's new ``modId``
        """
        _require(layout, "layout")
        _require(record_id, "record_id")
        body: dict[str, Any] = {"fieldData": stringify_field_data(data)}
        if last_modification_id is not None:
            body["modId"] = str(last_modification_id)
        if portal_data:
            body["portalData"] = dict(portal_data)
        body.update(compile_scripts(scripts))

        response = self._authorized_request(
            "PATCH", self._path("layouts", layout, "records", record_id), json_body=body
        )
        return self._result(response, lambda r: r.payload.get("modId"))

    def duplicate_record(self, layout: str, record_id: str | int, scripts: Scripts = None) -> Any:
        """Duplicate a record. Returns the copy's record id."""
        _require(layout, "layout")
        _require(record_id, "record_id")
        response = self._authorized_request(
            "POST",
            self._path("layouts", layout, "records", record_id),
            json_body=compile_scripts(scripts),
        )
        return self._result(response, lambda r: r.payload.get("recordId"))

    def delete_record(self, layout: str, record_id: str | int, scripts: Scripts = None) -> Any:
        """Delete a record. Returns ``None`` unless raw responses are requested."""
        _require(layout, "layout")
        _require(record_id, "record_id")
        response = self._authorized_request(
            "DELETE",
            self._path("layouts", layout, "records", record_id),
            query_params=compile_scripts(scripts),
        )
        return self._result(response, lambda r: None)

    def get_record(
        self,
        layout: str,
        record_id: str | int,
        portals: Portals = None,
        scripts: Scripts = None,
        response_layout: str | None = None,
        date_format: DateFormat | int | None = None,
    ) -> Any:
        """
        Fetch one record by id.

        Returns:
            The record (``fieldData``, ``portalData``, ``recordId``, ``modId``) or ``None``
        """
        _require(layout, "layout")
        _require(record_id, "record_id")
        params: dict[str, Any] = {}
        params.update(compile_portals(portals, query_string=True))
        params.update(compile_scripts(scripts))
        params.update(compile_response_layout(response_layout))
        if date_format is not None:
            params.update(compile_date_format(date_format))

        response = self._authorized_request(
            "GET", self._path("layouts", layout, "records", record_id), query_params=params
        )
        return self._result(response, lambda r: r.records[0] if r.records else None)

    def get_records(
        self,
        layout: str,
        sort: Sort = None,
        offset: int | None = None,
        limit: int | None = None,
        portals: Portals = None,
        scripts: Scripts = None,
        response_layout: str | None = None,
        date_format: DateFormat | int | None = None,
    ) -> Any:
        """
        Fetch a range of records.

        Args:
            sort: Sort specs, or an already JSON-encoded sort string
            offset: First record to return (1-based on the server)
            limit: Maximum number of records
        """
        _require(layout, "layout")
        params: dict[str, Any] = {}
        params.update(compile_paging(offset, limit, query_string=True))
        params.update(compile_sort(sort, query_string=True))
        params.update(compile_scripts(scripts))
        params.update(compile_portals(portals, query_string=True))
        params.update(compile_response_layout(response_layout))
        if date_format is not None:
            params.update(compile_date_format(date_format))

        response = self._authorized_request("GET", self._path("layouts", layout, "records"), query_params=params)
        return self._result(response, lambda r: r.records)

    def find_records(
        self,
        layout: str,
        query: Any,
        sort: Sort = None,
        offset: int | None = None,
        limit: int | None = None,
        portals: Portals = None,
        scripts: Scripts = None,
        response_layout: str | None = None,
        date_format: DateFormat | int | None = None,
    ) -> Any:
        """
        Run a find request.

        ``query`` is a list of ``{"fields": [...], "options": {"omit": ...}}``
        groups, or any other value sent verbatim as a single query object.
        See ``compile_find_query`` for the truncation rule on malformed lists.

        Returns:
            The matching records. No match (code 401) yields ``[]`` rather
            than an error. A token that expired in flight (code 952) yields
            a ``TokenExpired`` signal; the find is not retried.
        """
        _require(layout, "layout")
        body: dict[str, Any] = {"query": compile_find_query(query)}
        body.update(compile_paging(offset, limit))
        body.update(compile_sort(sort))
        body.update(compile_scripts(scripts))
        body.update(compile_portals(portals))
        body.update(compile_response_layout(response_layout))
        if date_format is not None:
            body.update(compile_date_format(date_format))

        try:
            response = self._authorized_request("POST", self._path("layouts", layout, "_find"), json_body=body)
        except APIError as e:
            recovered = recover_find_error(e)
            if recovered is None:
                raise
            logger.debug(f"Find on {layout} recovered from code {e.code}")
            return recovered

        return self._result(response, lambda r: r.records)

    def upload_to_container(
        self,
        layout: str,
        record_id: str | int,
        field_name: str,
        field_repetition: int,
        filepath: str | os.PathLike[str],
        filename: str | None = None,
    ) -> Any:
        """
        Upload a file into a container field.

        Args:
            filename: Name stored on the server; defaults to the local file's name

        Returns:
            ``True`` unless raw responses are requested
        """
        _require(layout, "layout")
        _require(record_id, "record_id")
        _require(field_name, "field_name")
        path = os.fspath(filepath)
        if not os.path.isfile(path):
            raise ValidationError(f"No such file: {path}")
        if not filename:
            filename = os.path.basename(path)

        response = self._authorized_request(
            "POST",
            self._path("layouts", layout, "records", record_id, "containers", field_name, field_repetition),
            file_upload=FileUpload(path=path, filename=filename),
        )
        return self._result(response, lambda r: True)

    # Scripts and globals

    def execute_script(self, layout: str, script_name: str, script_param: Any = None) -> Any:
        """
        Run a script on its own.

        Returns:
            The script result (``None`` when the script returned nothing)
        """
        _require(layout, "layout")
        _require(script_name, "script_name")
        params = {} if script_param is None else {"script.param": str(script_param)}
        response = self._authorized_request(
            "GET", self._path("layouts", layout, "script", script_name), query_params=params
        )
        return self._result(response, lambda r: r.script_result)

    def set_global_fields(self, global_fields: Mapping[str, Any]) -> Any:
        """Set global field values for the session. Names must be fully qualified (``Table::Field``)."""
        if not global_fields:
            raise ValidationError("global_fields must not be empty")
        response = self._authorized_request(
            "PATCH", self._path("globals"), json_body={"globalFields": stringify_field_data(global_fields)}
        )
        return self._result(response, lambda r: r.body)

    # Metadata

    def get_product_info(self) -> Any:
        """Server product name, version and date/time formats. No login needed."""
        response = self.transport.request("GET", self._path("productInfo", database=False))
        return self._result(response, lambda r: r.payload.get("productInfo", {}))

    def get_database_names(self) -> Any:
        """
        List hosted databases visible to the stored account.

        The server authorizes this listing with Basic auth, so stored Basic
        credentials are sent when available.
        """
        credentials = self._tokens.credentials
        headers = _basic_auth(credentials) if isinstance(credentials, BasicCredentials) else {}
        response = self.transport.request("GET", self._path("databases", database=False), headers=headers)
        return self._result(response, lambda r: r.payload.get("databases", []))

    def get_layout_names(self) -> Any:
        """List layouts (folders carry ``folderLayoutNames``)."""
        response = self._authorized_request("GET", self._path("layouts"))
        return self._result(response, lambda r: r.payload.get("layouts", []))

    def get_script_names(self) -> Any:
        response = self._authorized_request("GET", self._path("scripts"))
        return self._result(response, lambda r: r.payload.get("scripts", []))

    def get_layout_metadata(self, layout: str, record_id: str | int | None = None) -> Any:
        """Field, portal and value list metadata for a layout."""
        _require(layout, "layout")
        params = {} if record_id is None else {"recordId": str(record_id)}
        response = self._authorized_request("GET", self._path("layouts", layout), query_params=params)
        return self._result(response, lambda r: r.payload)


__all__ = [
    "DataAPI",
    "FIND_ERROR_POLICY",
    "recover_find_error",
]
