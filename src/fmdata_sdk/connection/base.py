"""
Base Transport Interface for the FileMaker Data API SDK.

Defines the abstract ``send`` contract every HTTP binding implements, and the
shared ``request`` step that normalizes and validates what ``send`` returns.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Self

from ..protocol.response import Response, validate_response

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileUpload:
    """A local file sent as the single multipart field ``upload``."""

    path: str
    filename: str


@dataclass(frozen=True)
class TransportResponse:
    """
    What a binding hands back for one exchange, before normalization.

    Attributes:
        status_code: HTTP status
        headers: Header pairs as received (duplicates allowed)
        body: Raw body text or bytes
        http_version: Protocol tag for the rebuilt status line
        reason: Reason phrase for the rebuilt status line
    """

    status_code: int
    headers: Mapping[str, str] | Iterable[tuple[str, str]] = field(default_factory=dict)
    body: str | bytes = ""
    http_version: str = "HTTP/1.1"
    reason: str = ""

    def header_block(self) -> str:
        """Render a status line followed by ``Name: Value`` lines."""
        pairs = self.headers.items() if isinstance(self.headers, Mapping) else self.headers
        status_line = f"{self.http_version} {self.status_code} {self.reason}".rstrip()
        lines = [status_line]
        lines.extend(f"{name}: {value}" for name, value in pairs)
        return "\n".join(lines) + "\n"


class BaseTransport(ABC):
    """
    Abstract base class for Data API transports.

    All bindings (httpx, requests) must inherit from this class and implement
    ``send``; the session only ever calls ``request``.
    """

    def __init__(
        self,
        base_url: str,
        ssl_verify: bool = True,
        force_legacy_http: bool = False,
        timeout: float = 30.0,
    ):
        """
        Initialize transport parameters.

        Args:
            base_url: Data API root, e.g. "https://fms.example.com/fmi/data"
            ssl_verify: Verify the server's TLS certificate
            force_legacy_http: Restrict the exchange to HTTP/1.1
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.ssl_verify = ssl_verify
        self.force_legacy_http = force_legacy_http
        self.timeout = timeout

    # Abstract methods that must be implemented

    @abstractmethod
    def send(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        json_body: Any = None,
        file_upload: FileUpload | None = None,
        query_params: Mapping[str, Any] | None = None,
    ) -> TransportResponse:
        """
        Perform one HTTP exchange.

        Args:
            method: HTTP method
            path: Path relative to ``base_url``, already percent-encoded
            headers: Request headers
            json_body: Body to JSON-encode; ignored for GET
            file_upload: File to send as multipart field ``upload``; POST only
            query_params: Query string parameters

        Raises:
            ConnectionError: On network, TLS or encoding failure
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the underlying client."""
        ...

    # Context manager support

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    # High-level API

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        json_body: Any = None,
        file_upload: FileUpload | None = None,
        query_params: Mapping[str, Any] | None = None,
    ) -> Response:
        """
        Send a request and return the validated ``Response``.

        Raises:
            ConnectionError: If the transport fails
            ProtocolError: If the reply has no usable status line or its body is not JSON
            APIError: If the reply is classified as an application error
        """
        logger.debug(f"{method} {path}")
        raw = self.send(
            method,
            path,
            headers=headers,
            json_body=json_body,
            file_upload=file_upload,
            query_params=query_params,
        )
        response = Response.parse(raw.header_block(), raw.body)
        logger.debug(f"{method} {path} -> {response.status_code}")
        return validate_response(response)
