"""
HTTPX Transport Implementation for the FileMaker Data API SDK.

Default binding, built on a synchronous ``httpx.Client``.
"""

import mimetypes
from collections.abc import Mapping
from typing import Any, Self

import httpx

from ..exceptions import ConnectionError
from .base import BaseTransport, FileUpload, TransportResponse


class HTTPXTransport(BaseTransport):
    """
    httpx-based transport.

    Negotiates HTTP/2 when the server offers it unless ``force_legacy_http``
    is set. Redirects are followed.
    """

    def __init__(
        self,
        base_url: str,
        ssl_verify: bool = True,
        force_legacy_http: bool = False,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        """
        Initialize the httpx transport.

        Args:
            base_url: Data API root, e.g. "https://fms.example.com/fmi/data"
            ssl_verify: Verify the server's TLS certificate
            force_legacy_http: Restrict the exchange to HTTP/1.1
            timeout: Request timeout in seconds
            client: Pre-built client to use instead of creating one
        """
        super().__init__(base_url, ssl_verify, force_legacy_http, timeout)
        self._client = client

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def connect(self) -> Self:
        """Create the httpx client. Returns self for fluent API."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                verify=self.ssl_verify,
                timeout=self.timeout,
                follow_redirects=True,
                http2=not self.force_legacy_http,
            )
        return self

    def close(self) -> None:
        """Close the httpx client."""
        if self._client:
            self._client.close()
            self._client = None

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
        if self._client is None:
            self.connect()
        assert self._client is not None

        request_headers = dict(headers or {})
        kwargs: dict[str, Any] = {}
        if query_params:
            kwargs["params"] = dict(query_params)

        try:
            if file_upload is not None and method == "POST":
                # httpx writes the multipart boundary itself
                request_headers.pop("Content-Type", None)
                mime_type = mimetypes.guess_type(file_upload.path)[0] or "application/octet-stream"
                with open(file_upload.path, "rb") as fh:
                    response = self._client.request(
                        method,
                        path,
                        headers=request_headers,
                        files={"upload": (file_upload.filename, fh, mime_type)},
                        **kwargs,
                    )
            else:
                if json_body is not None and method != "GET":
                    kwargs["json"] = json_body
                response = self._client.request(method, path, headers=request_headers, **kwargs)
        except httpx.RequestError as e:
            raise ConnectionError(f"Request failed: {e}") from e
        except OSError as e:
            raise ConnectionError(f"Cannot read upload file {file_upload.path if file_upload else ''}: {e}") from e

        return TransportResponse(
            status_code=response.status_code,
            headers=response.headers.multi_items(),
            body=response.content,
            http_version=response.http_version,
            reason=response.reason_phrase,
        )
