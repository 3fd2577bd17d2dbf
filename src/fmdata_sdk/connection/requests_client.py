"""
Requests Transport Implementation for the FileMaker Data API SDK.

Alternative binding on a ``requests.Session``, for deployments that already
standardize on requests (proxies, custom adapters, CA bundles).
"""

import mimetypes
from collections.abc import Mapping
from typing import Any

import requests

from ..exceptions import ConnectionError
from .base import BaseTransport, FileUpload, TransportResponse

_HTTP_VERSIONS = {10: "HTTP/1.0", 11: "HTTP/1.1", 20: "HTTP/2"}


class RequestsTransport(BaseTransport):
    """
    requests-based transport.

    requests only speaks HTTP/1.1, so ``force_legacy_http`` has nothing to
    switch off here.
    """

    def __init__(
        self,
        base_url: str,
        ssl_verify: bool = True,
        force_legacy_http: bool = False,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        super().__init__(base_url, ssl_verify, force_legacy_http, timeout)
        self._session = session

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.verify = self.ssl_verify
        return self._session

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

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
        url = f"{self.base_url}{path}"
        request_headers = dict(headers or {})
        kwargs: dict[str, Any] = {"timeout": self.timeout, "allow_redirects": True}
        if query_params:
            kwargs["params"] = dict(query_params)

        try:
            if file_upload is not None and method == "POST":
                request_headers.pop("Content-Type", None)
                mime_type = mimetypes.guess_type(file_upload.path)[0] or "application/octet-stream"
                with open(file_upload.path, "rb") as fh:
                    response = self.session.request(
                        method,
                        url,
                        headers=request_headers,
                        files={"upload": (file_upload.filename, fh, mime_type)},
                        **kwargs,
                    )
            else:
                if json_body is not None and method != "GET":
                    kwargs["json"] = json_body
                response = self.session.request(method, url, headers=request_headers, **kwargs)
        except requests.RequestException as e:
            raise ConnectionError(f"Request failed: {e}") from e
        except OSError as e:
            raise ConnectionError(f"Cannot read upload file {file_upload.path if file_upload else ''}: {e}") from e

        raw_version = getattr(response.raw, "version", 11)
        return TransportResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.content,
            http_version=_HTTP_VERSIONS.get(raw_version, "HTTP/1.1"),
            reason=response.reason or "",
        )
