"""
FileMaker Data API SDK Connection Module.

Provides the transport interface and its httpx and requests bindings.
"""

from ..types import HttpClientType
from .base import BaseTransport, FileUpload, TransportResponse
from .http import HTTPXTransport
from .requests_client import RequestsTransport

_TRANSPORTS: dict[HttpClientType, type[BaseTransport]] = {
    HttpClientType.HTTPX: HTTPXTransport,
    HttpClientType.REQUESTS: RequestsTransport,
}


def create_transport(
    client_type: HttpClientType,
    base_url: str,
    ssl_verify: bool = True,
    force_legacy_http: bool = False,
    timeout: float = 30.0,
) -> BaseTransport:
    """
    Build the transport registered for ``client_type``.

    Raises:
        ValueError: If ``client_type`` is not an ``HttpClientType``
    """
    if not isinstance(client_type, HttpClientType):
        raise ValueError(f"client_type must be an HttpClientType, got {client_type!r}")
    transport_cls = _TRANSPORTS[client_type]
    return transport_cls(base_url, ssl_verify=ssl_verify, force_legacy_http=force_legacy_http, timeout=timeout)


__all__ = [
    "BaseTransport",
    "FileUpload",
    "HTTPXTransport",
    "RequestsTransport",
    "TransportResponse",
    "create_transport",
]
