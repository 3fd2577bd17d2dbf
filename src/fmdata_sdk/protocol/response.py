"""
Data API Response Normalizer.

Turns the raw header block and body text of one server reply into an
immutable ``Response`` value, and classifies replies that must be surfaced
as application errors.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ..exceptions import APIError, ProtocolError

STATUS_HEADER = "Status"


def parse_headers(text: str) -> dict[str, str]:
    """
    Parse a raw header block into an ordered mapping.

    The first line without a colon is kept under the synthetic ``Status``
    key. ``Name: Value`` lines keep the name's case as received, and a later
    duplicate overwrites an earlier one. Blank lines are dropped.

    Example:
        parse_headers("HTTP/1.1 200 OK\\nContent-Type: application/json\\n")
        # {"Status": "HTTP/1.1 200 OK", "Content-Type": "application/json"}
    """
    headers: dict[str, str] = {}
    status: str | None = None

    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        if ":" not in line:
            if status is None:
                status = line
            continue
        name, value = line.split(":", 1)
        headers[name.strip()] = value.strip()

    if status is None:
        return headers
    return {STATUS_HEADER: status, **{k: v for k, v in headers.items() if k != STATUS_HEADER}}


def parse_body(text: str | bytes) -> Any:
    """
    Strictly parse a JSON body.

    An empty body means "no content" and yields ``{}``. Anything else that
    is not valid JSON raises ``ProtocolError``.
    """
    if isinstance(text, bytes):
        text = text.decode("utf-8")
    if not text.strip():
        return {}
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ProtocolError(f"Response body is not valid JSON: {e}") from e


def extract_http_code(status_header: str | None) -> int:
    """
    Take the status code from a status line such as ``HTTP/1.1 200 OK``.

    Raises:
        ProtocolError: If the line is absent or has no integer second token
    """
    if not status_header:
        raise ProtocolError("Response has no status line")
    parts = status_header.split()
    if len(parts) < 2:
        raise ProtocolError(f"Malformed status line: {status_header!r}")
    try:
        return int(parts[1])
    except ValueError:
        raise ProtocolError(f"Malformed status line: {status_header!r}") from None


@dataclass(frozen=True)
class Response:
    """
    Frozen snapshot of one Data API reply. Headers are read-only; the parsed
    body is shared as decoded.

    Attributes:
        status_code: HTTP status parsed from the status line
        headers: Read-only header name to value, case as received
        body: Parsed JSON body
    """

    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.headers, MappingProxyType):
            object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @classmethod
    def parse(cls, headers: str, body: str | bytes) -> "Response":
        """Build a response from a raw header block and body text."""
        parsed_headers = parse_headers(headers)
        status_code = extract_http_code(parsed_headers.get(STATUS_HEADER))
        return cls(status_code=status_code, headers=parsed_headers, body=parse_body(body))

    def get_header(self, name: str, default: str | None = None) -> str | None:
        """Get a header by exact name, falling back to a case-insensitive match."""
        if name in self.headers:
            return self.headers[name]
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    @property
    def payload(self) -> dict[str, Any]:
        """The ``response`` member of the body, or an empty dict."""
        if isinstance(self.body, dict):
            payload = self.body.get("response")
            if isinstance(payload, dict):
                return payload
        return {}

    @property
    def records(self) -> list[dict[str, Any]]:
        """Records under ``response.data``. Absent and null both give ``[]``."""
        data = self.payload.get("data")
        if isinstance(data, list):
            return data
        return []

    @property
    def messages(self) -> list[dict[str, Any]]:
        if isinstance(self.body, dict) and isinstance(self.body.get("messages"), list):
            return self.body["messages"]
        return []

    @property
    def data_info(self) -> dict[str, Any]:
        """Found/returned counts reported alongside record data."""
        info = self.payload.get("dataInfo")
        return info if isinstance(info, dict) else {}

    @property
    def script_result(self) -> str | None:
        return self.payload.get("scriptResult")

    @property
    def script_error(self) -> str | None:
        return self.payload.get("scriptError")

    @property
    def prerequest_script_result(self) -> str | None:
        return self.payload.get("scriptResult.prerequest")

    @property
    def prerequest_script_error(self) -> str | None:
        return self.payload.get("scriptError.prerequest")

    @property
    def presort_script_result(self) -> str | None:
        return self.payload.get("scriptResult.presort")

    @property
    def presort_script_error(self) -> str | None:
        return self.payload.get("scriptError.presort")

    @property
    def is_error_status(self) -> bool:
        """Whether the status code is one the error policy inspects."""
        return self.status_code == 100 or 400 <= self.status_code < 600


def validate_response(response: Response) -> Response:
    """
    Apply the error classification policy to a reply.

    A reply is inspected when its status is 100 or in ``[400, 600)``. If the
    body carries ``messages[0].message`` an ``APIError`` is raised with that
    message and ``messages[0].code`` (HTTP status when the code is absent).
    Without a message, status 100 passes as success while any other status
    raises with the serialized body, or the status line when the body is empty.

    Returns:
        The response unchanged when it is not an error

    Raises:
        APIError: If the reply is classified as an error
    """
    if not response.is_error_status:
        return response

    messages = response.messages
    first = messages[0] if messages and isinstance(messages[0], dict) else {}
    if first.get("message") is not None:
        message = first["message"]
        if isinstance(message, list):
            message = " - ".join(str(part) for part in message)
        code = first.get("code")
        if code is None:
            code = response.status_code
        raise APIError(str(message), code=code, response=response)

    # A status code 100 with no message is OK
    if response.status_code == 100:
        return response

    text = json.dumps(response.body) if response.body not in (None, {}, [], "") else ""
    if not text:
        text = response.get_header(STATUS_HEADER) or ""
    raise APIError(text, code=response.status_code, response=response)


__all__ = [
    "STATUS_HEADER",
    "Response",
    "extract_http_code",
    "parse_body",
    "parse_headers",
    "validate_response",
]
