"""In-memory transport and reply builders shared by the unit tests."""

import json
from collections import deque
from collections.abc import Mapping
from typing import Any

from fmdata_sdk.connection.base import BaseTransport, FileUpload, TransportResponse

BASE_URL = "https://fms.test/fmi/data"


def ok_body(response: dict[str, Any] | None = None) -> dict[str, Any]:
    """A successful Data API body."""
    return {"response": response or {}, "messages": [{"code": "0", "message": "OK"}]}


def error_body(code: int | str, message: str | list[str]) -> dict[str, Any]:
    """A Data API error body."""
    return {"response": {}, "messages": [{"code": code, "message": message}]}


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTransport(BaseTransport):
    """Replays queued replies and records every ``send`` call."""

    def __init__(self) -> None:
        super().__init__(BASE_URL)
        self.replies: deque[TransportResponse | Exception] = deque()
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def queue(
        self,
        body: Any = None,
        status: int = 200,
        headers: Mapping[str, str] | None = None,
        reason: str = "",
    ) -> "FakeTransport":
        text = body if isinstance(body, str) else json.dumps(body if body is not None else ok_body())
        self.replies.append(
            TransportResponse(
                status_code=status,
                headers=headers if headers is not None else {"Content-Type": "application/json"},
                body=text,
                reason=reason,
            )
        )
        return self

    def queue_login(self, token: str = "token-1") -> "FakeTransport":
        return self.queue(ok_body({"token": token}))

    def fail_with(self, error: Exception) -> "FakeTransport":
        self.replies.append(error)
        return self

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
        self.calls.append(
            {
                "method": method,
                "path": path,
                "headers": dict(headers or {}),
                "json_body": json_body,
                "file_upload": file_upload,
                "query_params": dict(query_params) if query_params is not None else None,
            }
        )
        if not self.replies:
            raise AssertionError(f"Unexpected request: {method} {path}")
        reply = self.replies.popleft()
        if isinstance(reply, Exception):
            raise reply
        return reply

    def close(self) -> None:
        self.closed = True

    @property
    def last_call(self) -> dict[str, Any]:
        return self.calls[-1]
