"""Request/response values exchanged with host-side serving handles."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Request:
    """An incoming HTTP request as seen by route and file-serving handles."""

    method: str = "GET"
    path: str = "/"
    params: dict[str, str] = field(default_factory=dict)
    query: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None


@dataclass
class Response:
    """A mutable response; ``finished`` stops further middleware."""

    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | str = b""
    finished: bool = False

    def send(
        self,
        body: bytes | str,
        *,
        status: int | None = None,
        content_type: str | None = None,
    ) -> Response:
        if status is not None:
            self.status = status
        if content_type is not None:
            self.headers["Content-Type"] = content_type
        self.body = body
        self.finished = True
        return self

    @classmethod
    def text(cls, body: str, status: int = 200) -> Response:
        return cls().send(body, status=status, content_type="text/plain")
