"""Reads resource sources from URLs or the local filesystem."""

from __future__ import annotations

import asyncio
import mimetypes
from dataclasses import dataclass
from pathlib import Path

import httpx
import structlog

logger = structlog.get_logger(__name__)

_EXTRA_TYPES = {
    ".yml": "application/x-yaml",
    ".yaml": "application/x-yaml",
    ".json": "application/json",
    ".xml": "application/xml",
    ".md": "text/markdown",
}


def guess_content_type(path: str | Path) -> str | None:
    """Content type from a file extension."""
    suffix = Path(path).suffix.lower()
    if suffix in _EXTRA_TYPES:
        return _EXTRA_TYPES[suffix]
    content_type, _ = mimetypes.guess_type(str(path))
    return content_type


def is_url(path: str) -> bool:
    return path.startswith(("http://", "https://"))


@dataclass(frozen=True, slots=True)
class Payload:
    """Raw bytes of a source plus what is known about their type."""

    content: bytes
    content_type: str | None
    source: str
    encoding: str = "utf-8"

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding)


class SourceLoader:
    """Fetches ``http(s)://`` sources with httpx and reads everything else from disk."""

    def __init__(
        self,
        *,
        base_dir: str | Path = ".",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_dir = Path(base_dir)
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def client(self) -> httpx.AsyncClient:
        """Shared HTTP client, created on first use."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    def local_path(self, path: str | Path) -> Path:
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self._base_dir / candidate

    async def read(self, path: str) -> Payload:
        """Read ``path`` and return its payload."""
        if is_url(path):
            response = await self.client.get(path)
            response.raise_for_status()
            content_type = response.headers.get("content-type")
            logger.debug("loader.fetched", url=path, status=response.status_code)
            return Payload(
                content=response.content,
                content_type=content_type,
                source=path,
                encoding=response.encoding or "utf-8",
            )

        file_path = self.local_path(path)
        content = await asyncio.to_thread(file_path.read_bytes)
        logger.debug("loader.read_file", path=str(file_path), size=len(content))
        return Payload(
            content=content,
            content_type=guess_content_type(file_path),
            source=str(file_path),
        )

    async def read_text(self, path: str) -> str:
        return (await self.read(path)).text

    async def aclose(self) -> None:
        """Close the HTTP client if this loader created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
