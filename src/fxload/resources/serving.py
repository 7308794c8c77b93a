"""Host-side serving handles: static files, markdown, images, streams and routes."""

from __future__ import annotations

import asyncio
import importlib
import json
from collections.abc import AsyncIterator, Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import markdown
import structlog

from fxload.errors import InvalidManifestEntry
from fxload.http import Request, Response
from fxload.loader import guess_content_type
from fxload.resources.base import Resource
from fxload.retry import invoke
from fxload.types import ResourceConfig

logger = structlog.get_logger(__name__)


def _read_inside(root: Path, relative: str) -> bytes:
    """Read ``relative`` under ``root``; paths escaping ``root`` count as missing."""
    base = root.resolve()
    target = (base / relative).resolve()
    if not target.is_relative_to(base):
        raise FileNotFoundError(relative)
    return target.read_bytes()


async def _serve_file(read: Callable[[], bytes], name: str, content_type: str | None, missing: str) -> Response:
    try:
        data = await asyncio.to_thread(read)
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
        return Response.text(missing, status=404)
    except OSError as e:
        logger.error("serve.read_failed", file=name, error=str(e))
        return Response.text("Internal server error", status=500)
    return Response().send(data, content_type=content_type or "application/octet-stream")


class FileHandle:
    """Serves files from a directory, ``request.params["filename"]`` selects one."""

    def __init__(self, root: Path) -> None:
        self.root = root

    async def serve(self, request: Request) -> Response:
        filename = request.params.get("filename", "")
        return await _serve_file(
            lambda: _read_inside(self.root, filename),
            filename,
            guess_content_type(filename),
            "File not found",
        )


class MarkdownHandle:
    """Renders ``<dir>/<page>.md`` to HTML, ``request.params["page"]`` selects the page."""

    def __init__(self, root: Path) -> None:
        self.root = root

    async def serve(self, request: Request) -> Response:
        page = request.params.get("page", "index")
        response = await _serve_file(
            lambda: _read_inside(self.root, f"{page}.md"),
            page,
            "text/html",
            "Markdown file not found",
        )
        if response.status == 200:
            source = response.body.decode("utf-8") if isinstance(response.body, bytes) else response.body
            response.body = markdown.markdown(source)
        return response


class ImageHandle:
    def __init__(self, file: Path) -> None:
        self.file = file

    async def serve(self, request: Request) -> Response:
        return await _serve_file(
            self.file.read_bytes,
            str(self.file),
            guess_content_type(self.file),
            "Image not found",
        )


class StreamHandle:
    """Server-sent events emitting the current time every ``interval`` seconds."""

    headers = {
        "Content-Type": "text/event-stream",
        "Cache-Control": "no-cache",
        "Connection": "keep-alive",
    }

    def __init__(self, interval: float) -> None:
        self.interval = interval

    async def stream(self, request: Request | None = None, limit: int | None = None) -> AsyncIterator[str]:
        sent = 0
        while limit is None or sent < limit:
            if sent:
                await asyncio.sleep(self.interval)
            payload = {"time": datetime.now(timezone.utc).isoformat()}
            yield f"data: {json.dumps(payload)}\n\n"
            sent += 1


class StaticResource(Resource):
    required = ("dir",)

    async def _do_load(self) -> FileHandle:
        return FileHandle(self.loader.local_path(self.config.dir or ""))


class MarkdownResource(Resource):
    required = ("dir",)

    async def _do_load(self) -> MarkdownHandle:
        return MarkdownHandle(self.loader.local_path(self.config.dir or ""))


class ImageResource(Resource):
    required = (("file", "path"),)

    async def _do_load(self) -> ImageHandle:
        return ImageHandle(self.loader.local_path(self.config.file or self.config.path or ""))


class StreamResource(Resource):
    async def _do_load(self) -> StreamHandle:
        interval = self.config.options.get("interval_ms", self.host.settings.stream_interval_ms)
        return StreamHandle(interval / 1000)


def _import_attribute(package: str, reference: str) -> Any:
    module_name, _, attribute = reference.rpartition(".")
    if not module_name:
        raise InvalidManifestEntry(reference, "handler must look like 'module.function'")
    module = importlib.import_module(f"{package}.{module_name}" if package else module_name)
    return getattr(module, attribute)


def _respond_with(response: Response, value: Any) -> None:
    if isinstance(value, Response):
        response.status = value.status
        response.headers.update(value.headers)
        response.send(value.body)
    elif callable(value):
        _respond_with(response, value())
    elif isinstance(value, (bytes, str)):
        response.send(value, content_type=response.headers.get("Content-Type", "text/plain"))
    else:
        response.send(json.dumps(value, default=str), content_type="application/json")


class RouteHandle:
    """Dispatches a request through middleware to the route's handler."""

    def __init__(
        self,
        handler: Callable[..., Any],
        methods: tuple[str, ...],
        middleware: list[Callable[..., Any]],
    ) -> None:
        self.handler = handler
        self.methods = methods
        self.middleware = middleware

    async def handle(self, request: Request, response: Response | None = None) -> Response:
        response = response if response is not None else Response()
        if self.methods and request.method.upper() not in self.methods:
            return response.send("Method Not Allowed", status=405, content_type="text/plain")

        for middleware in self.middleware:
            await invoke(lambda: middleware(request, response))
            if response.finished:
                return response

        await invoke(lambda: self.handler(request, response))
        return response


class RouteResource(Resource):
    """A route table entry: ``handler`` is ``"module.function"`` or a resource config."""

    required = ("handler",)

    async def _do_load(self) -> RouteHandle:
        settings = self.host.settings
        handler = self.config.handler
        if isinstance(handler, str):
            target = _import_attribute(settings.handlers_package, handler)
        else:
            target = await self._nested_handler(handler)

        middleware = [
            _import_attribute(settings.middleware_package, f"{name}.middleware")
            for name in self.config.middleware
        ]
        methods = tuple(m.upper() for m in (self.config.methods or ()))
        return RouteHandle(target, methods, middleware)

    async def _nested_handler(self, raw: Any) -> Callable[[Request, Response], Any]:
        registry = self.host.registry
        if registry is None:
            raise InvalidManifestEntry(self.path, "nested handlers need a registry")
        resource = registry.create(
            ResourceConfig.from_mapping(raw, f"{self.path}.handler"),
            f"{self.path}.handler",
        )

        async def serve(request: Request, response: Response) -> None:
            value = await resource.load()
            if hasattr(value, "serve"):
                value = await value.serve(request)
            elif hasattr(value, "handle"):
                value = await value.handle(request, response)
                if value is response:
                    return
            _respond_with(response, value)

        return serve
