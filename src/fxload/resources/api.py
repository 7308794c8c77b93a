"""HTTP API resources."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from fxload.resources.base import Resource, ResourceHost
from fxload.types import ResourceConfig

logger = structlog.get_logger(__name__)

DEFAULT_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")


class APIResource(Resource):
    """Exposes one coroutine per HTTP verb, bound to ``base_url``.

    ``resource.get("/users/1", params=...)`` sends the request through the
    shared httpx client and returns the decoded JSON body.
    """

    required = ("base_url",)

    def __init__(self, config: ResourceConfig, host: ResourceHost, path: str = "") -> None:
        super().__init__(config, host, path)
        self.base_url = (config.base_url or "").rstrip("/")
        self.methods = tuple(m.upper() for m in (config.methods or DEFAULT_METHODS))
        self.verbs: dict[str, Callable[..., Awaitable[Any]]] = {}
        for method in self.methods:
            verb = self._make_verb(method)
            self.verbs[method.lower()] = verb
            setattr(self, method.lower(), verb)

    def _make_verb(self, method: str) -> Callable[..., Awaitable[Any]]:
        async def call(endpoint: str = "", **options: Any) -> Any:
            url = f"{self.base_url}{endpoint}"
            headers = {**self.config.headers, **(options.pop("headers", None) or {})}
            logger.debug("api.request", method=method, url=url)
            response = await self.loader.client.request(
                method, url, headers=headers, **options
            )
            response.raise_for_status()
            if not response.content:
                return None
            return response.json()

        call.__name__ = method.lower()
        call.__qualname__ = f"{type(self).__name__}.{method.lower()}"
        return call

    async def _do_load(self) -> dict[str, Callable[..., Awaitable[Any]]]:
        return dict(self.verbs)
