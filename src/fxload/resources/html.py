"""HTML document resources."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from bs4 import BeautifulSoup

from fxload.resources.base import Resource


class HTMLResource(Resource):
    """Loads an HTML document and returns a query function over it.

    ``query("")`` (or no selector) returns the raw document text, a selector
    with one match returns that element and several matches return a list.
    """

    required = (("path", "file"),)

    async def _do_load(self) -> Callable[..., Any]:
        html = await self.loader.read_text(self.config.source or "")
        soup = BeautifulSoup(html, "html.parser")

        def query(selector: str | None = None) -> Any:
            if not selector:
                return html
            elements = soup.select(selector)
            return elements[0] if len(elements) == 1 else elements

        return query
