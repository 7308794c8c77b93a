"""Stylesheet resources."""

from __future__ import annotations

import inspect
import re
from typing import Any

from fxload.http import Response
from fxload.resources.base import Resource

_COMMENTS = re.compile(r"/\*.*?\*/", re.DOTALL)
_RULE = re.compile(r"([^{}]+)\{")


def minify_css(css: str) -> str:
    """Drop comments and collapse whitespace."""
    css = _COMMENTS.sub("", css)
    css = re.sub(r"\s+", " ", css)
    css = re.sub(r"\s*([{};:,])\s*", r"\1", css)
    return css.strip()


def scope_css(css: str, scope: str) -> str:
    """Prefix every selector of every rule with ``scope``."""

    def prefix(match: re.Match[str]) -> str:
        selectors = match.group(1)
        if selectors.strip().startswith("@"):
            return match.group(0)
        scoped = ", ".join(
            f"{scope} {selector.strip()}"
            for selector in selectors.split(",")
            if selector.strip()
        )
        return f"{scoped} {{"

    return _RULE.sub(prefix, css)


class Stylesheet:
    """Handle to CSS attached to the host's presentation layer."""

    def __init__(self, css: str, key: str, registry: dict[str, Any], media: str | None = None) -> None:
        self._original = css
        self._css = css
        self._key = key
        self._registry = registry
        self.media = media
        self.scope: str | None = None
        registry[key] = self

    @property
    def attached(self) -> bool:
        return self._registry.get(self._key) is self

    def get(self) -> str:
        return self._css

    def rescope(self, scope: str) -> str:
        self.scope = scope
        self._css = self._original if scope == "global" else scope_css(self._original, scope)
        return self._css

    def remove(self) -> None:
        if self.attached:
            del self._registry[self._key]

    async def serve(self, request: Any = None) -> Response:
        return Response().send(self._css, content_type="text/css")


class CSSResource(Resource):
    required = (("path", "file"),)

    async def _do_load(self) -> Stylesheet:
        css = await self.loader.read_text(self.config.source or "")

        for transformation in self.config.transformations:
            css = transformation(css)
            if inspect.isawaitable(css):
                css = await css
        if self.config.minify:
            css = minify_css(css)

        sheet = Stylesheet(
            css,
            self.path or self.config.source or "",
            self.host.stylesheets,
            media=self.config.media,
        )
        if self.config.scope and self.config.scope != "global":
            sheet.rescope(self.config.scope)
        return sheet
