"""Resource variants and the type table used to build them."""

from fxload.resources.api import APIResource
from fxload.resources.base import Resource, ResourceHost
from fxload.resources.css import CSSResource, Stylesheet
from fxload.resources.data import DataResource, RawResource
from fxload.resources.html import HTMLResource
from fxload.resources.module import ModuleResource
from fxload.resources.serving import (
    ImageResource,
    MarkdownResource,
    RouteResource,
    StaticResource,
    StreamResource,
)

RESOURCE_TYPES: dict[str, type[Resource]] = {
    "api": APIResource,
    "css": CSSResource,
    "html": HTMLResource,
    "module": ModuleResource,
    "class": ModuleResource,
    "instance": ModuleResource,
    "function": ModuleResource,
    "json": DataResource,
    "xml": DataResource,
    "yml": DataResource,
    "yaml": DataResource,
    "raw": RawResource,
    "static": StaticResource,
    "markdown": MarkdownResource,
    "image": ImageResource,
    "stream": StreamResource,
    "route": RouteResource,
}

__all__ = [
    "RESOURCE_TYPES",
    "APIResource",
    "CSSResource",
    "DataResource",
    "HTMLResource",
    "ImageResource",
    "MarkdownResource",
    "ModuleResource",
    "RawResource",
    "Resource",
    "ResourceHost",
    "RouteResource",
    "StaticResource",
    "StreamResource",
    "Stylesheet",
]
