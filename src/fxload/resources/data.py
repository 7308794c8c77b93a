"""Structured data resources: JSON, XML and YAML."""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from typing import Any

import yaml

from fxload.errors import UnsupportedDataType
from fxload.loader import Payload
from fxload.resources.base import Resource


def parse_payload(payload: Payload) -> Any:
    """Parse a payload according to its content type."""
    content_type = (payload.content_type or "").lower()
    if "json" in content_type:
        return json.loads(payload.text)
    if "xml" in content_type:
        return ET.fromstring(payload.content)
    if "yaml" in content_type or "yml" in content_type:
        return yaml.safe_load(payload.text)
    raise UnsupportedDataType(payload.content_type, payload.source)


class DataResource(Resource):
    required = (("path", "file"),)

    async def _do_load(self) -> Any:
        payload = await self.loader.read(self.config.source or "")
        return parse_payload(payload)


class RawResource(Resource):
    required = (("path", "file"),)

    async def _do_load(self) -> str:
        return await self.loader.read_text(self.config.source or "")
