"""Base class shared by every resource variant."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import structlog

from fxload.config import FxSettings
from fxload.errors import InvalidManifestEntry
from fxload.loader import SourceLoader
from fxload.types import ResourceConfig

logger = structlog.get_logger(__name__)


@dataclass
class ResourceHost:
    """Collaborators a resource may need while loading."""

    loader: SourceLoader
    settings: FxSettings = field(default_factory=FxSettings)
    # Presentation layer for css resources: path -> attached Stylesheet
    stylesheets: dict[str, Any] = field(default_factory=dict)
    # Builds nested resources (route handlers given as configs)
    registry: Any = None


class Resource:
    """A lazily loaded, memoized wrapper around one typed asset.

    ``load()`` runs ``_do_load()`` once; later calls return the first result.
    A failed load leaves the resource unloaded so the next call tries again.
    """

    # Config fields that must be present; a tuple entry means "any of these"
    required: tuple[str | tuple[str, ...], ...] = ()

    def __init__(self, config: ResourceConfig, host: ResourceHost, path: str = "") -> None:
        self.config = config
        self.host = host
        self.path = path
        self.loaded = False
        self._value: Any = None
        self._lock = asyncio.Lock()
        self._validate()

    def _validate(self) -> None:
        for requirement in self.required:
            names = requirement if isinstance(requirement, tuple) else (requirement,)
            if not any(getattr(self.config, name, None) for name in names):
                raise InvalidManifestEntry(
                    self.path,
                    f"{self.config.type!r} resource requires {' or '.join(names)!r}",
                )

    @property
    def loader(self) -> SourceLoader:
        return self.host.loader

    async def load(self) -> Any:
        """Load the resource, once."""
        if self.loaded:
            return self._value
        async with self._lock:
            if not self.loaded:
                self._value = await self._do_load()
                self.loaded = True
                logger.info("resource.loaded", path=self.path, type=self.config.type)
        return self._value

    async def _do_load(self) -> Any:
        raise NotImplementedError("_do_load must be implemented by subclass")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.path or self.config.source!r} loaded={self.loaded}>"
