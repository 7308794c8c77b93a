"""Registry of resource configs and the resources built from them."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from fxload.errors import InvalidManifestEntry, UnknownResourceType
from fxload.resources import RESOURCE_TYPES, Resource, ResourceHost
from fxload.types import ResourceConfig

logger = structlog.get_logger(__name__)


class ResourceRegistry:
    """Builds one Resource per resolved path, lazily, and keeps it.

    Configs are registered by path; ``resolve`` constructs the resource on
    first use and returns the same instance afterwards. Construction errors
    (UnknownResourceType, InvalidManifestEntry) are raised to the caller and
    nothing is memoized for that path, so fixing the config and resolving
    again succeeds.
    """

    def __init__(
        self,
        host: ResourceHost,
        types: Mapping[str, type[Resource]] | None = None,
    ) -> None:
        self._host = host
        self._types: dict[str, type[Resource]] = dict(types or RESOURCE_TYPES)
        self._configs: dict[str, ResourceConfig] = {}
        self._resources: dict[str, Resource] = {}
        # Paths whose last registered config was malformed
        self._errors: dict[str, InvalidManifestEntry] = {}
        if host.registry is None:
            host.registry = self

    @property
    def host(self) -> ResourceHost:
        return self._host

    def register_type(self, name: str, resource_class: type[Resource]) -> None:
        """Add or replace the resource class built for ``type: name``."""
        self._types[name] = resource_class

    def types(self) -> list[str]:
        return sorted(self._types)

    def register(self, path: str, config: ResourceConfig | Mapping[str, Any]) -> None:
        """Record the config for ``path``, discarding any resource built from an older one.

        A malformed mapping raises InvalidManifestEntry; ``resolve`` keeps
        raising it for ``path`` until a valid config replaces it.
        """
        self._resources.pop(path, None)
        if not isinstance(config, ResourceConfig):
            try:
                config = ResourceConfig.from_mapping(config, path)
            except InvalidManifestEntry as e:
                self._configs.pop(path, None)
                self._errors[path] = e
                raise
        self._errors.pop(path, None)
        self._configs[path] = config

    def config(self, path: str) -> ResourceConfig | None:
        return self._configs.get(path)

    def create(self, config: ResourceConfig, path: str = "") -> Resource:
        """Construct a resource without memoizing it."""
        resource_class = self._types.get(config.type)
        if resource_class is None:
            raise UnknownResourceType(config.type, path)
        return resource_class(config, self._host, path)

    def resolve(self, path: str) -> Resource | None:
        """Return the resource at ``path``, building it on first resolution.

        Returns None when no config is registered at ``path``.
        """
        if path in self._errors:
            raise self._errors[path]
        resource = self._resources.get(path)
        if resource is not None:
            return resource
        config = self._configs.get(path)
        if config is None:
            return None
        resource = self.create(config, path)
        self._resources[path] = resource
        logger.debug("registry.created", path=path, type=config.type)
        return resource

    def is_resolved(self, path: str) -> bool:
        return path in self._resources

    def paths(self) -> list[str]:
        return sorted(self._configs)

    def __contains__(self, path: object) -> bool:
        return path in self._configs

    def __len__(self) -> int:
        return len(self._configs)
