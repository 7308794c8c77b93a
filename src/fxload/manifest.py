"""Flattening of declarative, possibly lazy, manifest trees."""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog

from fxload.errors import FxError, InvalidManifestEntry
from fxload.registry import ResourceRegistry
from fxload.resources.module import import_source
from fxload.types import ResourceConfig

logger = structlog.get_logger(__name__)


def join_path(prefix: str, key: str) -> str:
    return f"{prefix}.{key}" if prefix else key


def is_leaf(node: Any) -> bool:
    """A leaf declares a ``type``; route table entries declare a ``handler``."""
    return isinstance(node, Mapping) and ("type" in node or "handler" in node)


def as_leaf_config(node: Mapping[str, Any]) -> Mapping[str, Any]:
    if "type" not in node:
        return {"type": "route", **node}
    return node


def import_manifest(path: str, base_dir: Path | None = None) -> Mapping[str, Any]:
    """Import a sub-manifest module and return its ``manifest`` attribute.

    A callable ``manifest`` is called with no arguments and may return a
    coroutine, which the caller awaits.
    """
    module = import_source(path, base_dir)
    manifest = getattr(module, "manifest", None)
    if manifest is None:
        raise InvalidManifestEntry(path, "module has no 'manifest' attribute")
    return manifest() if callable(manifest) else manifest


class ManifestResolver:
    """Walks a manifest tree into dotted paths and registers its leaves.

    Nodes are producers (zero-argument callables, sync or async, returning a
    sub-tree expanded under the same prefix), interior mappings without a
    ``type``, or leaf resource configs. Leaves with ``type: object`` and a
    ``path`` are imported sub-manifests. The nested tree is kept in ``tree``;
    existing siblings at a prefix are merged, not replaced.
    """

    def __init__(self, registry: ResourceRegistry, *, max_depth: int = 10) -> None:
        self._registry = registry
        self._max_depth = max_depth
        self.tree: dict[str, Any] = {}

    @property
    def max_depth(self) -> int:
        return self._max_depth

    async def load(self, manifest: Any, prefix: str = "", *, _depth: int = 0) -> None:
        """Resolve ``manifest`` beneath ``prefix``."""
        if _depth > self._max_depth:
            logger.warning(
                "manifest.max_depth",
                prefix=prefix,
                max_depth=self._max_depth,
            )
            return

        if _is_producer(manifest):
            manifest = await _produce(manifest)
        if not isinstance(manifest, Mapping):
            logger.error("manifest.invalid_node", prefix=prefix, node=type(manifest).__name__)
            return

        for key, value in manifest.items():
            full_path = join_path(prefix, str(key))
            logger.debug("manifest.entry", path=full_path)
            try:
                await self._load_entry(full_path, value, _depth)
            except (FxError, ImportError) as e:
                # The entry stays unresolved; siblings carry on
                logger.error("manifest.entry_failed", path=full_path, error=str(e))

    async def _load_entry(self, path: str, value: Any, depth: int) -> None:
        if _is_producer(value):
            await self.load(value, path, _depth=depth + 1)
        elif isinstance(value, ResourceConfig):
            self.insert(path, value)
        elif is_leaf(value):
            if value.get("type") == "object":
                await self._load_sub_manifest(path, value, depth)
            else:
                self.insert(path, as_leaf_config(value))
        elif isinstance(value, Mapping):
            self._ensure_node(path)
            await self.load(value, path, _depth=depth + 1)
        else:
            raise InvalidManifestEntry(path, f"unexpected {type(value).__name__} node")

    async def _load_sub_manifest(self, path: str, value: Mapping[str, Any], depth: int) -> None:
        source = value.get("path")
        if not source:
            raise InvalidManifestEntry(path, "'object' entry requires 'path'")
        sub_manifest = import_manifest(source, self._registry.host.loader.base_dir)
        if inspect.isawaitable(sub_manifest):
            sub_manifest = await sub_manifest
        await self.load(sub_manifest, path, _depth=depth + 1)

    def insert(
        self,
        path: str,
        config: Mapping[str, Any] | ResourceConfig,
        *,
        build: bool = True,
    ) -> None:
        """Record a leaf at ``path`` and, unless ``build`` is false, build its resource.

        Intermediate nodes are created on demand. The config is registered
        even when building fails, so a later ``resolve`` reports the same
        error until the entry is replaced.
        """
        parent_path, _, name = path.rpartition(".")
        parent = self._ensure_node(parent_path)
        parent[name] = config
        self._registry.register(path, config)
        if build:
            self._registry.resolve(path)

    def _ensure_node(self, path: str) -> dict[str, Any]:
        node = self.tree
        if not path:
            return node
        for part in path.split("."):
            child = node.get(part)
            if not isinstance(child, dict) or is_leaf(child):
                child = {}
                node[part] = child
            node = child
        return node

    def lookup(self, path: str) -> Any:
        """Return the subtree or leaf config at ``path``, or None."""
        node: Any = self.tree
        for part in path.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        return node

    def children(self, path: str = "") -> list[str]:
        node = self.lookup(path) if path else self.tree
        if not isinstance(node, Mapping) or is_leaf(node):
            return []
        return list(node)


def _is_producer(value: Any) -> bool:
    return callable(value) and not isinstance(value, Mapping)


async def _produce(producer: Any) -> Any:
    result = producer()
    if inspect.isawaitable(result):
        result = await result
    return result
