"""Fingerprinted result cache with TTL and forever semantics."""

from __future__ import annotations

import functools
import hashlib
import json
import time
from collections.abc import Callable
from typing import Any

import structlog

from fxload.adapters.base import AsyncStorageAdapter
from fxload.adapters.memory import AsyncMemoryAdapter
from fxload.duration import parse_ttl
from fxload.types import DISABLED, FOREVER, CacheEntry, OperationConfig, Ttl

logger = structlog.get_logger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _closure_values(fn: Any) -> list[Any]:
    cells = getattr(fn, "__closure__", None) or ()
    values = []
    for cell in cells:
        try:
            values.append(cell.cell_contents)
        except ValueError:  # empty cell
            values.append(None)
    return values


def operation_identity(operation: Callable[..., Any]) -> Any:
    """Describe an operation body so structurally identical callables match.

    Two lambdas created by the same line with equal captured values produce the
    same identity; a different line, function or captured value does not.
    """
    if isinstance(operation, functools.partial):
        return {
            "partial": operation_identity(operation.func),
            "args": list(operation.args),
            "kwargs": operation.keywords,
        }

    bound_to = getattr(operation, "__self__", None)
    fn = getattr(operation, "__func__", operation)
    code = getattr(fn, "__code__", None)
    identity: dict[str, Any] = {
        "module": getattr(fn, "__module__", None),
        "name": getattr(fn, "__qualname__", type(fn).__qualname__),
    }
    if code is not None:
        identity["code"] = f"{code.co_filename}:{code.co_firstlineno}"
        identity["closure"] = _closure_values(fn)
    else:
        # Callable objects: state lives on the instance
        identity["object"] = id(fn)
    if bound_to is not None:
        identity["self"] = id(bound_to)
    return identity


class ResultCache:
    """Key to (value, timestamp) memo keyed by operation fingerprints.

    Storage is delegated to an AsyncStorageAdapter; the cache itself decides
    freshness: an entry is a hit when its TTL is FOREVER or when it is younger
    than the TTL. Operations whose TTL is DISABLED are never fingerprinted, so
    they are never stored nor looked up.
    """

    def __init__(
        self,
        adapter: AsyncStorageAdapter | None = None,
        *,
        prefix: str = "fx",
    ) -> None:
        self._adapter: AsyncStorageAdapter = adapter or AsyncMemoryAdapter()
        self._prefix = prefix

    @property
    def adapter(self) -> AsyncStorageAdapter:
        return self._adapter

    def fingerprint(
        self,
        operation: Callable[..., Any],
        config: OperationConfig,
    ) -> str | None:
        """Deterministic cache key for an (operation, config) pair.

        Returns None when caching is disabled for ``config``.
        """
        if parse_ttl(config.cache_ttl) is DISABLED:
            return None
        marker = config.cache_key if config.cache_key is not None else operation_identity(operation)
        payload = json.dumps(
            {"operation": marker, "config": config.identity()},
            sort_keys=True,
            default=str,
        )
        digest = hashlib.sha256(payload.encode()).hexdigest()[:32]
        return f"{self._prefix}:{digest}"

    @staticmethod
    def is_fresh(entry: CacheEntry[Any], ttl: Ttl, now: int | None = None) -> bool:
        """Check whether an entry may still be served for ``ttl``."""
        ttl_ms = parse_ttl(ttl)
        if ttl_ms is DISABLED:
            return False
        if ttl_ms == FOREVER:
            return True
        current = _now_ms() if now is None else now
        return current - entry.created_at < ttl_ms

    async def get(self, fingerprint: str) -> CacheEntry[Any] | None:
        """Raw lookup, ignoring freshness."""
        return await self._adapter.get(fingerprint)

    async def fresh(self, fingerprint: str, ttl: Ttl) -> CacheEntry[Any] | None:
        """Return the entry for ``fingerprint`` if it is fresh under ``ttl``."""
        entry = await self._adapter.get(fingerprint)
        if entry is None:
            return None
        if self.is_fresh(entry, ttl):
            logger.debug("cache.hit", key=fingerprint)
            return entry
        logger.debug("cache.stale", key=fingerprint, age_ms=_now_ms() - entry.created_at)
        return None

    async def put(
        self,
        fingerprint: str,
        value: Any,
        ttl: Ttl = FOREVER,
    ) -> CacheEntry[Any]:
        """Store ``value`` stamped with the current time."""
        entry: CacheEntry[object] = CacheEntry(
            key=fingerprint,
            value=value,
            created_at=_now_ms(),
        )
        ttl_ms = parse_ttl(ttl)
        await self._adapter.set(fingerprint, entry, ttl=ttl_ms or None)
        logger.debug("cache.stored", key=fingerprint, ttl_ms=ttl_ms)
        return entry

    async def delete(self, fingerprint: str) -> None:
        await self._adapter.delete(fingerprint)

    async def clear(self) -> None:
        """Clear all cached entries."""
        await self._adapter.clear()

    async def disconnect(self) -> None:
        await self._adapter.disconnect()
