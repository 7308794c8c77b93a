"""In-memory storage adapter."""

import asyncio
from collections import OrderedDict

from fxload.types import CacheEntry


class AsyncMemoryAdapter:
    """Async in-memory storage adapter with optional LRU eviction.

    Entries are not expired here; freshness is decided by the ResultCache.
    """

    def __init__(self, max_items: int | None = None) -> None:
        self._cache: OrderedDict[str, CacheEntry[object]] = OrderedDict()
        self._max_items = max_items
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._cache)

    async def get(self, key: str) -> CacheEntry[object] | None:
        """Get a cache entry by key."""
        async with self._lock:
            entry = self._cache.get(key)
            if entry is not None:
                self._cache.move_to_end(key)  # LRU touch
            return entry

    async def set(
        self, key: str, entry: CacheEntry[object], ttl: int | None = None
    ) -> None:
        """Store a cache entry."""
        async with self._lock:
            self._cache[key] = entry
            self._cache.move_to_end(key)
            if self._max_items and len(self._cache) > self._max_items:
                self._cache.popitem(last=False)

    async def delete(self, key: str) -> None:
        """Delete a cache entry."""
        async with self._lock:
            self._cache.pop(key, None)

    async def clear(self) -> None:
        """Clear all cached entries."""
        async with self._lock:
            self._cache.clear()

    async def disconnect(self) -> None:
        """Disconnect from the storage backend (no-op for memory)."""
        pass
