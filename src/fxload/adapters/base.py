"""Base adapter protocol for result cache storage backends."""

from typing import Protocol, runtime_checkable

from fxload.types import CacheEntry


@runtime_checkable
class AsyncStorageAdapter(Protocol):
    """Async key-value store holding cache entries."""

    async def get(self, key: str) -> CacheEntry[object] | None:
        """Get a cache entry by key."""
        ...

    async def set(
        self, key: str, entry: CacheEntry[object], ttl: int | None = None
    ) -> None:
        """Store a cache entry. ``ttl`` (ms) is a hint for backends that expire keys."""
        ...

    async def delete(self, key: str) -> None:
        """Delete a cache entry."""
        ...

    async def clear(self) -> None:
        """Clear all cached entries."""
        ...

    async def disconnect(self) -> None:
        """Disconnect from the storage backend."""
        ...
