"""Redis storage adapter."""

from __future__ import annotations

import json
from typing import Any

import structlog

from fxload.types import CacheEntry

logger = structlog.get_logger(__name__)


def _serialize_entry(entry: CacheEntry[object]) -> str:
    """Serialize a cache entry to JSON."""
    return json.dumps(
        {
            "key": entry.key,
            "value": entry.value,
            "created_at": entry.created_at,
        }
    )


def _deserialize_entry(data: bytes | str) -> CacheEntry[object]:
    """Deserialize JSON to a cache entry."""
    if isinstance(data, bytes):
        data = data.decode("utf-8")
    obj = json.loads(data)
    return CacheEntry(
        key=obj["key"],
        value=obj["value"],
        created_at=obj["created_at"],
    )


class AsyncRedisAdapter:
    """Async Redis storage adapter.

    Values must be JSON serializable. Entries with a positive TTL are given a
    matching Redis expiry so stale keys do not accumulate.
    """

    def __init__(
        self,
        client: Any,  # redis.asyncio.Redis
        *,
        prefix: str = "fx",
    ) -> None:
        self._client = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, *, prefix: str = "fx") -> AsyncRedisAdapter:
        """Create an adapter with its own client."""
        import redis.asyncio

        return cls(redis.asyncio.from_url(url), prefix=prefix)

    def _cache_key(self, key: str) -> str:
        """Generate full Redis key for cache entries."""
        return f"{self._prefix}:cache:{key}"

    async def get(self, key: str) -> CacheEntry[object] | None:
        """Get a cache entry by key."""
        data = await self._client.get(self._cache_key(key))
        if data is None:
            return None
        return _deserialize_entry(data)

    async def set(
        self, key: str, entry: CacheEntry[object], ttl: int | None = None
    ) -> None:
        """Store a cache entry, expiring it after ``ttl`` ms when positive.

        Values that cannot be encoded as JSON are not stored; the entry is
        skipped with a warning and later lookups miss.
        """
        try:
            data = _serialize_entry(entry)
        except (TypeError, ValueError) as e:
            logger.warning("redis.unserializable", key=key, error=str(e))
            return
        await self._client.set(
            self._cache_key(key),
            data,
            px=ttl if ttl else None,
        )

    async def delete(self, key: str) -> None:
        """Delete a cache entry."""
        await self._client.delete(self._cache_key(key))

    async def clear(self) -> None:
        """Clear all cached entries under this adapter's prefix."""
        # Use SCAN to find and delete all cache keys
        cursor: int = 0
        pattern = f"{self._prefix}:cache:*"
        while True:
            result = await self._client.scan(cursor, match=pattern, count=100)
            cursor = result[0]
            keys = result[1]
            if keys:
                await self._client.delete(*keys)
            if cursor == 0:
                break

    async def disconnect(self) -> None:
        """Close the Redis connection."""
        await self._client.aclose()
