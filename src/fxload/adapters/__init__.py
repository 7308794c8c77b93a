"""Storage adapters backing the fxload result cache."""

from contextlib import suppress

from fxload.adapters.base import AsyncStorageAdapter
from fxload.adapters.memory import AsyncMemoryAdapter

# Optional adapters - only available when dependencies are installed
with suppress(ImportError):
    from fxload.adapters.redis import AsyncRedisAdapter

__all__ = [
    "AsyncMemoryAdapter",
    "AsyncRedisAdapter",
    "AsyncStorageAdapter",
]
