"""Tests for operation fingerprints and the result cache."""

import functools

import pytest

from fxload import DISABLED, FOREVER, CacheEntry, OperationConfig, ResultCache
from fxload.cache import operation_identity


def make_operation(value: int):
    return lambda: value


def fetch(item_id: int) -> int:
    return item_id


@pytest.fixture
def cache(async_adapter) -> ResultCache:
    return ResultCache(async_adapter)


class TestFingerprint:
    """Tests for ResultCache.fingerprint."""

    def test_deterministic_for_same_body(self, cache: ResultCache) -> None:
        """Callables from the same line with equal captures share a fingerprint."""
        config = OperationConfig(cache_ttl=FOREVER)
        assert cache.fingerprint(make_operation(1), config) == cache.fingerprint(
            make_operation(1), config
        )

    def test_differs_by_captured_value(self, cache: ResultCache) -> None:
        """Different captured values give different fingerprints."""
        config = OperationConfig(cache_ttl=FOREVER)
        assert cache.fingerprint(make_operation(1), config) != cache.fingerprint(
            make_operation(2), config
        )

    def test_differs_by_config(self, cache: ResultCache) -> None:
        """The same operation under different configs is cached separately."""
        operation = make_operation(1)
        assert cache.fingerprint(operation, OperationConfig(cache_ttl=FOREVER)) != (
            cache.fingerprint(operation, OperationConfig(cache_ttl="30s"))
        )
        assert cache.fingerprint(operation, OperationConfig(cache_ttl=FOREVER)) != (
            cache.fingerprint(operation, OperationConfig(cache_ttl=FOREVER, sequence_key="b"))
        )

    def test_on_complete_not_part_of_fingerprint(self, cache: ResultCache) -> None:
        """Completion callbacks do not change the fingerprint."""
        operation = make_operation(1)
        plain = OperationConfig(cache_ttl=FOREVER)
        with_callback = OperationConfig(cache_ttl=FOREVER, on_complete=print)
        assert cache.fingerprint(operation, plain) == cache.fingerprint(operation, with_callback)

    def test_disabled_has_no_fingerprint(self, cache: ResultCache) -> None:
        """Disabled caching skips fingerprinting entirely."""
        assert cache.fingerprint(make_operation(1), OperationConfig(cache_ttl=DISABLED)) is None
        assert cache.fingerprint(make_operation(1), OperationConfig(cache_ttl="off")) is None

    def test_cache_key_overrides_identity(self, cache: ResultCache) -> None:
        """An explicit cache_key replaces the derived operation identity."""
        config = OperationConfig(cache_ttl=FOREVER, cache_key="users")
        assert cache.fingerprint(make_operation(1), config) == cache.fingerprint(
            make_operation(2), config
        )

    def test_prefix(self, async_adapter) -> None:
        """Fingerprints carry the configured prefix."""
        cache = ResultCache(async_adapter, prefix="app")
        fingerprint = cache.fingerprint(make_operation(1), OperationConfig(cache_ttl=FOREVER))
        assert fingerprint is not None
        assert fingerprint.startswith("app:")

    def test_partial_identity(self) -> None:
        """Partials are identified by function and bound arguments."""
        assert operation_identity(functools.partial(fetch, 1)) == operation_identity(
            functools.partial(fetch, 1)
        )
        assert operation_identity(functools.partial(fetch, 1)) != operation_identity(
            functools.partial(fetch, 2)
        )


class TestFreshness:
    """Tests for ResultCache.is_fresh and fresh."""

    def test_forever_is_always_fresh(self) -> None:
        """FOREVER entries never go stale."""
        entry = CacheEntry(key="k", value=1, created_at=0)
        assert ResultCache.is_fresh(entry, FOREVER, now=10**12)
        assert ResultCache.is_fresh(entry, "forever", now=10**12)

    def test_ttl_window(self) -> None:
        """An entry is fresh strictly before created_at + ttl."""
        entry = CacheEntry(key="k", value=1, created_at=1000)
        assert ResultCache.is_fresh(entry, 500, now=1499)
        assert not ResultCache.is_fresh(entry, 500, now=1500)

    def test_disabled_never_fresh(self) -> None:
        """Disabled TTL never serves an entry."""
        entry = CacheEntry(key="k", value=1, created_at=1000)
        assert not ResultCache.is_fresh(entry, DISABLED, now=1000)

    async def test_put_then_fresh(self, cache: ResultCache) -> None:
        """A stored entry is served while fresh."""
        await cache.put("fp", {"a": 1}, ttl="1m")
        entry = await cache.fresh("fp", "1m")
        assert entry is not None
        assert entry.value == {"a": 1}

    async def test_stale_entry_not_served(self, cache: ResultCache) -> None:
        """A stale entry is still stored but fresh() ignores it."""
        await cache.put("fp", "old", ttl=1)
        entry = await cache.get("fp")
        assert entry is not None

        assert cache.is_fresh(entry, 1, now=entry.created_at + 5) is False

    async def test_missing_entry(self, cache: ResultCache) -> None:
        """Unknown fingerprints are a miss."""
        assert await cache.fresh("missing", FOREVER) is None

    async def test_delete_and_clear(self, cache: ResultCache) -> None:
        """Entries can be dropped one by one or all together."""
        await cache.put("a", 1)
        await cache.put("b", 2)
        await cache.delete("a")
        assert await cache.get("a") is None
        await cache.clear()
        assert await cache.get("b") is None
