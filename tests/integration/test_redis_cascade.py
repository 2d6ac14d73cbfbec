"""
Integration Tests for a memory → Redis cascade against a real server.
"""

import uuid

import pytest

from leveled_cache.core.config.settings import Settings
from leveled_cache.infrastructure.cache.leveled_store import LeveledCache
from leveled_cache.infrastructure.cache.memory_store import MemoryStore
from leveled_cache.infrastructure.cache.redis_store import RedisConnection, RedisStore


@pytest.fixture
async def redis_store(use_real_redis):
    if not use_real_redis:
        pytest.skip("USE_REAL_REDIS not set")

    store = RedisStore(
        connection=RedisConnection(Settings()),
        namespace=f"test-{uuid.uuid4().hex[:8]}",
    )
    await store.connect()
    yield store
    await store.clear()
    await store.disconnect()


@pytest.mark.integration
class TestRedisCascade:
    """Test the cascade with a live Redis level."""

    @pytest.mark.asyncio
    async def test_fetch_populates_both_levels(self, redis_store):
        memory = MemoryStore()
        cache = LeveledCache(memory, redis_store)

        assert await cache.fetch("user:1", lambda: {"name": "Ada"}) == {"name": "Ada"}

        assert await memory.read("user:1") == {"name": "Ada"}
        assert await redis_store.read("user:1") == {"name": "Ada"}

    @pytest.mark.asyncio
    async def test_fresh_memory_level_is_backfilled_from_redis(self, redis_store):
        await LeveledCache(MemoryStore(), redis_store).write_multi({"a": 1, "b": 2})
        memory = MemoryStore()

        values = await LeveledCache(memory, redis_store).fetch_multi(["a", "b", "c"], lambda key: 3)

        assert values == {"a": 1, "b": 2, "c": 3}
        assert await memory.read_multi(["a", "b", "c"]) == {"a": 1, "b": 2, "c": 3}

    @pytest.mark.asyncio
    async def test_expiry_and_delete(self, redis_store):
        cache = LeveledCache(MemoryStore(), redis_store)

        await cache.write("temp", "value", expires_in=60)
        assert await cache.delete("temp") == [True, True]
        assert await cache.read("temp") is None

    @pytest.mark.asyncio
    async def test_clear_only_removes_namespace(self, redis_store):
        await redis_store.write("k", "v")

        assert await redis_store.clear() is True
        assert await redis_store.read("k") is None
