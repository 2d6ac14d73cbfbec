"""
Unit Tests for the default cascade factory and global instance.
"""

from unittest.mock import AsyncMock, patch

import pytest

from leveled_cache.core.config.settings import Settings
from leveled_cache.infrastructure.cache import factory
from leveled_cache.infrastructure.cache.factory import (
    build_leveled_cache,
    close_cache,
    get_leveled_cache,
    init_cache,
)
from leveled_cache.infrastructure.cache.memory_store import MemoryStore
from leveled_cache.infrastructure.cache.redis_store import RedisStore


@pytest.mark.unit
class TestBuildLeveledCache:
    """Test cascade construction from settings."""

    def test_memory_then_redis_by_default(self):
        cache = build_leveled_cache(Settings())

        assert [type(level) for level in cache.levels] == [MemoryStore, RedisStore]

    def test_redis_level_can_be_disabled(self):
        cache = build_leveled_cache(Settings(CACHE_REDIS_ENABLED=False))

        assert [type(level) for level in cache.levels] == [MemoryStore]

    def test_settings_reach_levels(self):
        settings = Settings(CACHE_L1_MAX_SIZE=10, CACHE_NAMESPACE="app", CACHE_DEFAULT_TTL=60)

        memory, redis_level = build_leveled_cache(settings).levels

        assert memory.max_size == 10
        assert memory._namespace == "app"
        assert memory._default_ttl == 60
        assert redis_level._namespace == "app"
        assert redis_level._default_ttl == 60

    def test_uses_global_settings_when_none_given(self, monkeypatch):
        monkeypatch.setenv("CACHE_REDIS_ENABLED", "false")

        cache = build_leveled_cache()

        assert len(cache.levels) == 1


@pytest.mark.unit
class TestGlobalInstance:
    """Test the process-wide cascade lifecycle."""

    def test_get_leveled_cache_is_singleton(self):
        assert get_leveled_cache() is get_leveled_cache()

    @pytest.mark.asyncio
    async def test_init_connects_redis_levels(self):
        with patch.object(RedisStore, "connect", new_callable=AsyncMock) as mock_connect:
            cache = await init_cache()

        assert cache is get_leveled_cache()
        mock_connect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_disconnects_and_resets(self):
        get_leveled_cache()

        with patch.object(RedisStore, "disconnect", new_callable=AsyncMock) as mock_disconnect:
            await close_cache()

        mock_disconnect.assert_awaited_once()
        assert factory._leveled_cache is None

    @pytest.mark.asyncio
    async def test_close_without_instance_is_noop(self):
        await close_cache()

        assert factory._leveled_cache is None

    @pytest.mark.asyncio
    async def test_memory_only_cascade_works_end_to_end(self, monkeypatch):
        monkeypatch.setenv("CACHE_REDIS_ENABLED", "false")

        cache = await init_cache()

        assert await cache.fetch("key", lambda: "value") == "value"
        assert await cache.read("key") == "value"
