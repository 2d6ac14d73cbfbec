"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import fnmatch
import os
import sys

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tests.test_fixtures import StoreTestFactory  # noqa: E402


# ============================================================================
# Environment-Based Integration Toggles
# ============================================================================


@pytest.fixture(scope="session")
def use_real_redis():
    """Check if real Redis should be used for integration tests."""
    return os.getenv("USE_REAL_REDIS", "0").lower() in ("1", "true", "yes")


# ============================================================================
# Settings Isolation
# ============================================================================


@pytest.fixture(autouse=True)
def reset_settings_singleton():
    """Drop cached settings and the global cache between tests."""
    from leveled_cache.core.config import settings as settings_module
    from leveled_cache.infrastructure.cache import factory

    settings_module._settings = None
    factory._leveled_cache = None
    yield
    settings_module._settings = None
    factory._leveled_cache = None


# ============================================================================
# In-Memory Redis
# ============================================================================


class InMemoryRedis:
    """
    In-memory stand-in for ``redis.asyncio.Redis``.

    Covers the commands RedisStore issues. Expiry arguments are recorded but
    not enforced.
    """

    def __init__(self):
        self.data: dict[str, bytes] = {}
        self.ttl_data: dict[str, int] = {}
        self.commands: list[tuple] = []

    async def ping(self):
        return True

    async def get(self, name):
        self.commands.append(("get", name))
        return self.data.get(name)

    async def mget(self, names):
        self.commands.append(("mget", list(names)))
        return [self.data.get(name) for name in names]

    async def set(self, name, value, px=None):
        self.commands.append(("set", name))
        self._store(name, value, px)
        return True

    async def delete(self, *names):
        self.commands.append(("delete", names))
        count = 0
        for name in names:
            if self.data.pop(name, None) is not None:
                self.ttl_data.pop(name, None)
                count += 1
        return count

    async def flushdb(self):
        self.commands.append(("flushdb",))
        self.data.clear()
        self.ttl_data.clear()
        return True

    async def scan_iter(self, match=None, count=None):
        for name in list(self.data):
            if match is None or fnmatch.fnmatch(name, match):
                yield name

    def pipeline(self, transaction=True):
        return InMemoryPipeline(self)

    def _store(self, name, value, px):
        self.data[name] = value if isinstance(value, bytes) else str(value).encode()
        if px:
            self.ttl_data[name] = px


class InMemoryPipeline:
    """Queues SETs and applies them on ``execute()``."""

    def __init__(self, client: InMemoryRedis):
        self._client = client
        self._queued: list[tuple] = []

    def set(self, name, value, px=None):
        self._queued.append((name, value, px))
        return self

    async def execute(self):
        self._client.commands.append(("pipeline", [name for name, _, _ in self._queued]))
        for name, value, px in self._queued:
            self._client._store(name, value, px)
        results = [True] * len(self._queued)
        self._queued = []
        return results


@pytest.fixture
def in_memory_redis_client():
    """In-memory Redis client stub for testing."""
    return InMemoryRedis()


# ============================================================================
# Store Fixtures
# ============================================================================


@pytest.fixture
def outer():
    return StoreTestFactory.recording_store("outer")


@pytest.fixture
def middle():
    return StoreTestFactory.recording_store("middle")


@pytest.fixture
def inner():
    return StoreTestFactory.recording_store("inner")


@pytest.fixture
def cache(outer, middle, inner):
    """Three-level cascade over empty recording stores."""
    from leveled_cache.infrastructure.cache.leveled_store import LeveledCache

    return LeveledCache(outer, middle, inner)
