"""
leveled_cache - a cache store that proxies an ordered list of cache stores.

    from leveled_cache import LeveledCache, MemoryStore, RedisStore

    cache = LeveledCache(MemoryStore(), RedisStore(namespace="app"))
    value = await cache.fetch("key", lambda: expensive())
"""

from leveled_cache.core.interfaces import CacheStore
from leveled_cache.infrastructure.cache import (
    BaseStore,
    LeveledCache,
    MemoryStore,
    RedisStore,
    build_leveled_cache,
    close_cache,
    get_leveled_cache,
    init_cache,
)

__version__ = "0.1.0"

__all__ = [
    "BaseStore",
    "CacheStore",
    "LeveledCache",
    "MemoryStore",
    "RedisStore",
    "build_leveled_cache",
    "close_cache",
    "get_leveled_cache",
    "init_cache",
    "__version__",
]
