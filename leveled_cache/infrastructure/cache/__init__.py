"""
Cache Module

Provides the leveled cache cascade and the stores it is built from.
"""

from .base_store import BaseStore
from .factory import (
    build_leveled_cache,
    close_cache,
    get_leveled_cache,
    init_cache,
)
from .leveled_store import LeveledCache
from .memory_store import MemoryStore
from .redis_store import RedisConnection, RedisStore

__all__ = [
    "BaseStore",
    "LeveledCache",
    "MemoryStore",
    "RedisConnection",
    "RedisStore",
    "build_leveled_cache",
    "get_leveled_cache",
    "init_cache",
    "close_cache",
]
