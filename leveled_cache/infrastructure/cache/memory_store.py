"""
In-memory LRU store.

STAGE-2.1: In-process cache level

This is a per-process store, not shared across workers. Put it in front of a
RedisStore in a LeveledCache for a fast first level.

Implementation Details:
- Uses OrderedDict for O(1) access and LRU ordering
- Guarded by asyncio.Lock
- Evicts least recently used entries when over capacity
- Optional per-entry expiry (``expires_in`` option or ``default_ttl``)
- Optional namespace, prefixed onto every key
"""

import asyncio
import time
from collections import OrderedDict
from collections.abc import Hashable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from leveled_cache.core.config.constants import L1_CACHE_MAX_SIZE, NAMESPACE_SEPARATOR
from leveled_cache.core.exceptions import ConfigurationError
from leveled_cache.infrastructure.cache.base_store import BaseStore


@dataclass
class _Entry:
    value: Any
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class MemoryStore(BaseStore):
    """
    In-memory LRU cache store.

    Options:
        expires_in: Seconds until a written entry expires (overrides
            ``default_ttl``; None = never)
    """

    def __init__(
        self,
        max_size: int = L1_CACHE_MAX_SIZE,
        default_ttl: float | None = None,
        namespace: str | None = None,
    ):
        """
        Args:
            max_size: Maximum number of entries to hold
            default_ttl: Expiry applied when a write carries no ``expires_in``
            namespace: Prefix applied to every key
        """
        if max_size < 1:
            raise ConfigurationError(
                "MemoryStore max_size must be at least 1", details={"max_size": max_size}
            )

        self._max_size = max_size
        self._default_ttl = default_ttl
        self._namespace = namespace
        self._cache: OrderedDict[Hashable, _Entry] = OrderedDict()
        self._lock = asyncio.Lock()

    async def read(self, key: Hashable, **options: Any) -> Any | None:
        """
        Get a value. Returns None if missing or expired.

        LRU Update: Moves accessed entry to end (most recently used)
        """
        async with self._lock:
            return self._get(self._normalize(key), time.monotonic())

    async def read_multi(self, keys: Iterable[Hashable], **options: Any) -> dict[Hashable, Any]:
        """Get several values under one lock acquisition; misses are omitted."""
        now = time.monotonic()
        found = {}
        async with self._lock:
            for key in keys:
                value = self._get(self._normalize(key), now)
                if value is not None:
                    found[key] = value
        return found

    async def write(self, key: Hashable, value: Any, **options: Any) -> bool:
        """Store a value, evicting the LRU entry if over capacity."""
        expires_at = self._expiry(options)
        async with self._lock:
            self._put(self._normalize(key), _Entry(value, expires_at))
        return True

    async def write_multi(self, entries: Mapping[Hashable, Any], **options: Any) -> bool:
        """Store several values under one lock acquisition."""
        expires_at = self._expiry(options)
        async with self._lock:
            for key, value in entries.items():
                self._put(self._normalize(key), _Entry(value, expires_at))
        return True

    async def delete(self, key: Hashable, **options: Any) -> bool:
        """
        Delete a value.

        Returns:
            True if deleted, False if not found
        """
        async with self._lock:
            return self._cache.pop(self._normalize(key), None) is not None

    async def delete_multi(self, keys: Iterable[Hashable], **options: Any) -> int:
        """
        Delete several values under one lock acquisition.

        Returns:
            Number of entries removed
        """
        deleted = 0
        async with self._lock:
            for key in keys:
                if self._cache.pop(self._normalize(key), None) is not None:
                    deleted += 1
        return deleted

    async def clear(self, **options: Any) -> bool:
        """Remove every entry."""
        async with self._lock:
            self._cache.clear()
        return True

    @property
    def size(self) -> int:
        """Current number of entries (expired entries included until touched)."""
        return len(self._cache)

    @property
    def max_size(self) -> int:
        return self._max_size

    def keys(self) -> list[Hashable]:
        """Stored keys, least recently used first (namespace included)."""
        return list(self._cache.keys())

    # -------------------------------------------------------------------------
    # Internals (caller holds the lock)
    # -------------------------------------------------------------------------

    def _get(self, name: Hashable, now: float) -> Any | None:
        entry = self._cache.get(name)
        if entry is None:
            return None
        if entry.is_expired(now):
            del self._cache[name]
            return None
        self._cache.move_to_end(name)
        return entry.value

    def _put(self, name: Hashable, entry: _Entry) -> None:
        if name in self._cache:
            self._cache.move_to_end(name)
        self._cache[name] = entry

        while len(self._cache) > self._max_size:
            self._cache.popitem(last=False)  # Remove oldest (front)

    def _normalize(self, key: Hashable) -> Hashable:
        if self._namespace:
            return f"{self._namespace}{NAMESPACE_SEPARATOR}{key}"
        return key

    def _expiry(self, options: dict[str, Any]) -> float | None:
        ttl = options.get("expires_in", self._default_ttl)
        if ttl is None:
            return None
        return time.monotonic() + ttl
