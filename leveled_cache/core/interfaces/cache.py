"""
Cache Store Protocol

This module defines the protocol every cache level satisfies, whether it is a
terminal store (in-memory, Redis, ...) or another ``LeveledCache``. Because a
cascade honours the same protocol as the stores it wraps, cascades nest.

Architectural Decision: Protocol-based abstraction
- Levels are dispatched on by duck typing, never by type inspection
- Facilitates testing with recording/failing fakes
- Runtime checking with @runtime_checkable
"""

from collections.abc import Awaitable, Callable, Hashable, Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

# Caller-supplied producer for a single missing key. May return a value or
# an awaitable resolving to one.
ComputeFn = Callable[[], Any]

# Caller-supplied producer for one missing key in a batch.
KeyedComputeFn = Callable[[Hashable], Any]

# Batch loader handed to ``read_through_multi``: receives the keys a level is
# missing and returns values for exactly those keys.
BatchLoader = Callable[[list[Hashable]], Awaitable[dict[Hashable, Any]]]


@runtime_checkable
class CacheStore(Protocol):
    """
    Protocol defining the operations of one cache level.

    ``None`` is the absence sentinel: ``read`` returns ``None`` on a miss and
    ``read_multi`` omits missing keys. ``**options`` are forwarded untouched
    by a cascade; their meaning belongs to each store.

    Implementations:
    - MemoryStore: in-process LRU store
    - RedisStore: Redis-backed store
    - LeveledCache: an ordered cascade of other stores
    """

    async def read(self, key: Hashable, **options: Any) -> Any | None:
        """
        Get a value.

        Returns:
            The stored value or None if not found
        """
        ...

    async def read_multi(self, keys: Iterable[Hashable], **options: Any) -> dict[Hashable, Any]:
        """
        Get several values in one round-trip.

        Returns:
            Mapping of the keys that were found; missing keys are omitted
        """
        ...

    async def fetch(self, key: Hashable, compute: ComputeFn | None = None, **options: Any) -> Any:
        """
        Get a value, computing and storing it on a miss.

        ``compute`` is invoked at most once per call.
        """
        ...

    async def read_through_multi(
        self, keys: Iterable[Hashable], loader: BatchLoader, **options: Any
    ) -> dict[Hashable, Any]:
        """
        Batched read-through: read ``keys``, hand the missing ones to
        ``loader`` once, store what it returns, and return the merged mapping.
        """
        ...

    async def write(self, key: Hashable, value: Any, **options: Any) -> Any:
        """
        Store a value.

        Returns:
            Store-specific outcome (True on success for bundled stores)
        """
        ...

    async def write_multi(self, entries: Mapping[Hashable, Any], **options: Any) -> Any:
        """Store several values in one round-trip."""
        ...

    async def delete(self, key: Hashable, **options: Any) -> Any:
        """
        Remove a value.

        Returns:
            Store-specific outcome (False when nothing was removed)
        """
        ...

    async def delete_multi(self, keys: Iterable[Hashable], **options: Any) -> Any:
        """
        Remove several values in one round-trip.

        Returns:
            Store-specific outcome (number removed for bundled stores)
        """
        ...

    async def clear(self, **options: Any) -> Any:
        """Remove every value this store owns."""
        ...
