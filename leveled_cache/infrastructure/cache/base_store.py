"""
Store Base Class

Concrete stores implement seven primitives (read, read_multi, write,
write_multi, delete, delete_multi, clear). BaseStore builds the read-through
operations on top of them, so every store answers ``fetch`` /
``fetch_multi`` / ``read_through_multi`` the same way and can sit at any
position in a ``LeveledCache``.

Read-through (cache-aside) pattern:
    1. Check the store
    2. On a miss, compute the value (at most once)
    3. Store the computed value
    4. Return it
"""

import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable, Hashable, Iterable, Mapping
from typing import Any

from leveled_cache.core.interfaces.cache import BatchLoader, ComputeFn, KeyedComputeFn


async def resolve(fn: Callable[..., Any], *args: Any) -> Any:
    """Call ``fn`` and await its result when it returns an awaitable."""
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def unique_keys(keys: Iterable[Hashable]) -> list[Hashable]:
    """Collapse duplicate keys, keeping first-occurrence order."""
    return list(dict.fromkeys(keys))


class BaseStore(ABC):
    """
    Abstract cache store with read-through defaults.

    ``None`` is never a cached value: a ``None`` read is a miss, and a
    ``None`` produced by a compute function is returned to the caller but
    not stored.
    """

    # -------------------------------------------------------------------------
    # Primitives
    # -------------------------------------------------------------------------

    @abstractmethod
    async def read(self, key: Hashable, **options: Any) -> Any | None:
        ...

    @abstractmethod
    async def read_multi(self, keys: Iterable[Hashable], **options: Any) -> dict[Hashable, Any]:
        ...

    @abstractmethod
    async def write(self, key: Hashable, value: Any, **options: Any) -> Any:
        ...

    @abstractmethod
    async def write_multi(self, entries: Mapping[Hashable, Any], **options: Any) -> Any:
        ...

    @abstractmethod
    async def delete(self, key: Hashable, **options: Any) -> Any:
        ...

    @abstractmethod
    async def delete_multi(self, keys: Iterable[Hashable], **options: Any) -> Any:
        ...

    @abstractmethod
    async def clear(self, **options: Any) -> Any:
        ...

    # -------------------------------------------------------------------------
    # Read-through
    # -------------------------------------------------------------------------

    async def fetch(self, key: Hashable, compute: ComputeFn | None = None, **options: Any) -> Any:
        """
        Get a value, computing and storing it on a miss.

        STAGE-2.5: Cache-aside pattern

        Args:
            key: Cache key
            compute: Zero-argument producer, sync or async; called at most once
            **options: Forwarded to read/write. ``force=True`` skips the read.

        Returns:
            Stored or computed value (None on a miss without ``compute``)
        """
        if not options.get("force"):
            value = await self.read(key, **options)
            if value is not None:
                return value

        if compute is None:
            return None

        value = await resolve(compute)
        if value is not None:
            await self.write(key, value, **options)
        return value

    async def fetch_multi(
        self, keys: Iterable[Hashable], compute: KeyedComputeFn, **options: Any
    ) -> dict[Hashable, Any]:
        """
        Get several values, computing the missing ones one key at a time.

        ``compute(key)`` runs once per key that no read found, never for keys
        already stored. The result holds every requested key in request order.
        """

        async def compute_each(missing: list[Hashable]) -> dict[Hashable, Any]:
            return {key: await resolve(compute, key) for key in missing}

        return await self.read_through_multi(keys, compute_each, **options)

    async def read_through_multi(
        self, keys: Iterable[Hashable], loader: BatchLoader, **options: Any
    ) -> dict[Hashable, Any]:
        """
        Batched read-through against this store.

        Algorithm:
        1. One ``read_multi`` for every requested key
        2. Hand the missing keys to ``loader`` in a single call
        3. One ``write_multi`` of what the loader produced
        4. Merge, in request order

        Returns:
            Mapping of requested keys to values; keys neither stored nor
            produced by ``loader`` are omitted
        """
        requested = unique_keys(keys)
        if not requested:
            return {}

        found = await self.read_multi(requested, **options)
        missing = [key for key in requested if found.get(key) is None]

        loaded: dict[Hashable, Any] = {}
        if missing:
            loaded = await loader(missing)
            storable = {key: value for key, value in loaded.items() if value is not None}
            if storable:
                await self.write_multi(storable, **options)

        merged = {key: value for key, value in found.items() if value is not None}
        merged.update(loaded)
        return {key: merged[key] for key in requested if key in merged}

    async def exist(self, key: Hashable, **options: Any) -> bool:
        """Check whether a value is stored for ``key``."""
        return await self.read(key, **options) is not None
