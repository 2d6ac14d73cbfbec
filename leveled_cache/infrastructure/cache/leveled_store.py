#!/usr/bin/env python3
"""
Leveled Cache - ordered cascade of cache stores

Architecture:
    LeveledCache (Public API, itself a store)
        ├── level 0 (fastest, checked and populated first)
        ├── level 1
        └── level n (backing store, checked last)

A typical cascade puts an in-process MemoryStore in front of a larger,
slower RedisStore:

    cache = LeveledCache(MemoryStore(max_size=1000), RedisStore(client))

Algorithm:
    FETCH: level 0 → ... → level k hit (or compute); levels 0..k-1 backfilled
    FETCH_MULTI: each level queried only for keys every earlier level missed
    READ / READ_MULTI: same walk, no backfill
    WRITE / WRITE_MULTI / DELETE / DELETE_MULTI / CLEAR: every level, in order

Every interaction goes through each level's public API, so a value may be
serialized once per level on its way through the cascade. Configure levels
accordingly (e.g. no compression on an in-process first level).

Levels are awaited strictly one after another: a level is never queried once
an earlier one produced the value. Backfill is not atomic across levels and
nothing is rolled back when a level fails; the failing level's exception
propagates unchanged.
"""

from collections.abc import Awaitable, Callable, Hashable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from leveled_cache.core.config.constants import Stage
from leveled_cache.core.exceptions import ConfigurationError
from leveled_cache.core.interfaces.cache import BatchLoader, CacheStore, ComputeFn
from leveled_cache.core.logging.logger import get_logger, log_stage
from leveled_cache.infrastructure.cache.base_store import BaseStore, resolve, unique_keys

logger = get_logger(__name__)


class _Continuation:
    """Fallback that resumes an enclosing cascade at its next level."""

    __slots__ = ("_fn",)

    def __init__(self, fn: Callable[..., Awaitable[Any]]):
        self._fn = fn

    def __call__(self, *args: Any) -> Awaitable[Any]:
        return self._fn(*args)


def _watch(fn: Callable[..., Any] | None, errors: list[Exception]) -> Callable[..., Any] | None:
    """Wrap a caller-supplied producer so its own exceptions are recorded in ``errors``."""
    if fn is None:
        return None

    async def watched(*args: Any) -> Any:
        try:
            return await resolve(fn, *args)
        except Exception as e:
            errors.append(e)
            raise

    return watched


class LeveledCache(BaseStore):
    """
    Cache store that proxies an ordered list of stores ("levels").

    Stores given earlier are checked earlier. A LeveledCache is itself a
    valid level, so cascades nest.

    Options passed to any operation are forwarded untouched to every level;
    configure expiry, namespacing and serialization on the levels themselves.
    """

    def __init__(self, *levels: CacheStore):
        """
        Args:
            *levels: Stores in lookup order

        Raises:
            ConfigurationError: If no level is given
        """
        if not levels:
            raise ConfigurationError("LeveledCache requires at least one level")

        self._levels: tuple[CacheStore, ...] = tuple(levels)

        log_stage(
            logger,
            Stage.INITIALIZATION,
            "Leveled cache initialized",
            level="debug",
            levels=[type(level).__name__ for level in self._levels],
        )

    @property
    def levels(self) -> tuple[CacheStore, ...]:
        return self._levels

    def __repr__(self) -> str:
        names = ", ".join(type(level).__name__ for level in self._levels)
        return f"{self.__class__.__name__}({names})"

    # -------------------------------------------------------------------------
    # Read-through
    # -------------------------------------------------------------------------

    async def fetch(self, key: Hashable, compute: ComputeFn | None = None, **options: Any) -> Any:
        """
        Fetch ``key`` from the levels in order.

        Each level's own ``fetch`` is called with a fallback that fetches from
        the remaining levels, or calls ``compute`` after the last one. A value
        found at level k therefore lands in levels 0..k-1 while the recursion
        unwinds, and ``compute`` runs at most once.

        Args:
            key: Cache key
            compute: Producer for a value no level holds (sync or async)
            **options: Forwarded to every level

        Returns:
            Value from the earliest level holding it, or the computed value
        """
        if isinstance(compute, _Continuation):
            # Nested inside another cascade, which logs any failure once
            return await self._fetch(self._levels, key, compute, options)

        compute_errors: list[Exception] = []
        try:
            return await self._fetch(self._levels, key, _watch(compute, compute_errors), options)
        except Exception as e:
            self._log_read_through_failure("fetch", e, compute_errors, cache_key=key)
            raise

    async def _fetch(
        self,
        levels: tuple[CacheStore, ...],
        key: Hashable,
        compute: ComputeFn | None,
        options: dict[str, Any],
    ) -> Any:
        level, rest = levels[0], levels[1:]
        index = self._index_of(levels)

        if rest:
            async def fallback() -> Any:
                log_stage(logger, Stage.LEVEL_MISS, "Level miss", level="debug",
                          level_index=index, cache_key=key)
                return await self._fetch(rest, key, compute, options)
        else:
            async def fallback() -> Any:
                if compute is None:
                    return None
                log_stage(logger, Stage.COMPUTE, "All levels missed, computing value",
                          level="debug", level_index=index, cache_key=key)
                return await resolve(compute)

        return await level.fetch(key, _Continuation(fallback), **options)

    async def read_through_multi(
        self, keys: Iterable[Hashable], loader: BatchLoader, **options: Any
    ) -> dict[Hashable, Any]:
        """
        Batched read-through across the levels.

        Each level receives one batched read-through call for the keys every
        earlier level missed. The loader it gets resolves its own misses from
        the next level (or from ``loader`` after the last level), and the level
        stores what that returns. Nested cascades backfill their own levels.

        Returns:
            Mapping in request order; keys nobody holds or produces are omitted
        """
        requested = unique_keys(keys)
        if not requested:
            return {}

        if isinstance(loader, _Continuation):
            return await self._read_through_multi(self._levels, requested, loader, options)

        loader_errors: list[Exception] = []
        try:
            return await self._read_through_multi(
                self._levels, requested, _watch(loader, loader_errors), options
            )
        except Exception as e:
            self._log_read_through_failure("fetch_multi", e, loader_errors, key_count=len(requested))
            raise

    async def _read_through_multi(
        self,
        levels: tuple[CacheStore, ...],
        keys: list[Hashable],
        loader: BatchLoader,
        options: dict[str, Any],
    ) -> dict[Hashable, Any]:
        level, rest = levels[0], levels[1:]
        index = self._index_of(levels)

        async def load_missing(missing: list[Hashable]) -> dict[Hashable, Any]:
            if rest:
                resolved = await self._read_through_multi(rest, missing, loader, options)
            else:
                log_stage(logger, Stage.COMPUTE, "All levels missed, loading values",
                          level="debug", key_count=len(missing))
                resolved = await loader(missing)
            log_stage(logger, Stage.BACKFILL, "Backfilling level", level="debug",
                      level_index=index, missing=len(missing), resolved=len(resolved))
            return resolved

        return await level.read_through_multi(keys, _Continuation(load_missing), **options)

    # -------------------------------------------------------------------------
    # Reads (no backfill)
    # -------------------------------------------------------------------------

    async def read(self, key: Hashable, **options: Any) -> Any | None:
        """
        Read ``key`` from the first level holding it.

        Levels after the first hit are not consulted and nothing is written.

        Returns:
            Value or None if no level holds it
        """
        for index, level in enumerate(self._levels):
            with self._level_guard("read", index, cache_key=key):
                value = await level.read(key, **options)
            if value is not None:
                log_stage(logger, Stage.LEVEL_READ, "Level hit", level="debug",
                          level_index=index, cache_key=key)
                return value
        return None

    async def read_multi(self, keys: Iterable[Hashable], **options: Any) -> dict[Hashable, Any]:
        """
        Read several keys; each level is asked only for keys still missing.

        Returns:
            Mapping of found keys in request order; keys absent from every
            level are omitted
        """
        requested = unique_keys(keys)
        found = await self._read_multi(self._levels, requested, options)
        return {key: found[key] for key in requested if key in found}

    async def _read_multi(
        self,
        levels: tuple[CacheStore, ...],
        keys: list[Hashable],
        options: dict[str, Any],
    ) -> dict[Hashable, Any]:
        if not keys:
            return {}

        level, rest = levels[0], levels[1:]
        index = self._index_of(levels)

        with self._level_guard("read_multi", index, key_count=len(keys)):
            reads = await level.read_multi(keys, **options)

        found = {key: value for key, value in reads.items() if value is not None}
        missing = [key for key in keys if key not in found]

        log_stage(logger, Stage.LEVEL_READ, "Level batch read", level="debug",
                  level_index=index, requested=len(keys), found=len(found))

        if missing and rest:
            return {**found, **await self._read_multi(rest, missing, options)}
        return found

    # -------------------------------------------------------------------------
    # Fan-out
    # -------------------------------------------------------------------------

    async def write(self, key: Hashable, value: Any, **options: Any) -> list[Any]:
        """
        Write ``value`` to every level.

        Returns:
            One outcome per level, in level order
        """
        outcomes = []
        for index, level in enumerate(self._levels):
            with self._level_guard("write", index, cache_key=key):
                outcomes.append(await level.write(key, value, **options))
        log_stage(logger, Stage.FAN_OUT, "Written to all levels", level="debug", cache_key=key)
        return outcomes

    async def write_multi(self, entries: Mapping[Hashable, Any], **options: Any) -> list[Any]:
        """
        Write every entry to every level, one batched call per level.

        Returns:
            One outcome per level, in level order
        """
        entries = dict(entries)
        outcomes = []
        for index, level in enumerate(self._levels):
            with self._level_guard("write_multi", index, key_count=len(entries)):
                outcomes.append(await level.write_multi(entries, **options))
        log_stage(logger, Stage.FAN_OUT, "Batch written to all levels", level="debug",
                  key_count=len(entries))
        return outcomes

    async def delete(self, key: Hashable, **options: Any) -> list[Any]:
        """
        Delete ``key`` from every level, whether or not a level holds it.

        Returns:
            One outcome per level, in level order
        """
        outcomes = []
        for index, level in enumerate(self._levels):
            with self._level_guard("delete", index, cache_key=key):
                outcomes.append(await level.delete(key, **options))
        log_stage(logger, Stage.FAN_OUT, "Deleted from all levels", level="debug", cache_key=key)
        return outcomes

    async def delete_multi(self, keys: Iterable[Hashable], **options: Any) -> list[Any]:
        """
        Delete several keys from every level, one batched call per level.

        Returns:
            One outcome per level, in level order
        """
        keys = unique_keys(keys)
        outcomes = []
        for index, level in enumerate(self._levels):
            with self._level_guard("delete_multi", index, key_count=len(keys)):
                outcomes.append(await level.delete_multi(keys, **options))
        log_stage(logger, Stage.FAN_OUT, "Batch deleted from all levels", level="debug",
                  key_count=len(keys))
        return outcomes

    async def clear(self, **options: Any) -> list[Any]:
        """
        Clear every level.

        Returns:
            One outcome per level, in level order
        """
        outcomes = []
        for index, level in enumerate(self._levels):
            with self._level_guard("clear", index):
                outcomes.append(await level.clear(**options))
        log_stage(logger, Stage.FAN_OUT, "Cleared all levels", level="info",
                  levels=len(self._levels))
        return outcomes

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _index_of(self, levels: tuple[CacheStore, ...]) -> int:
        """Position of ``levels[0]`` in the full cascade."""
        return len(self._levels) - len(levels)

    @contextmanager
    def _level_guard(self, operation: str, index: int, **fields: Any) -> Iterator[None]:
        """Log a failing level and let its exception propagate unchanged."""
        try:
            yield
        except Exception as e:
            self._log_failure(
                operation,
                e,
                level_index=index,
                store=type(self._levels[index]).__name__,
                **fields,
            )
            raise

    def _log_read_through_failure(
        self, operation: str, error: Exception, producer_errors: list[Exception], **fields: Any
    ) -> None:
        if any(error is raised for raised in producer_errors):
            log_stage(
                logger,
                Stage.COMPUTE,
                "Compute failed",
                level="error",
                operation=operation,
                error_type=type(error).__name__,
                error=str(error),
                **fields,
            )
        else:
            self._log_failure(operation, error, **fields)

    def _log_failure(self, operation: str, error: Exception, **fields: Any) -> None:
        log_stage(
            logger,
            Stage.LEVEL_FAILURE,
            "Cache level failed",
            level="error",
            operation=operation,
            error_type=type(error).__name__,
            error=str(error),
            **fields,
        )
