"""
Redis Store with Connection Pooling

Architecture:
    RedisStore (store API)
        └── RedisConnection (connection lifecycle, pooling)

Values are JSON-encoded with orjson, so any JSON-serializable value can be
stored. Batch reads use a single MGET and batch writes a single pipeline,
one round-trip each.

Driver errors are logged and re-raised as CacheConnectionError (connection
lost, timeouts) or CacheKeyError (any other command failure), with the key in
``details``.
"""

import time
from collections.abc import Hashable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

import orjson
import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import ConnectionError, RedisError, TimeoutError

from leveled_cache.core.config.constants import (
    NAMESPACE_SEPARATOR,
    REDIS_CLEAR_BATCH_SIZE,
    Stage,
)
from leveled_cache.core.config.settings import Settings, get_settings
from leveled_cache.core.exceptions import (
    CacheConnectionError,
    CacheKeyError,
    CacheSerializationError,
)
from leveled_cache.core.logging.logger import get_logger, log_stage
from leveled_cache.infrastructure.cache.base_store import BaseStore, unique_keys

logger = get_logger(__name__)


# =============================================================================
# CONNECTION MANAGEMENT
# =============================================================================


class RedisConnection:
    """
    Manages Redis connection lifecycle and pooling.

    Pool Configuration (from settings):
    - Max connections: REDIS_MAX_CONNECTIONS
    - Socket timeouts: REDIS_SOCKET_TIMEOUT / REDIS_SOCKET_CONNECT_TIMEOUT
    - Health check interval: REDIS_HEALTH_CHECK_INTERVAL
    """

    def __init__(self, settings: Settings | None = None):
        self._settings = settings or get_settings()
        self._pool: ConnectionPool | None = None
        self._client: redis.Redis | None = None
        self._is_connected = False

    async def connect(self) -> redis.Redis:
        """
        Establish connection to Redis with connection pooling.

        STAGE-REDIS.2: Connection establishment

        Returns:
            redis.Redis: Connected Redis client

        Raises:
            CacheConnectionError: If connection fails
        """
        if self._is_connected and self._client:
            return self._client

        redis_settings = self._settings.redis

        try:
            self._pool = ConnectionPool(
                host=redis_settings.REDIS_HOST,
                port=redis_settings.REDIS_PORT,
                db=redis_settings.REDIS_DB,
                password=redis_settings.REDIS_PASSWORD,
                max_connections=redis_settings.REDIS_MAX_CONNECTIONS,
                socket_connect_timeout=redis_settings.REDIS_SOCKET_CONNECT_TIMEOUT,
                socket_timeout=redis_settings.REDIS_SOCKET_TIMEOUT,
                health_check_interval=redis_settings.REDIS_HEALTH_CHECK_INTERVAL,
                decode_responses=True,
            )
            self._client = redis.Redis(connection_pool=self._pool)

            # Verify the pool actually reaches a server
            await self._client.ping()
            self._is_connected = True

            log_stage(
                logger,
                Stage.REDIS,
                "Redis connected successfully",
                host=redis_settings.REDIS_HOST,
                port=redis_settings.REDIS_PORT,
                max_connections=redis_settings.REDIS_MAX_CONNECTIONS,
            )

            return self._client

        except (ConnectionError, TimeoutError) as e:
            log_stage(logger, Stage.REDIS, "Failed to connect to Redis", level="error", error=str(e))

            # Never leave a client that failed its ping behind
            if self._pool is not None:
                await self._pool.disconnect()
            self._client = None
            self._pool = None
            self._is_connected = False

            raise CacheConnectionError.from_exception(
                e,
                message=f"Failed to connect to Redis: {e}",
                host=redis_settings.REDIS_HOST,
                port=redis_settings.REDIS_PORT,
            ) from e

    async def disconnect(self) -> None:
        """
        Close Redis client and pool.

        STAGE-REDIS.3: Connection cleanup
        """
        if self._client:
            await self._client.aclose()

        if self._pool:
            await self._pool.disconnect()

        self._client = None
        self._pool = None
        self._is_connected = False

        log_stage(logger, Stage.REDIS, "Redis disconnected")

    def get_client(self) -> redis.Redis | None:
        return self._client

    def is_connected(self) -> bool:
        return self._is_connected


# =============================================================================
# STORE
# =============================================================================


class RedisStore(BaseStore):
    """
    Redis-backed cache store.

    Either pass a ready ``redis.asyncio.Redis`` client (connection owned by the
    caller) or let the store build a pooled connection from settings and call
    ``connect()``.

    Options:
        expires_in: Seconds until a written key expires (overrides
            ``default_ttl``; None = never)

    Usage:
        store = RedisStore(namespace="app")
        await store.connect()
        await store.write("user:42", {"name": "Ada"}, expires_in=300)
        await store.read("user:42")
    """

    def __init__(
        self,
        client: redis.Redis | None = None,
        *,
        connection: RedisConnection | None = None,
        namespace: str | None = None,
        default_ttl: float | None = None,
    ):
        self._client = client
        self._connection = connection if client is None else None
        if self._client is None and self._connection is None:
            self._connection = RedisConnection()
        self._namespace = namespace
        self._default_ttl = default_ttl

    async def connect(self) -> None:
        """Connect the owned pool (no-op for an injected client)."""
        if self._connection is not None:
            await self._connection.connect()

    async def disconnect(self) -> None:
        """Close the owned pool (an injected client is left open)."""
        if self._connection is not None:
            await self._connection.disconnect()

    # -------------------------------------------------------------------------
    # Store operations
    # -------------------------------------------------------------------------

    async def read(self, key: Hashable, **options: Any) -> Any | None:
        name = self._name(key)
        with self._translate_errors("GET", key=name):
            raw = await self._get_client().get(name)
        return self._load(raw, name)

    async def read_multi(self, keys: Iterable[Hashable], **options: Any) -> dict[Hashable, Any]:
        """Single MGET for every key; misses are omitted."""
        keys = list(keys)
        if not keys:
            return {}

        names = [self._name(key) for key in keys]
        with self._translate_errors("MGET", keys=names):
            raws = await self._get_client().mget(names)

        found = {}
        for key, name, raw in zip(keys, names, raws):
            value = self._load(raw, name)
            if value is not None:
                found[key] = value
        return found

    async def write(self, key: Hashable, value: Any, **options: Any) -> bool:
        name = self._name(key)
        payload = self._dump(value, name)
        with self._translate_errors("SET", key=name):
            result = await self._get_client().set(name, payload, px=self._ttl_ms(options))
        return bool(result)

    async def write_multi(self, entries: Mapping[Hashable, Any], **options: Any) -> bool:
        """Queue one SET per entry and execute them in a single pipeline."""
        if not entries:
            return True

        ttl_ms = self._ttl_ms(options)
        payloads = {self._name(key): self._dump(value, self._name(key)) for key, value in entries.items()}

        with self._translate_errors("PIPELINE SET", keys=list(payloads)):
            pipe = self._get_client().pipeline(transaction=False)
            for name, payload in payloads.items():
                pipe.set(name, payload, px=ttl_ms)
            results = await pipe.execute()
        return all(results)

    async def delete(self, key: Hashable, **options: Any) -> bool:
        """
        Returns:
            True if the key existed and was removed
        """
        name = self._name(key)
        with self._translate_errors("DEL", key=name):
            return await self._get_client().delete(name) > 0

    async def delete_multi(self, keys: Iterable[Hashable], **options: Any) -> int:
        """
        Single DEL for every key.

        Returns:
            Number of keys that existed and were removed
        """
        names = [self._name(key) for key in unique_keys(keys)]
        if not names:
            return 0

        with self._translate_errors("DEL", keys=names):
            return await self._get_client().delete(*names)

    async def clear(self, **options: Any) -> bool:
        """
        Remove this store's keys.

        With a namespace only keys under it are deleted (SCAN + batched DEL);
        without one the whole database is flushed.
        """
        client = self._get_client()

        if not self._namespace:
            with self._translate_errors("FLUSHDB"):
                await client.flushdb()
            return True

        pattern = f"{self._namespace}{NAMESPACE_SEPARATOR}*"
        deleted = 0
        with self._translate_errors("SCAN/DEL", pattern=pattern):
            batch: list[str] = []
            async for name in client.scan_iter(match=pattern, count=REDIS_CLEAR_BATCH_SIZE):
                batch.append(name)
                if len(batch) >= REDIS_CLEAR_BATCH_SIZE:
                    deleted += await client.delete(*batch)
                    batch = []
            if batch:
                deleted += await client.delete(*batch)

        log_stage(logger, Stage.REDIS, "Redis namespace cleared", namespace=self._namespace,
                  deleted=deleted)
        return True

    async def health_check(self) -> dict[str, Any]:
        """
        Ping Redis and report latency.

        STAGE-REDIS.HEALTH: Redis health check
        """
        health: dict[str, Any] = {"status": "healthy", "ping_latency_ms": None}

        try:
            start = time.perf_counter()
            await self._get_client().ping()
            health["ping_latency_ms"] = round((time.perf_counter() - start) * 1000, 2)
        except (CacheConnectionError, RedisError) as e:
            health["status"] = "unhealthy"
            health["error"] = str(e)

        return health

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _get_client(self) -> redis.Redis:
        if self._client is not None:
            return self._client

        client = self._connection.get_client() if self._connection else None
        if client is None:
            raise CacheConnectionError(
                "Redis store is not connected; call connect() first",
                details={"namespace": self._namespace},
            )
        return client

    def _name(self, key: Hashable) -> str:
        if self._namespace:
            return f"{self._namespace}{NAMESPACE_SEPARATOR}{key}"
        return str(key)

    def _ttl_ms(self, options: dict[str, Any]) -> int | None:
        ttl = options.get("expires_in", self._default_ttl)
        if ttl is None:
            return None
        return max(1, int(ttl * 1000))

    @staticmethod
    def _dump(value: Any, name: str) -> bytes:
        try:
            return orjson.dumps(value)
        except orjson.JSONEncodeError as e:
            raise CacheSerializationError.from_exception(
                e, message=f"Cannot encode value for {name}", key=name
            ) from e

    @staticmethod
    def _load(raw: str | bytes | None, name: str) -> Any | None:
        if raw is None:
            return None
        try:
            return orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise CacheSerializationError.from_exception(
                e, message=f"Cannot decode value stored at {name}", key=name
            ) from e

    @contextmanager
    def _translate_errors(self, command: str, **details: Any) -> Iterator[None]:
        try:
            yield
        except (ConnectionError, TimeoutError) as e:
            log_stage(logger, Stage.REDIS, f"Redis {command} failed", level="error",
                      error=str(e), **details)
            raise CacheConnectionError.from_exception(
                e, message=f"Redis {command} failed: {e}", **details
            ) from e
        except RedisError as e:
            log_stage(logger, Stage.REDIS, f"Redis {command} failed", level="error",
                      error=str(e), **details)
            raise CacheKeyError.from_exception(
                e, message=f"Redis {command} failed: {e}", **details
            ) from e
