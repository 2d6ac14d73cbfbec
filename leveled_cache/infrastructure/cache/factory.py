"""
Default cascade construction and the process-wide instance.

    MemoryStore (level 0)  →  RedisStore (level 1, when CACHE_REDIS_ENABLED)

Usage:
    cache = await init_cache()
    value = await cache.fetch("key", compute)
    await close_cache()
"""

from leveled_cache.core.config.constants import Stage
from leveled_cache.core.config.settings import Settings, get_settings
from leveled_cache.core.logging.logger import get_logger, log_stage
from leveled_cache.infrastructure.cache.leveled_store import LeveledCache
from leveled_cache.infrastructure.cache.memory_store import MemoryStore
from leveled_cache.infrastructure.cache.redis_store import RedisConnection, RedisStore

logger = get_logger(__name__)


def build_leveled_cache(settings: Settings | None = None) -> LeveledCache:
    """
    Build the default memory → Redis cascade from settings.

    STAGE-0: Cascade construction

    Every level gets the same namespace and default expiry so that a key
    means the same thing at every level.
    """
    settings = settings or get_settings()
    cache_settings = settings.cache

    levels = [
        MemoryStore(
            max_size=cache_settings.CACHE_L1_MAX_SIZE,
            default_ttl=cache_settings.CACHE_DEFAULT_TTL,
            namespace=cache_settings.CACHE_NAMESPACE,
        )
    ]
    if cache_settings.CACHE_REDIS_ENABLED:
        levels.append(
            RedisStore(
                connection=RedisConnection(settings),
                namespace=cache_settings.CACHE_NAMESPACE,
                default_ttl=cache_settings.CACHE_DEFAULT_TTL,
            )
        )

    cache = LeveledCache(*levels)

    log_stage(
        logger,
        Stage.INITIALIZATION,
        "Leveled cache built",
        l1_max_size=cache_settings.CACHE_L1_MAX_SIZE,
        redis_enabled=cache_settings.CACHE_REDIS_ENABLED,
        namespace=cache_settings.CACHE_NAMESPACE,
    )
    return cache


# =============================================================================
# GLOBAL INSTANCE (SINGLETON PATTERN)
# =============================================================================

_leveled_cache: LeveledCache | None = None


def get_leveled_cache() -> LeveledCache:
    """
    Get the global leveled cache instance (singleton).

    Redis levels are not connected until ``init_cache()`` runs.
    """
    global _leveled_cache

    if _leveled_cache is None:
        _leveled_cache = build_leveled_cache()

    return _leveled_cache


async def init_cache() -> LeveledCache:
    """
    Build (if needed) and connect the global leveled cache.

    Raises:
        CacheConnectionError: If a Redis level cannot connect
    """
    cache = get_leveled_cache()
    for level in cache.levels:
        if isinstance(level, RedisStore):
            await level.connect()
    return cache


async def close_cache() -> None:
    """Disconnect Redis levels and drop the global instance."""
    global _leveled_cache

    if _leveled_cache is None:
        return

    for level in _leveled_cache.levels:
        if isinstance(level, RedisStore):
            await level.disconnect()

    _leveled_cache = None
    log_stage(logger, Stage.INITIALIZATION, "Leveled cache closed")
