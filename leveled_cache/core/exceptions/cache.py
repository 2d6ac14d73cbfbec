"""
Cache-Related Exceptions

Raised by the bundled stores at their driver boundary. The cascade itself
never raises these; it re-raises whatever a level raised.
"""

from leveled_cache.core.exceptions.base import LeveledCacheError


class CacheError(LeveledCacheError):
    """Base exception for cache-related errors."""
    pass


class CacheConnectionError(CacheError):
    """
    Raised when unable to connect to a cache server (Redis).

    Common causes:
    - Redis server is down
    - Network connectivity issues
    - Incorrect host/port configuration
    - Authentication failure
    """
    pass


class CacheKeyError(CacheError):
    """
    Raised when a cache key operation fails.

    Common causes:
    - Operation timeout
    - Connection dropped mid-command
    - Memory limit exceeded on the server
    """
    pass


class CacheSerializationError(CacheError):
    """Raised when a value cannot be encoded for, or decoded from, a store."""
    pass
