"""
Core Module

Foundational components: configuration, logging, exceptions and the store
protocol.
"""

from .exceptions import (
    CacheConnectionError,
    CacheError,
    CacheKeyError,
    CacheSerializationError,
    ConfigurationError,
    LeveledCacheError,
)
from .interfaces import CacheStore
from .logging import get_logger, log_stage, setup_logging

__all__ = [
    "CacheConnectionError",
    "CacheError",
    "CacheKeyError",
    "CacheSerializationError",
    "CacheStore",
    "ConfigurationError",
    "LeveledCacheError",
    "get_logger",
    "log_stage",
    "setup_logging",
]
