"""
Core Interfaces Module

Components:
-----------
- **cache.py**: CacheStore protocol shared by terminal stores and cascades

Interfaces follow the Protocol pattern (PEP 544) for structural subtyping:
no inheritance required, easy mocking for tests.
"""

from leveled_cache.core.interfaces.cache import (
    BatchLoader,
    CacheStore,
    ComputeFn,
    KeyedComputeFn,
)

__all__ = [
    "BatchLoader",
    "CacheStore",
    "ComputeFn",
    "KeyedComputeFn",
]
