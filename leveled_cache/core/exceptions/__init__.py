"""
Exception Module

Module Structure:
-----------------
- **base.py**: LeveledCacheError base class + ConfigurationError
- **cache.py**: Store-level exceptions (Redis, serialization)

Usage:
------
```python
from leveled_cache.core.exceptions import CacheKeyError, ConfigurationError
```
"""

from leveled_cache.core.exceptions.base import ConfigurationError, LeveledCacheError
from leveled_cache.core.exceptions.cache import (
    CacheConnectionError,
    CacheError,
    CacheKeyError,
    CacheSerializationError,
)

__all__ = [
    "LeveledCacheError",
    "ConfigurationError",
    "CacheError",
    "CacheConnectionError",
    "CacheKeyError",
    "CacheSerializationError",
]
