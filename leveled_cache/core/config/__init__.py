"""
Configuration Module

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Stage identifiers and fixed defaults

Usage:
------
```python
from leveled_cache.core.config import get_settings

settings = get_settings()
max_size = settings.cache.CACHE_L1_MAX_SIZE
```
"""

from .settings import Settings, get_settings, reload_settings

__all__ = ["Settings", "get_settings", "reload_settings"]
