"""
Integration tests.

These need a running Redis (``USE_REAL_REDIS=1``; connection settings come
from the usual ``REDIS_*`` environment variables) and are skipped otherwise.
"""
