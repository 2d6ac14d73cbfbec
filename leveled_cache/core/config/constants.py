#!/usr/bin/env python3
"""
System Constants and Enumerations

Architectural Decision: Centralized constants for maintainability
- Single source of truth for magic numbers
- Type-safe enums for stage tagging in structured logs
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================

class Stage(str, Enum):
    """
    Cache operation stages, attached to every log event as ``stage``.

    Numbered by the order in which a cascade call passes through them.
    """
    INITIALIZATION = "0"
    LEVEL_READ = "2.1"
    LEVEL_MISS = "2.2"
    BACKFILL = "2.3"
    FAN_OUT = "2.4"
    COMPUTE = "2.5"
    LEVEL_FAILURE = "2.E"
    REDIS = "REDIS"
    LOGGING = "L"


# ============================================================================
# Keys
# ============================================================================

# Separator between a store's namespace and the caller's key
NAMESPACE_SEPARATOR = ":"

# ============================================================================
# In-memory level defaults
# ============================================================================

L1_CACHE_MAX_SIZE = 1000

# ============================================================================
# Redis level
# ============================================================================

# Keys deleted per round-trip when clearing a namespace
REDIS_CLEAR_BATCH_SIZE = 500
