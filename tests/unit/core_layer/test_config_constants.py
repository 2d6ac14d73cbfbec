"""
Unit Tests for Configuration Constants
"""

import pytest

from leveled_cache.core.config.constants import (
    L1_CACHE_MAX_SIZE,
    NAMESPACE_SEPARATOR,
    REDIS_CLEAR_BATCH_SIZE,
    Stage,
)


@pytest.mark.unit
class TestStage:
    """Test stage identifiers."""

    def test_stage_values_are_unique(self):
        values = [stage.value for stage in Stage]

        assert len(set(values)) == len(values)

    def test_stages_compare_as_strings(self):
        assert Stage.INITIALIZATION == "0"
        assert isinstance(Stage.BACKFILL, str)


@pytest.mark.unit
class TestDefaults:
    """Test default sizing constants."""

    def test_sizes_are_positive(self):
        assert L1_CACHE_MAX_SIZE > 0
        assert REDIS_CLEAR_BATCH_SIZE > 0

    def test_namespace_separator(self):
        assert NAMESPACE_SEPARATOR == ":"
