"""
Test Fixtures Package

Shared test utilities and helpers for consistent testing across all modules.
"""

from .store_factory import CountingCompute, FailingStore, RecordingStore, StoreTestFactory

__all__ = ["CountingCompute", "FailingStore", "RecordingStore", "StoreTestFactory"]
