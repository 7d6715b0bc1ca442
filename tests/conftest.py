"""Test configuration and fixtures."""

import pytest

from artifact_inspector.cache.memory import MemoryCache
from tests.helpers import ALPINE_FILES, RecordingCache, write_tree


@pytest.fixture
def alpine_root(tmp_path):
    """Minimal Alpine 3.11 rootfs with musl installed."""
    return write_tree(tmp_path / "rootfs", ALPINE_FILES)


@pytest.fixture
def recording_cache():
    """Cache double recording put_blob calls."""
    return RecordingCache()


@pytest.fixture
def memory_cache():
    """Fresh in-memory cache."""
    return MemoryCache()


# Pytest configuration
def pytest_configure(config):
    """Configure pytest markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as unit test (default)")
