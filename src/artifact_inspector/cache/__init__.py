"""Artifact cache interface and backends."""

from .base import ArtifactCache
from .fs import FSCache
from .memory import MemoryCache

__all__ = ["ArtifactCache", "FSCache", "MemoryCache"]
