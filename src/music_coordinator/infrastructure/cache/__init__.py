"""Resolver cache stores."""

from music_coordinator.infrastructure.cache.cleanup import CacheCleanupJob
from music_coordinator.infrastructure.cache.memory_store import MemoryCacheStore
from music_coordinator.infrastructure.cache.sqlite_store import SQLiteCacheStore

__all__ = [
    "CacheCleanupJob",
    "MemoryCacheStore",
    "SQLiteCacheStore",
]
