"""Port interface for the key-value store backing the resolver cache."""

from __future__ import annotations

from abc import ABC, abstractmethod


class CacheStore(ABC):
    """Best-effort string store with per-key expiry.

    Callers treat every error raised here as a cache miss.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None on a miss or expired entry."""
        ...

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value that expires after ``ttl_seconds``."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        ...

    async def purge_expired(self) -> int:
        """Drop expired entries and return how many were removed.

        Stores that only expire lazily on read may keep the default.
        """
        return 0
