"""In-process CacheStore with per-key expiry and a size cap."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Final

from pydantic import BaseModel, ConfigDict

from music_coordinator.application.interfaces.cache_store import CacheStore
from music_coordinator.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES: Final[int] = 500


class CacheEntry(BaseModel):
    """Stored value with its absolute expiry timestamp."""

    model_config = ConfigDict(frozen=True)

    value: str
    expires_at: float


class MemoryCacheStore(CacheStore):
    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._max_entries = max_entries
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            self._entries.pop(key, None)
            return None
        return entry.value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        now = self._clock()
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(value=value, expires_at=now + ttl_seconds)

        if len(self._entries) > self._max_entries:
            self._evict(now)

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def purge_expired(self) -> int:
        return self._drop_expired(self._clock())

    def _drop_expired(self, now: float) -> int:
        expired = [k for k, entry in self._entries.items() if entry.expires_at <= now]
        for k in expired:
            self._entries.pop(k, None)
        return len(expired)

    def _evict(self, now: float) -> None:
        dropped = self._drop_expired(now)
        if dropped:
            logger.debug(LogTemplates.CACHE_EXPIRED_CLEANED, dropped)

        # Insertion order doubles as age order.
        while len(self._entries) > self._max_entries:
            oldest = next(iter(self._entries))
            self._entries.pop(oldest, None)
