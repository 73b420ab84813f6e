"""Periodic purge of expired resolver cache entries."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from music_coordinator.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from music_coordinator.application.interfaces.cache_store import CacheStore

logger = logging.getLogger(__name__)


class CacheCleanupJob:
    """Background task that purges expired entries every ``interval_seconds``.

    Reads already skip expired entries, so this only bounds storage growth.
    """

    def __init__(self, store: CacheStore, *, interval_seconds: float) -> None:
        self._store = store
        self._interval = interval_seconds
        self._running = False
        self._task: asyncio.Task | None = None

    def start(self) -> None:
        if self._running:
            logger.warning(LogTemplates.CACHE_CLEANUP_ALREADY_RUNNING)
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(LogTemplates.CACHE_CLEANUP_STARTED, self._interval)

    async def stop(self) -> None:
        self._running = False

        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info(LogTemplates.CACHE_CLEANUP_STOPPED)

    async def _run_loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self._interval)
            except asyncio.CancelledError:
                break

            await self.run_cleanup()

    async def run_cleanup(self) -> int:
        """Purge once. Returns the number of entries removed."""
        logger.debug(LogTemplates.CACHE_CLEANUP_RUNNING)
        try:
            removed = await self._store.purge_expired()
        except Exception as e:
            logger.error(LogTemplates.CACHE_CLEANUP_FAILED, e)
            return 0

        if removed > 0:
            logger.info(LogTemplates.CACHE_EXPIRED_CLEANED, removed)
        return removed

    @property
    def is_running(self) -> bool:
        return self._running
