"""SQLite-backed CacheStore with per-operation connections and WAL mode."""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Final

import aiosqlite

from music_coordinator.application.interfaces.cache_store import CacheStore
from music_coordinator.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

MEMORY_PATH: Final[str] = ":memory:"
SHARED_MEMORY_URI: Final[str] = "file:music-coordinator-cache?mode=memory&cache=shared"
BUSY_TIMEOUT_MS: Final[int] = 5000
CONNECTION_TIMEOUT_S: Final[float] = 10.0


class SQLitePragmas:
    JOURNAL_MODE_WAL = "PRAGMA journal_mode=WAL"
    BUSY_TIMEOUT = "PRAGMA busy_timeout={timeout}"


class SQLiteCacheStore(CacheStore):
    """Persists resolved metadata across restarts.

    Expired rows are filtered on read and removed by ``purge_expired``.
    """

    def __init__(self, path: str) -> None:
        if path.startswith("sqlite:///"):
            path = path[len("sqlite:///"):]
        self._db_path = path
        self._initialized = False
        self._keepalive_conn: aiosqlite.Connection | None = None

    @property
    def db_path(self) -> str:
        return self._db_path

    async def initialize(self) -> None:
        if self._initialized:
            return

        if self._db_path != MEMORY_PATH:
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        elif self._keepalive_conn is None:
            # The shared in-memory DB lives only while one connection stays open.
            self._keepalive_conn = await self._connect()

        async with self.transaction() as conn:
            await conn.execute(
                """
                CREATE TABLE IF NOT EXISTS resolver_cache (
                    cache_key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    expires_at REAL NOT NULL
                )
                """
            )
            await conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_resolver_cache_expires "
                "ON resolver_cache(expires_at)"
            )

        self._initialized = True
        logger.info(LogTemplates.CACHE_DB_INITIALIZED, self._db_path)

    async def _connect(self) -> aiosqlite.Connection:
        if self._db_path == MEMORY_PATH:
            conn = await aiosqlite.connect(
                SHARED_MEMORY_URI, uri=True, timeout=CONNECTION_TIMEOUT_S
            )
        else:
            conn = await aiosqlite.connect(self._db_path, timeout=CONNECTION_TIMEOUT_S)
            await conn.execute(SQLitePragmas.JOURNAL_MODE_WAL)
        await conn.execute(SQLitePragmas.BUSY_TIMEOUT.format(timeout=BUSY_TIMEOUT_MS))
        return conn

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Per-operation connection with auto-commit/rollback."""
        conn = await self._connect()
        try:
            yield conn
            await conn.commit()
        except Exception:
            await conn.rollback()
            raise
        finally:
            await conn.close()

    async def get(self, key: str) -> str | None:
        async with self.transaction() as conn:
            cursor = await conn.execute(
                "SELECT value FROM resolver_cache WHERE cache_key = ? AND expires_at > ?",
                (key, time.time()),
            )
            row = await cursor.fetchone()
        return row[0] if row else None

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        async with self.transaction() as conn:
            await conn.execute(
                """
                INSERT INTO resolver_cache (cache_key, value, expires_at)
                VALUES (?, ?, ?)
                ON CONFLICT(cache_key) DO UPDATE SET
                    value = excluded.value,
                    expires_at = excluded.expires_at
                """,
                (key, value, time.time() + ttl_seconds),
            )

    async def delete(self, key: str) -> bool:
        async with self.transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM resolver_cache WHERE cache_key = ?", (key,)
            )
            return cursor.rowcount > 0

    async def purge_expired(self) -> int:
        async with self.transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM resolver_cache WHERE expires_at <= ?", (time.time(),)
            )
            return cursor.rowcount

    async def close(self) -> None:
        if self._keepalive_conn is not None:
            try:
                await self._keepalive_conn.close()
            finally:
                self._keepalive_conn = None
        self._initialized = False
        logger.info(LogTemplates.CACHE_DB_CLOSED)
