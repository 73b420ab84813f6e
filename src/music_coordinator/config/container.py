"""Dependency Injection Container

Owns the coordinator's dependency graph. Components are created on demand
and cached for reuse; the session registry in particular is built once per
container, never as a module-level singleton.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    import discord

    from ..application.interfaces.cache_store import CacheStore
    from ..application.interfaces.media_backend import MediaBackend
    from ..application.interfaces.permissions import PermissionChecker
    from ..application.interfaces.voice_adapter import VoiceAdapter
    from ..application.services.coordinator import PlaybackCoordinator
    from ..application.services.queue_service import QueueService
    from ..application.services.resolver_service import ReferenceResolver
    from ..application.services.session_registry import SessionRegistry
    from ..application.services.skip_vote_service import SkipVoteService
    from ..infrastructure.cache.cleanup import CacheCleanupJob
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Ports may be supplied up front (``Container(settings, _voice_adapter=...)``);
    anything left unset is built lazily from the settings.
    """

    settings: Settings
    _bot: discord.Client | None = None

    # Infrastructure adapters
    _cache_store: CacheStore | None = None
    _media_backend: MediaBackend | None = None
    _voice_adapter: VoiceAdapter | None = None
    _permission_checker: PermissionChecker | None = None

    # Application services
    _session_registry: SessionRegistry | None = None
    _queue_service: QueueService | None = None
    _resolver: ReferenceResolver | None = None
    _coordinator: PlaybackCoordinator | None = None
    _skip_vote_service: SkipVoteService | None = None

    # Background jobs
    _cache_cleanup_job: CacheCleanupJob | None = None

    def set_bot(self, bot: discord.Client) -> None:
        """Set the Discord client the voice adapters talk to."""
        self._bot = bot

    @property
    def bot(self) -> discord.Client:
        if self._bot is None:
            raise RuntimeError("Bot not initialized. Call set_bot() first.")
        return self._bot

    # === Infrastructure ===

    @property
    def cache_store(self) -> CacheStore:
        if self._cache_store is None:
            if self.settings.cache.backend == "sqlite":
                from ..infrastructure.cache.sqlite_store import SQLiteCacheStore

                self._cache_store = SQLiteCacheStore(self.settings.cache.sqlite_path)
            else:
                from ..infrastructure.cache.memory_store import MemoryCacheStore

                self._cache_store = MemoryCacheStore(max_entries=self.settings.cache.max_entries)
        return self._cache_store

    @property
    def media_backend(self) -> MediaBackend:
        if self._media_backend is None:
            from ..infrastructure.audio.ytdlp_backend import YtDlpBackend

            self._media_backend = YtDlpBackend(self.settings.ytdlp)
        return self._media_backend

    @property
    def voice_adapter(self) -> VoiceAdapter:
        if self._voice_adapter is None:
            from ..infrastructure.discord.voice_adapter import DiscordVoiceAdapter

            self._voice_adapter = DiscordVoiceAdapter(self.bot, self.settings.audio)
        return self._voice_adapter

    @property
    def permission_checker(self) -> PermissionChecker:
        if self._permission_checker is None:
            from ..infrastructure.discord.permissions import DiscordPermissionChecker

            self._permission_checker = DiscordPermissionChecker(self.bot)
        return self._permission_checker

    # === Application Services ===

    @property
    def session_registry(self) -> SessionRegistry:
        if self._session_registry is None:
            from ..application.services.session_registry import SessionRegistry

            self._session_registry = SessionRegistry(
                default_volume=self.settings.audio.default_volume,
            )
        return self._session_registry

    @property
    def queue_service(self) -> QueueService:
        if self._queue_service is None:
            from ..application.services.queue_service import QueueService

            self._queue_service = QueueService(session_registry=self.session_registry)
        return self._queue_service

    @property
    def resolver(self) -> ReferenceResolver:
        if self._resolver is None:
            from ..application.services.resolver_service import ReferenceResolver

            self._resolver = ReferenceResolver(
                backend=self.media_backend,
                cache=self.cache_store,
                key_prefix=self.settings.cache.key_prefix,
                default_ttl_seconds=self.settings.cache.default_ttl_seconds,
                expiry_margin_seconds=self.settings.audio.expiry_margin_seconds,
            )
        return self._resolver

    @property
    def coordinator(self) -> PlaybackCoordinator:
        """Get the playback coordinator (registers the track-end callback on first use)."""
        if self._coordinator is None:
            from ..application.services.coordinator import PlaybackCoordinator

            self._coordinator = PlaybackCoordinator(
                session_registry=self.session_registry,
                queue_service=self.queue_service,
                resolver=self.resolver,
                voice_adapter=self.voice_adapter,
                permission_checker=self.permission_checker,
                max_duration_seconds=self.settings.audio.max_duration_seconds,
            )
        return self._coordinator

    @property
    def skip_vote_service(self) -> SkipVoteService:
        if self._skip_vote_service is None:
            from ..application.services.skip_vote_service import SkipVoteService

            self._skip_vote_service = SkipVoteService(
                session_registry=self.session_registry,
                voice_adapter=self.voice_adapter,
                skip_quorum=self.settings.voting.skip_quorum,
                small_audience_size=self.settings.voting.small_audience_size,
            )
        return self._skip_vote_service

    # === Background Jobs ===

    @property
    def cache_cleanup_job(self) -> CacheCleanupJob:
        if self._cache_cleanup_job is None:
            from ..infrastructure.cache.cleanup import CacheCleanupJob

            self._cache_cleanup_job = CacheCleanupJob(
                self.cache_store,
                interval_seconds=self.settings.cache.purge_interval_seconds,
            )
        return self._cache_cleanup_job

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Initialize async resources and background jobs."""
        initialize = getattr(self.cache_store, "initialize", None)
        if initialize is not None:
            await initialize()

        await self.cache_cleanup_job.run_cleanup()
        if self.settings.cache.purge_interval_seconds > 0:
            self.cache_cleanup_job.start()

        _ = self.coordinator

    async def shutdown(self) -> None:
        """Leave every active session and release resources."""
        if self._coordinator is not None and self._session_registry is not None:
            for guild_id in self._session_registry.active_guild_ids():
                try:
                    await self._coordinator.leave(guild_id)
                except Exception as exc:
                    logger.warning(LogTemplates.SHUTDOWN_LEAVE_FAILED, guild_id, exc)

        if self._cache_cleanup_job is not None:
            await self._cache_cleanup_job.stop()

        close = getattr(self._cache_store, "close", None)
        if close is not None:
            await close()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
