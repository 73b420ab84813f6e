"""Playback Coordinator - the per-guild Idle/Playing state machine."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, cast

from ...domain.music.entities import QueueItem, StreamMetadata
from ...domain.music.policies import (
    MAX_DURATION_SECONDS,
    REQUIRED_VOICE_CAPABILITIES,
    is_bot_alone,
    strip_reference,
    volume_scalar,
)
from ...domain.shared.exceptions import (
    AlreadyBoundError,
    InvalidChannelError,
    InvalidURLError,
    NoPermissionError,
    NoSongsError,
    TooLongError,
    ValidationError,
    VoiceConnectionError,
)
from ...domain.shared.messages import ErrorMessages, LogTemplates
from ...domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ...domain.music.entities import GuildSession
    from ..interfaces.permissions import PermissionChecker
    from ..interfaces.voice_adapter import VoiceAdapter
    from .queue_service import QueueService
    from .resolver_service import ReferenceResolver
    from .session_registry import SessionRegistry

logger = logging.getLogger(__name__)


class PlaybackCoordinator:
    """Decides when items start, queue up, advance and stop.

    Each guild's state is only touched while holding that guild's session
    lock. Resolution runs with the lock released; when it returns, the lock
    is retaken and the session generation compared so a result for a
    session that was torn down or unbound meanwhile is dropped.
    """

    def __init__(
        self,
        *,
        session_registry: SessionRegistry,
        queue_service: QueueService,
        resolver: ReferenceResolver,
        voice_adapter: VoiceAdapter,
        permission_checker: PermissionChecker,
        max_duration_seconds: int = MAX_DURATION_SECONDS,
    ) -> None:
        self._registry = session_registry
        self._queue = queue_service
        self._resolver = resolver
        self._voice = voice_adapter
        self._permissions = permission_checker
        self._max_duration = max_duration_seconds

        # Voice channel each guild last played in, used for auto-advance.
        self._voice_channels: dict[DiscordSnowflake, DiscordSnowflake] = {}

        # Stopping a stream ourselves still fires the player's track-end
        # callback. Suppress the next one per guild to avoid double-advancing.
        self._ignore_next_track_end: set[DiscordSnowflake] = set()

        self._voice.set_on_track_end_callback(self.handle_track_end)

    # === Channel binding ===

    def bind_channel(self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake) -> None:
        self._registry.bind(guild_id, channel_id)

    def unbind_channel(self, guild_id: DiscordSnowflake) -> None:
        self._registry.unbind(guild_id)

    def get_bound_channel(self, guild_id: DiscordSnowflake) -> DiscordSnowflake | None:
        return self._registry.get_bound_channel(guild_id)

    # === Connect ===

    async def connect(
        self,
        guild_id: DiscordSnowflake | None,
        text_channel_id: DiscordSnowflake | None,
        voice_channel_id: DiscordSnowflake | None,
    ) -> None:
        """Bind the guild to a text channel and join the voice channel.

        Raises:
            InvalidChannelError: A channel is missing or the text channel has no guild.
            AlreadyBoundError: The guild is bound to another text channel.
            NoPermissionError: The bot cannot connect to or speak in the channel.
            VoiceConnectionError: The voice backend failed to connect.
        """
        if not voice_channel_id or not text_channel_id or not guild_id:
            raise InvalidChannelError()

        session = self._registry.get_or_create(guild_id)
        async with session.lock:
            bound = session.bound_channel_id
            if bound is not None and bound != text_channel_id:
                raise AlreadyBoundError(guild_id, bound)

            if not self._permissions.has_capability(
                guild_id, self._voice.bot_user_id, voice_channel_id, *REQUIRED_VOICE_CAPABILITIES
            ):
                raise NoPermissionError(tuple(c.value for c in REQUIRED_VOICE_CAPABILITIES))

            newly_bound = bound is None
            self._registry.bind(guild_id, text_channel_id)

        logger.info(LogTemplates.VOICE_CONNECTING, voice_channel_id, guild_id)
        try:
            await self._voice.connect(guild_id, voice_channel_id)
        except Exception as exc:
            logger.error(
                LogTemplates.VOICE_CONNECT_FAILED,
                voice_channel_id,
                guild_id,
                exc,
                extra={"guild_id": guild_id},
            )
            if newly_bound:
                async with session.lock:
                    if session.bound_channel_id == text_channel_id:
                        self._registry.unbind(guild_id)
            raise VoiceConnectionError(guild_id, voice_channel_id, str(exc)) from exc

        self._voice_channels[guild_id] = voice_channel_id

    # === Admission ===

    async def add(
        self, guild_id: DiscordSnowflake, voice_channel_id: DiscordSnowflake, reference: Any
    ) -> StreamMetadata:
        """Validate, resolve and admit a user-submitted reference.

        Raises:
            InvalidURLError: The reference is not a string or has no string ``url``.
            TooLongError: The resolved item exceeds the duration limit.
            ResolutionFailedError, NoMediaFoundError, NoPlayableAudioError:
                From the resolver.
        """
        url = strip_reference(self._coerce_reference(reference))
        if not url:
            raise InvalidURLError()

        metadata = cast(StreamMetadata, await self._resolver.resolve(url))
        if metadata.length and metadata.length > self._max_duration:
            raise TooLongError(metadata.length, self._max_duration)

        return await self.queue_song(guild_id, voice_channel_id, metadata)

    @staticmethod
    def _coerce_reference(reference: Any) -> str:
        if isinstance(reference, Mapping):
            reference = reference.get("url")
        elif not isinstance(reference, str):
            reference = getattr(reference, "url", None)
        if not isinstance(reference, str):
            raise InvalidURLError()
        return reference

    async def queue_song(
        self,
        guild_id: DiscordSnowflake,
        voice_channel_id: DiscordSnowflake,
        metadata: StreamMetadata,
    ) -> StreamMetadata:
        """Start the item now when idle, otherwise append it to the queue."""
        session = self._registry.get_or_create(guild_id)
        self._voice_channels[guild_id] = voice_channel_id
        item = QueueItem.from_metadata(metadata)

        async with session.lock:
            if self._is_active(session):
                self._queue.add(guild_id, item)
                logger.info(LogTemplates.QUEUED, metadata.title, guild_id, len(session.queue))
                return metadata

            self._queue.add(guild_id, item, play_now=True)
            if metadata.is_playable:
                self._queue.shift(guild_id)
                logger.info(LogTemplates.PLAY_NOW, metadata.title, guild_id)
                await self._start_stream(session, metadata)
                return metadata

        # No stream URL yet: resolve whatever is at the front.
        await self._play(guild_id, voice_channel_id, advancing=True)
        return metadata

    # === Play ===

    async def play(
        self,
        guild_id: DiscordSnowflake,
        voice_channel_id: DiscordSnowflake,
        metadata: StreamMetadata | None = None,
    ) -> StreamMetadata | None:
        """Pop the front item and play it.

        When ``metadata`` is given it is played as-is; otherwise the item's
        URL is resolved first. An item that resolves without playable audio
        drops the whole queue, after which the next pass raises
        ``NoSongsError``.

        Returns:
            The metadata now playing, or None when playback was abandoned
            (bot left alone in the channel, the session changed while
            resolving, or another stream started meanwhile).

        Raises:
            NoSongsError: The queue is empty.
        """
        return await self._play(guild_id, voice_channel_id, metadata)

    async def _play(
        self,
        guild_id: DiscordSnowflake,
        voice_channel_id: DiscordSnowflake,
        metadata: StreamMetadata | None = None,
        *,
        advancing: bool = False,
    ) -> StreamMetadata | None:
        session = self._registry.get_or_create(guild_id)
        self._voice_channels[guild_id] = voice_channel_id
        remaining: int | None = None

        while True:
            async with session.lock:
                # An advance only fills an idle player; whatever started in
                # the meantime will advance again when it ends.
                if advancing and self._is_active(session):
                    logger.debug(LogTemplates.ADVANCE_NOT_NEEDED, guild_id)
                    return None

                members = self._voice.get_member_ids(voice_channel_id)
                if is_bot_alone(members, self._voice.bot_user_id):
                    logger.info(LogTemplates.BOT_ALONE, voice_channel_id, guild_id)
                    await self._stop_active(guild_id, immediate=True)
                    session.mark_idle()
                    return None

                if not len(session.queue):
                    raise NoSongsError(guild_id)
                if remaining is None:
                    remaining = len(session.queue)

                item = self._queue.shift(guild_id)
                if metadata is not None:
                    await self._start_stream(session, metadata)
                    return metadata
                generation = session.generation
                replacing = self._is_streaming(session)
                session.begin_resolution()

            try:
                resolved = cast("StreamMetadata | None", await self._resolver.resolve(item.url))
            except BaseException:
                session.end_resolution()
                raise

            async with session.lock:
                session.end_resolution()
                if session.generation != generation or self._registry.get(guild_id) is not session:
                    logger.info(LogTemplates.STALE_RESOLUTION, item.url, guild_id)
                    return None

                if resolved is None or not resolved.is_playable:
                    logger.warning(LogTemplates.DEAD_ITEM, guild_id, item.title)
                    self._queue.remove(guild_id)
                    remaining -= 1
                    if remaining <= 0:
                        raise NoSongsError(guild_id)
                    continue

                if not replacing and self._is_streaming(session):
                    self._queue.add(guild_id, QueueItem.from_metadata(resolved), play_now=True)
                    logger.info(LogTemplates.REQUEUED_BEHIND_ACTIVE, resolved.title, guild_id)
                    return None

                await self._start_stream(session, resolved)
                return resolved

    async def _start_stream(self, session: GuildSession, metadata: StreamMetadata) -> None:
        """Hand metadata to the player. Caller must hold the session lock."""
        guild_id = session.guild_id
        if self._voice.is_playing(guild_id):
            logger.info(LogTemplates.STOP_BEFORE_PLAY, guild_id)
            await self._stop_active(guild_id)

        try:
            await self._voice.play(guild_id, metadata, session.volume)
        except Exception:
            session.mark_idle()
            raise

        session.start_playback(metadata)
        session.votes.reset()
        logger.info(LogTemplates.PLAYBACK_STARTED, metadata.title, guild_id, session.volume)

    async def _stop_active(self, guild_id: DiscordSnowflake, immediate: bool = False) -> None:
        """Stop the player. Caller must hold the session lock."""
        was_playing = self._voice.is_playing(guild_id)
        if was_playing:
            self._ignore_next_track_end.add(guild_id)
        try:
            await self._voice.stop(guild_id, immediate=immediate)
        except Exception:
            self._ignore_next_track_end.discard(guild_id)
            raise

    def _is_streaming(self, session: GuildSession) -> bool:
        return session.is_playing or self._voice.is_playing(session.guild_id)

    def _is_active(self, session: GuildSession) -> bool:
        return session.is_resolving or self._is_streaming(session)

    # === Auto-advance ===

    async def handle_track_end(self, guild_id: DiscordSnowflake) -> None:
        """Player callback: the current stream finished on its own or was skipped."""
        if guild_id in self._ignore_next_track_end:
            self._ignore_next_track_end.discard(guild_id)
            logger.debug(LogTemplates.TRACK_END_SUPPRESSED, guild_id)
            return

        session = self._registry.get(guild_id)
        if session is None:
            return

        logger.debug(LogTemplates.TRACK_ENDED, guild_id)
        async with session.lock:
            session.mark_idle()
            session.votes.reset()
            has_next = len(session.queue) > 0
            channel_id = self._voice_channels.get(guild_id)

        if not has_next or channel_id is None:
            logger.info(LogTemplates.QUEUE_FINISHED, guild_id)
            return

        try:
            await self._play(guild_id, channel_id, advancing=True)
        except Exception:
            logger.exception(
                LogTemplates.AUTO_ADVANCE_FAILED, guild_id, extra={"guild_id": guild_id}
            )

    # === Control ===

    async def set_volume(self, guild_id: DiscordSnowflake, percent: int | str) -> float:
        """Store ``percent * 2 / 100`` as the guild's volume; applied on next play."""
        try:
            value = int(percent)
        except (TypeError, ValueError) as exc:
            raise ValidationError(ErrorMessages.INVALID_VOLUME, field="volume") from exc
        if value < 0:
            raise ValidationError(ErrorMessages.INVALID_VOLUME, field="volume")

        session = self._registry.get_or_create(guild_id)
        async with session.lock:
            session.volume = volume_scalar(value)
        logger.info(LogTemplates.VOLUME_SET, guild_id, session.volume)
        return session.volume

    async def stop(self, guild_id: DiscordSnowflake) -> bool:
        """Drop the queue and stop the player. Returns False if there was no session."""
        session = self._registry.get(guild_id)
        if session is None:
            return False

        async with session.lock:
            session.queue.clear()
            session.votes.reset()
            await self._stop_active(guild_id)
            session.mark_idle()
        logger.info(LogTemplates.PLAYBACK_STOPPED, guild_id)
        return True

    async def leave(self, guild_id: DiscordSnowflake) -> None:
        """Stop, disconnect and forget the guild's session."""
        session = self._registry.get(guild_id)
        if session is not None:
            async with session.lock:
                try:
                    await self._stop_active(guild_id, immediate=True)
                    await self._voice.disconnect(guild_id)
                except Exception:
                    logger.debug(LogTemplates.VOICE_CLEANUP_ERROR, guild_id, exc_info=True)
                self._registry.destroy(guild_id)

        self._voice_channels.pop(guild_id, None)
        self._ignore_next_track_end.discard(guild_id)

    # === Queries ===

    def is_playing(self, guild_id: DiscordSnowflake) -> bool:
        session = self._registry.get(guild_id)
        return session is not None and session.is_playing

    def now_playing(self, guild_id: DiscordSnowflake) -> StreamMetadata | None:
        session = self._registry.get(guild_id)
        return session.now_playing if session else None
