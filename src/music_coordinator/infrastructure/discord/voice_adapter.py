"""Discord voice adapter implementing VoiceAdapter for connection and playback."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

import discord

from music_coordinator.application.interfaces.voice_adapter import VoiceAdapter
from music_coordinator.config.settings import AudioSettings
from music_coordinator.domain.shared.exceptions import (
    InvalidChannelError,
    NoPlayableAudioError,
    NotConnectedError,
)
from music_coordinator.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.music.entities import StreamMetadata

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT: float = 10.0
MAX_VOLUME: float = 2.0


class DiscordVoiceAdapter(VoiceAdapter):
    def __init__(self, bot: discord.Client, settings: AudioSettings | None = None) -> None:
        self._bot = bot
        self._settings = settings or AudioSettings()
        self._ffmpeg_options = self._settings.ffmpeg_options
        self._on_track_end: Callable[[int], Awaitable[None]] | None = None

    @property
    def bot_user_id(self) -> int:
        user = self._bot.user
        if user is None:
            raise RuntimeError("Bot user is not available before login")
        return user.id

    def _get_voice_client(self, guild_id: int) -> discord.VoiceClient | None:
        guild = self._bot.get_guild(guild_id)
        if not guild:
            return None

        vc = guild.voice_client
        return vc if isinstance(vc, discord.VoiceClient) else None

    def _get_voice_channel(
        self, channel_id: int
    ) -> discord.VoiceChannel | discord.StageChannel | None:
        channel = self._bot.get_channel(channel_id)
        if isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            return channel
        return None

    async def connect(self, guild_id: int, channel_id: int) -> None:
        """Join ``channel_id``, moving an existing connection if needed."""
        guild = self._bot.get_guild(guild_id)
        if not guild:
            logger.warning(LogTemplates.GUILD_NOT_FOUND, guild_id)
            raise InvalidChannelError()

        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(LogTemplates.CHANNEL_NOT_VOICE, channel_id)
            raise InvalidChannelError()

        vc = self._get_voice_client(guild_id)
        async with asyncio.timeout(CONNECT_TIMEOUT):
            if vc and vc.is_connected():
                if vc.channel and vc.channel.id == channel_id:
                    return
                await vc.move_to(channel)
            else:
                await channel.connect(self_deaf=True)

        logger.info(LogTemplates.VOICE_CONNECTED, channel_id, guild_id)

    async def disconnect(self, guild_id: int) -> None:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return

        await vc.disconnect(force=True)
        logger.info(LogTemplates.VOICE_DISCONNECTED, guild_id)

    async def play(self, guild_id: int, metadata: StreamMetadata, volume: float) -> None:
        vc = self._get_voice_client(guild_id)
        if not vc:
            logger.warning(LogTemplates.VOICE_NOT_CONNECTED, guild_id)
            raise NotConnectedError(guild_id)

        if not metadata.audiourl:
            logger.error(LogTemplates.PLAYER_NO_STREAM_URL, metadata.title)
            raise NoPlayableAudioError(metadata.url)

        source = discord.FFmpegPCMAudio(
            metadata.audiourl,
            before_options=self._ffmpeg_options.get("before_options", ""),
            options=self._ffmpeg_options.get("options", ""),
        )
        volume_source = discord.PCMVolumeTransformer(source, volume=min(volume, MAX_VOLUME))

        def after_callback(error: Exception | None = None) -> None:
            if error:
                logger.warning(LogTemplates.PLAYER_ERROR, guild_id, error)

            # FFmpeg's reader thread; hop back onto the bot's event loop.
            asyncio.run_coroutine_threadsafe(
                self._handle_track_end(guild_id),
                self._bot.loop,
            )

        vc.play(volume_source, after=after_callback)

    async def stop(self, guild_id: int, immediate: bool = False) -> None:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return

        if vc.is_playing() or vc.is_paused():
            vc.stop()
            logger.debug(LogTemplates.PLAYBACK_STOPPED, guild_id)

        if immediate and vc.source is not None:
            vc.source.cleanup()

    async def skip(self, guild_id: int, channel_id: int) -> None:
        # Ending the source fires the after-callback, which advances the queue.
        vc = self._get_voice_client(guild_id)
        if vc and (vc.is_playing() or vc.is_paused()):
            vc.stop()

    def is_playing(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        return vc is not None and vc.is_playing()

    def get_member_ids(self, channel_id: int) -> list[int]:
        channel = self._get_voice_channel(channel_id)
        if channel is None:
            return []
        return [member.id for member in channel.members]

    def set_on_track_end_callback(self, callback: Callable[[int], Awaitable[None]]) -> None:
        self._on_track_end = callback

    async def _handle_track_end(self, guild_id: int) -> None:
        if self._on_track_end is None:
            logger.warning(LogTemplates.PLAYER_NO_CALLBACK, guild_id)
            return

        try:
            await self._on_track_end(guild_id)
        except Exception as e:
            logger.error(LogTemplates.PLAYER_CALLBACK_ERROR, guild_id, e)
