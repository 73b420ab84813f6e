"""Port interface for voice connection and player operations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from music_coordinator.domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ...domain.music.entities import StreamMetadata


class VoiceAdapter(ABC):
    """Interface for voice channel connection and playback."""

    @property
    @abstractmethod
    def bot_user_id(self) -> DiscordSnowflake:
        ...

    @abstractmethod
    async def connect(self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake) -> None:
        """Join a voice channel. Raises on failure."""
        ...

    @abstractmethod
    async def disconnect(self, guild_id: DiscordSnowflake) -> None:
        ...

    @abstractmethod
    async def play(
        self, guild_id: DiscordSnowflake, metadata: "StreamMetadata", volume: float
    ) -> None:
        """Start streaming ``metadata.audiourl`` at the given volume multiplier."""
        ...

    @abstractmethod
    async def stop(self, guild_id: DiscordSnowflake, immediate: bool = False) -> None:
        """Stop the active stream; ``immediate`` also drops any buffered audio."""
        ...

    @abstractmethod
    async def skip(self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake) -> None:
        """End the current stream so the track-end callback advances the queue."""
        ...

    @abstractmethod
    def is_playing(self, guild_id: DiscordSnowflake) -> bool:
        ...

    @abstractmethod
    def get_member_ids(self, channel_id: DiscordSnowflake) -> list[DiscordSnowflake]:
        """Member IDs present in a voice channel, the bot included."""
        ...

    @abstractmethod
    def set_on_track_end_callback(
        self,
        callback: Callable[[DiscordSnowflake], Awaitable[None]],
    ) -> None:
        """Set callback for when a track ends."""
        ...
