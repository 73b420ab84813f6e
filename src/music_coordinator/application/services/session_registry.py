"""Session Registry - owns every guild's playback session."""

from __future__ import annotations

import asyncio
import logging

from ...domain.music.entities import GuildSession
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import DiscordSnowflake

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Maps guild IDs to their sessions.

    Sessions are created lazily on first bind or first add and removed on
    ``destroy``. Every mutation of a session's state must happen while
    holding ``lock(guild_id)``; sessions of different guilds never share a
    lock.
    """

    def __init__(self, *, default_volume: float | None = None) -> None:
        self._sessions: dict[DiscordSnowflake, GuildSession] = {}
        self._default_volume = default_volume

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, guild_id: DiscordSnowflake) -> GuildSession | None:
        return self._sessions.get(guild_id)

    def get_or_create(self, guild_id: DiscordSnowflake) -> GuildSession:
        session = self._sessions.get(guild_id)
        if session is None:
            if self._default_volume is None:
                session = GuildSession(guild_id=guild_id)
            else:
                session = GuildSession(guild_id=guild_id, volume=self._default_volume)
            self._sessions[guild_id] = session
            logger.debug(LogTemplates.SESSION_CREATED, guild_id)
        return session

    def lock(self, guild_id: DiscordSnowflake) -> asyncio.Lock:
        return self.get_or_create(guild_id).lock

    def bind(self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake) -> None:
        """Bind a guild to a text channel.

        Rebinding the same channel is a no-op; binding a different channel
        while one is bound raises ``AlreadyBoundError``. Permissions are not
        checked here.
        """
        if self.get_or_create(guild_id).bind(channel_id):
            logger.info(LogTemplates.CHANNEL_BOUND, guild_id, channel_id)

    def unbind(self, guild_id: DiscordSnowflake) -> None:
        session = self._sessions.get(guild_id)
        if session is None or session.bound_channel_id is None:
            return
        session.unbind()
        logger.info(LogTemplates.CHANNEL_UNBOUND, guild_id)

    def get_bound_channel(self, guild_id: DiscordSnowflake) -> DiscordSnowflake | None:
        session = self._sessions.get(guild_id)
        return session.bound_channel_id if session else None

    def destroy(self, guild_id: DiscordSnowflake) -> bool:
        """Tear a session down and forget it. Returns False if none existed."""
        session = self._sessions.pop(guild_id, None)
        if session is None:
            return False
        session.teardown()
        logger.info(LogTemplates.SESSION_DESTROYED, guild_id)
        return True

    def active_guild_ids(self) -> list[DiscordSnowflake]:
        return list(self._sessions)
