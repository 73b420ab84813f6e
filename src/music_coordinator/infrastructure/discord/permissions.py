"""PermissionChecker backed by discord.py channel permission overwrites."""

from __future__ import annotations

import logging

import discord

from music_coordinator.application.interfaces.permissions import PermissionChecker
from music_coordinator.domain.music.value_objects import Capability
from music_coordinator.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

CAPABILITY_FLAGS: dict[Capability, str] = {
    Capability.VOICE_CONNECT: "connect",
    Capability.VOICE_SPEAK: "speak",
}


class DiscordPermissionChecker(PermissionChecker):
    def __init__(self, bot: discord.Client) -> None:
        self._bot = bot

    def has_capability(
        self, guild_id: int, actor_id: int, channel_id: int, *capabilities: Capability
    ) -> bool:
        guild = self._bot.get_guild(guild_id)
        if guild is None:
            return False

        member = guild.get_member(actor_id)
        channel = guild.get_channel(channel_id)
        if member is None or channel is None:
            return False

        perms = channel.permissions_for(member)
        missing = [c for c in capabilities if not getattr(perms, CAPABILITY_FLAGS[c], False)]
        if missing:
            logger.debug(
                LogTemplates.PERMISSION_MISSING,
                actor_id,
                ", ".join(c.value for c in missing),
                channel_id,
            )
        return not missing
