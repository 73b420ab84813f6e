"""Discord adapters for voice playback and channel permissions."""

from music_coordinator.infrastructure.discord.permissions import DiscordPermissionChecker
from music_coordinator.infrastructure.discord.voice_adapter import DiscordVoiceAdapter

__all__ = [
    "DiscordPermissionChecker",
    "DiscordVoiceAdapter",
]
