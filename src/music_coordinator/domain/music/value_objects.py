"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from enum import Enum


class PlaybackState(Enum):
    """Per-session playback state.

    State transitions:
    - IDLE -> PLAYING (an item starts)
    - PLAYING -> PLAYING (stale metadata re-resolved and replayed)
    - PLAYING -> IDLE (item ended, stop, bot left alone, teardown)
    """

    IDLE = "idle"
    PLAYING = "playing"

    @property
    def is_playing(self) -> bool:
        return self == PlaybackState.PLAYING


class AudioFamily(Enum):
    """Container family of the chosen audio stream.

    Recorded on resolved metadata and in resolution logs. FFmpeg detects the
    container itself, so playback does not branch on it.
    """

    WEBM = "webm"
    MP4 = "mp4"


class Capability(Enum):
    """Voice capabilities the bot needs in the target channel."""

    VOICE_CONNECT = "voiceConnect"
    VOICE_SPEAK = "voiceSpeak"
