"""
Music Bounded Context

Domain logic for stream metadata, queues, sessions and format selection.
"""

from music_coordinator.domain.music.entities import (
    GuildSession,
    PlaybackQueue,
    QueueItem,
    StreamMetadata,
)
from music_coordinator.domain.music.format_selection import SelectedAudio, select_best_audio
from music_coordinator.domain.music.media_info import RawFormat, RawMediaInfo
from music_coordinator.domain.music.value_objects import AudioFamily, Capability, PlaybackState

__all__ = [
    # Entities
    "GuildSession",
    "PlaybackQueue",
    "QueueItem",
    "StreamMetadata",
    # Value Objects
    "AudioFamily",
    "Capability",
    "PlaybackState",
    "RawFormat",
    "RawMediaInfo",
    "SelectedAudio",
    # Services
    "select_best_audio",
]
