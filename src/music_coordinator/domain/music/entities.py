"""Core domain entities for the music bounded context."""

from __future__ import annotations

import asyncio
import time

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from music_coordinator.domain.music.policies import DEFAULT_VOLUME_SCALAR
from music_coordinator.domain.music.value_objects import AudioFamily, PlaybackState
from music_coordinator.domain.shared.exceptions import (
    AlreadyBoundError,
    QueueEmptyError,
)
from music_coordinator.domain.shared.messages import ErrorMessages
from music_coordinator.domain.shared.types import (
    DiscordSnowflake,
    DurationSeconds,
    EpochSeconds,
    NonNegativeInt,
    VolumeScalar,
)
from music_coordinator.domain.voting.entities import VoteRecord


class StreamMetadata(BaseModel):
    """Immutable, playable description of a resolved reference."""

    model_config = ConfigDict(frozen=True)

    video_id: str
    title: str = "Unknown Title"
    thumbnail_url: str | None = None
    url: str
    # Empty means the item must be re-resolved before it can play.
    audiourl: str = ""
    audioformat: AudioFamily | None = None
    audiotype: int | None = None
    expires: EpochSeconds | None = None
    length: DurationSeconds | None = None

    @field_validator("video_id")
    @classmethod
    def _require_video_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError(ErrorMessages.EMPTY_VIDEO_ID)
        return v

    @property
    def is_playable(self) -> bool:
        return bool(self.audiourl)

    def is_expired(self, now: float | None = None) -> bool:
        if self.expires is None:
            return False
        current = time.time() if now is None else now
        return current >= self.expires

    def ttl_seconds(self, default: int, now: float | None = None) -> int:
        """Seconds until expiry, or ``default`` when unknown or already past."""
        if self.expires is None:
            return default
        current = time.time() if now is None else now
        remaining = int(self.expires - current)
        return remaining if remaining > 0 else default


class QueueItem(BaseModel):
    """A pending entry in a session queue."""

    model_config = ConfigDict(frozen=True)

    url: str
    metadata: StreamMetadata | None = None
    sequence: NonNegativeInt = 0

    @classmethod
    def from_metadata(cls, metadata: StreamMetadata) -> QueueItem:
        return cls(url=metadata.url, metadata=metadata)

    @property
    def title(self) -> str:
        return self.metadata.title if self.metadata else self.url


class PlaybackQueue(BaseModel):
    """Ordered pending items: FIFO, except play-now items go to the front."""

    items: list[QueueItem] = Field(default_factory=list)
    _next_sequence: int = PrivateAttr(default=0)

    def __len__(self) -> int:
        return len(self.items)

    def add(self, item: QueueItem, play_now: bool = False) -> QueueItem:
        stamped = item.model_copy(update={"sequence": self._next_sequence})
        self._next_sequence += 1
        if play_now:
            self.items.insert(0, stamped)
        else:
            self.items.append(stamped)
        return stamped

    def shift(self) -> QueueItem:
        """Remove and return the front item."""
        if not self.items:
            raise QueueEmptyError()
        return self.items.pop(0)

    def peek(self) -> QueueItem | None:
        return self.items[0] if self.items else None

    def clear(self) -> int:
        count = len(self.items)
        self.items.clear()
        return count

    def snapshot(self) -> list[QueueItem]:
        return list(self.items)


class GuildSession(BaseModel):
    """Aggregate root holding all playback state for one guild."""

    guild_id: DiscordSnowflake
    bound_channel_id: DiscordSnowflake | None = None
    queue: PlaybackQueue = Field(default_factory=PlaybackQueue)
    volume: VolumeScalar = DEFAULT_VOLUME_SCALAR
    votes: VoteRecord = Field(default_factory=VoteRecord)
    state: PlaybackState = PlaybackState.IDLE
    now_playing: StreamMetadata | None = None

    # Bumped whenever the session is torn down or unbound, so work that
    # started before can tell its result no longer applies.
    generation: NonNegativeInt = 0

    # Queue-front resolutions in flight. The session is not idle while one
    # is pending, even though nothing is streaming yet.
    resolving: NonNegativeInt = 0

    _lock: asyncio.Lock = PrivateAttr(default_factory=asyncio.Lock)

    @property
    def lock(self) -> asyncio.Lock:
        return self._lock

    @property
    def is_playing(self) -> bool:
        return self.state.is_playing

    @property
    def is_resolving(self) -> bool:
        return self.resolving > 0

    @property
    def is_idle(self) -> bool:
        return self.state == PlaybackState.IDLE

    def bind(self, channel_id: int) -> bool:
        """Bind to a text channel. Returns False when already bound to it."""
        if self.bound_channel_id is not None:
            if self.bound_channel_id == channel_id:
                return False
            raise AlreadyBoundError(self.guild_id, self.bound_channel_id)
        self.bound_channel_id = channel_id
        return True

    def unbind(self) -> None:
        self.bound_channel_id = None
        self.generation += 1

    def start_playback(self, metadata: StreamMetadata) -> None:
        self.now_playing = metadata
        self.state = PlaybackState.PLAYING

    def begin_resolution(self) -> None:
        self.resolving += 1

    def end_resolution(self) -> None:
        self.resolving = max(0, self.resolving - 1)

    def mark_idle(self) -> None:
        self.now_playing = None
        self.state = PlaybackState.IDLE

    def teardown(self) -> None:
        """Reset to a fresh, unbound, idle session."""
        self.queue.clear()
        self.votes.reset()
        self.mark_idle()
        self.bound_channel_id = None
        self.generation += 1
