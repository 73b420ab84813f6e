import asyncio

import pytest
import pytest_asyncio

from music_coordinator.application.interfaces.cache_store import CacheStore
from music_coordinator.application.interfaces.media_backend import MediaBackend
from music_coordinator.application.interfaces.permissions import PermissionChecker
from music_coordinator.application.interfaces.voice_adapter import VoiceAdapter
from music_coordinator.domain.music.entities import StreamMetadata
from music_coordinator.domain.music.media_info import RawFormat, RawMediaInfo
from music_coordinator.domain.music.value_objects import AudioFamily

GUILD_ID = 111111111111111111
OTHER_GUILD_ID = 222222222222222222
TEXT_CHANNEL_ID = 333333333333333333
OTHER_TEXT_CHANNEL_ID = 444444444444444444
VOICE_CHANNEL_ID = 555555555555555555
BOT_ID = 999999999999999999
USER_ID = 123456789012345678


# ============================================================================
# Port fakes
# ============================================================================


class FakeVoiceAdapter(VoiceAdapter):
    """In-memory player that behaves like discord.py's VoiceClient.

    Stopping or skipping a playing stream schedules the track-end callback
    on the loop, the same way FFmpeg's after-callback does.
    """

    def __init__(self, bot_user_id: int = BOT_ID) -> None:
        self._bot_user_id = bot_user_id
        self.playing: dict[int, StreamMetadata] = {}
        self.plays: list[tuple[int, StreamMetadata, float]] = []
        self.stops: list[tuple[int, bool]] = []
        self.skips: list[tuple[int, int]] = []
        self.connects: list[tuple[int, int]] = []
        self.disconnects: list[int] = []
        self.members: dict[int, list[int]] = {}
        self.connect_error: Exception | None = None
        self.play_error: Exception | None = None
        self._callback = None
        self._pending: list[asyncio.Task] = []

    @property
    def bot_user_id(self) -> int:
        return self._bot_user_id

    async def connect(self, guild_id: int, channel_id: int) -> None:
        if self.connect_error is not None:
            raise self.connect_error
        self.connects.append((guild_id, channel_id))

    async def disconnect(self, guild_id: int) -> None:
        self.disconnects.append(guild_id)

    async def play(self, guild_id: int, metadata: StreamMetadata, volume: float) -> None:
        if self.play_error is not None:
            raise self.play_error
        assert guild_id not in self.playing, "play() called while a stream is active"
        self.playing[guild_id] = metadata
        self.plays.append((guild_id, metadata, volume))

    async def stop(self, guild_id: int, immediate: bool = False) -> None:
        self.stops.append((guild_id, immediate))
        self._end(guild_id)

    async def skip(self, guild_id: int, channel_id: int) -> None:
        self.skips.append((guild_id, channel_id))
        self._end(guild_id)

    def is_playing(self, guild_id: int) -> bool:
        return guild_id in self.playing

    def get_member_ids(self, channel_id: int) -> list[int]:
        return list(self.members.get(channel_id, [self._bot_user_id, USER_ID]))

    def set_on_track_end_callback(self, callback) -> None:
        self._callback = callback

    def _end(self, guild_id: int) -> None:
        if self.playing.pop(guild_id, None) is not None and self._callback is not None:
            self._pending.append(asyncio.get_running_loop().create_task(self._callback(guild_id)))

    async def finish(self, guild_id: int) -> None:
        """Simulate the current stream running out on its own."""
        self._end(guild_id)
        await self.drain()

    async def drain(self) -> None:
        while self._pending:
            pending, self._pending = self._pending, []
            await asyncio.gather(*pending)


class FakeMediaBackend(MediaBackend):
    def __init__(self, info: RawMediaInfo | None = None, error: Exception | None = None) -> None:
        self.info = info
        self.error = error
        self.calls: list[str] = []

    async def fetch_info(self, reference: str) -> RawMediaInfo:
        self.calls.append(reference)
        if self.error is not None:
            raise self.error
        return self.info


class DictCacheStore(CacheStore):
    """Plain dict store recording the TTLs it was given."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self.data[key] = value
        self.ttls[key] = ttl_seconds

    async def delete(self, key: str) -> bool:
        self.ttls.pop(key, None)
        return self.data.pop(key, None) is not None


class AllowAllPermissions(PermissionChecker):
    def __init__(self, allowed: bool = True) -> None:
        self.allowed = allowed
        self.calls: list[tuple] = []

    def has_capability(self, guild_id, actor_id, channel_id, *capabilities) -> bool:
        self.calls.append((guild_id, actor_id, channel_id, capabilities))
        return self.allowed


# ============================================================================
# Domain Fixtures
# ============================================================================


def make_metadata(video_id: str = "dQw4w9WgXcQ", **overrides) -> StreamMetadata:
    data = {
        "video_id": video_id,
        "title": f"Track {video_id}",
        "url": f"https://www.youtube.com/watch?v={video_id}",
        "audiourl": f"https://rr1.googlevideo.com/videoplayback?id={video_id}&itag=251",
        "audioformat": AudioFamily.WEBM,
        "audiotype": 251,
        "expires": None,
        "length": 212,
    }
    data.update(overrides)
    return StreamMetadata(**data)


def make_info(video_id: str = "dQw4w9WgXcQ", formats=None, **overrides) -> RawMediaInfo:
    if formats is None:
        formats = [
            RawFormat(itag=251, audio_bitrate=160, container="webm",
                      url="https://rr1.googlevideo.com/videoplayback?itag=251&expire=1900000000"),
            RawFormat(itag=140, audio_bitrate=128, container="mp4",
                      url="https://rr1.googlevideo.com/videoplayback?itag=140&expire=1900000000"),
        ]
    data = {
        "video_id": video_id,
        "title": "Never Gonna Give You Up",
        "thumbnail_url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/hqdefault.jpg",
        "length_seconds": 212,
        "formats": formats,
    }
    data.update(overrides)
    return RawMediaInfo(**data)


@pytest.fixture
def sample_metadata():
    """A playable, resolved item."""
    return make_metadata()


@pytest.fixture
def voice_adapter():
    return FakeVoiceAdapter()


@pytest.fixture
def permissions():
    return AllowAllPermissions()


@pytest.fixture
def cache_store():
    return DictCacheStore()


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def session_registry():
    from music_coordinator.application.services.session_registry import SessionRegistry

    return SessionRegistry()


@pytest.fixture
def queue_service(session_registry):
    from music_coordinator.application.services.queue_service import QueueService

    return QueueService(session_registry=session_registry)


@pytest_asyncio.fixture
async def sqlite_cache_store(tmp_path):
    """A SQLite cache store backed by a temporary file."""
    from music_coordinator.infrastructure.cache.sqlite_store import SQLiteCacheStore

    store = SQLiteCacheStore(str(tmp_path / "cache" / "resolver.db"))
    await store.initialize()
    yield store
    await store.close()
