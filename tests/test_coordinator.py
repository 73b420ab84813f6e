"""
Unit Tests for PlaybackCoordinator

Tests for:
- connect: channel validation, binding, permissions, connect failures
- add / queue_song: admission limits and the Idle/Playing routing
- play: bot-alone rule, dead items, stale resolutions, stop-before-play
- handle_track_end: auto-advance and suppression after our own stops
- set_volume, stop, leave
"""

import asyncio
import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from conftest import (
    BOT_ID,
    GUILD_ID,
    OTHER_TEXT_CHANNEL_ID,
    TEXT_CHANNEL_ID,
    USER_ID,
    VOICE_CHANNEL_ID,
    make_metadata,
)
from music_coordinator.application.services.coordinator import PlaybackCoordinator
from music_coordinator.domain.music.entities import QueueItem
from music_coordinator.domain.music.value_objects import Capability
from music_coordinator.domain.shared.exceptions import (
    AlreadyBoundError,
    InvalidChannelError,
    InvalidURLError,
    NoPermissionError,
    NoSongsError,
    ResolutionFailedError,
    TooLongError,
    ValidationError,
    VoiceConnectionError,
)

URL_A = "https://www.youtube.com/watch?v=aaaaaaaaaaa"
URL_B = "https://www.youtube.com/watch?v=bbbbbbbbbbb"
URL_C = "https://www.youtube.com/watch?v=ccccccccccc"

META_A = make_metadata("aaaaaaaaaaa")
META_B = make_metadata("bbbbbbbbbbb")
META_C = make_metadata("ccccccccccc")
BY_URL = {URL_A: META_A, URL_B: META_B, URL_C: META_C}


@pytest.fixture
def resolver():
    """Resolver mock mapping canonical URLs to their metadata."""
    mock = AsyncMock()

    async def resolve(url, fetch_all=False):
        return BY_URL[url]

    mock.resolve = AsyncMock(side_effect=resolve)
    return mock


@pytest.fixture
def coordinator(session_registry, queue_service, resolver, voice_adapter, permissions):
    return PlaybackCoordinator(
        session_registry=session_registry,
        queue_service=queue_service,
        resolver=resolver,
        voice_adapter=voice_adapter,
        permission_checker=permissions,
    )


def played_ids(voice_adapter):
    return [meta.video_id for _, meta, _ in voice_adapter.plays]


def hold_resolution(resolver, held_url):
    """Make resolving ``held_url`` block until the returned release event is set."""
    resolving = asyncio.Event()
    release = asyncio.Event()

    async def resolve(url, fetch_all=False):
        if url == held_url:
            resolving.set()
            await release.wait()
        return BY_URL[url]

    resolver.resolve.side_effect = resolve
    return resolving, release


def queued_urls(session_registry):
    return [item.url for item in session_registry.get(GUILD_ID).queue.snapshot()]


# =============================================================================
# Connect Tests
# =============================================================================


class TestConnect:
    """Unit tests for PlaybackCoordinator.connect."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "guild_id,text_id,voice_id",
        [
            (GUILD_ID, TEXT_CHANNEL_ID, None),
            (GUILD_ID, None, VOICE_CHANNEL_ID),
            (None, TEXT_CHANNEL_ID, VOICE_CHANNEL_ID),
        ],
    )
    async def test_missing_target_raises_invalid_channel(
        self, coordinator, voice_adapter, guild_id, text_id, voice_id
    ):
        with pytest.raises(InvalidChannelError):
            await coordinator.connect(guild_id, text_id, voice_id)

        assert voice_adapter.connects == []

    @pytest.mark.asyncio
    async def test_connect_binds_and_joins(self, coordinator, voice_adapter, permissions):
        await coordinator.connect(GUILD_ID, TEXT_CHANNEL_ID, VOICE_CHANNEL_ID)

        assert coordinator.get_bound_channel(GUILD_ID) == TEXT_CHANNEL_ID
        assert voice_adapter.connects == [(GUILD_ID, VOICE_CHANNEL_ID)]
        guild_id, actor_id, channel_id, caps = permissions.calls[0]
        assert (guild_id, actor_id, channel_id) == (GUILD_ID, BOT_ID, VOICE_CHANNEL_ID)
        assert set(caps) == {Capability.VOICE_CONNECT, Capability.VOICE_SPEAK}

    @pytest.mark.asyncio
    async def test_reconnect_same_channel_is_allowed(self, coordinator, voice_adapter):
        await coordinator.connect(GUILD_ID, TEXT_CHANNEL_ID, VOICE_CHANNEL_ID)
        await coordinator.connect(GUILD_ID, TEXT_CHANNEL_ID, VOICE_CHANNEL_ID)

        assert len(voice_adapter.connects) == 2

    @pytest.mark.asyncio
    async def test_bound_elsewhere_raises(self, coordinator, voice_adapter):
        coordinator.bind_channel(GUILD_ID, TEXT_CHANNEL_ID)

        with pytest.raises(AlreadyBoundError):
            await coordinator.connect(GUILD_ID, OTHER_TEXT_CHANNEL_ID, VOICE_CHANNEL_ID)

        assert voice_adapter.connects == []
        assert coordinator.get_bound_channel(GUILD_ID) == TEXT_CHANNEL_ID

    @pytest.mark.asyncio
    async def test_missing_permission_raises_and_does_not_bind(
        self, coordinator, voice_adapter, permissions
    ):
        permissions.allowed = False

        with pytest.raises(NoPermissionError):
            await coordinator.connect(GUILD_ID, TEXT_CHANNEL_ID, VOICE_CHANNEL_ID)

        assert coordinator.get_bound_channel(GUILD_ID) is None
        assert voice_adapter.connects == []

    @pytest.mark.asyncio
    async def test_connect_failure_releases_binding(self, coordinator, voice_adapter, caplog):
        """A failed join should log with context and leave the guild unbound."""
        voice_adapter.connect_error = TimeoutError("gateway timeout")

        with caplog.at_level(logging.ERROR):
            with pytest.raises(VoiceConnectionError) as exc_info:
                await coordinator.connect(GUILD_ID, TEXT_CHANNEL_ID, VOICE_CHANNEL_ID)

        assert exc_info.value.code == "error"
        assert isinstance(exc_info.value.__cause__, TimeoutError)
        assert coordinator.get_bound_channel(GUILD_ID) is None
        assert any(
            str(GUILD_ID) in r.getMessage() and str(VOICE_CHANNEL_ID) in r.getMessage()
            for r in caplog.records
            if r.levelno == logging.ERROR
        )
        assert any(getattr(r, "guild_id", None) == GUILD_ID for r in caplog.records)

    @pytest.mark.asyncio
    async def test_connect_failure_keeps_previous_binding(self, coordinator, voice_adapter):
        coordinator.bind_channel(GUILD_ID, TEXT_CHANNEL_ID)
        voice_adapter.connect_error = RuntimeError("boom")

        with pytest.raises(VoiceConnectionError):
            await coordinator.connect(GUILD_ID, TEXT_CHANNEL_ID, VOICE_CHANNEL_ID)

        assert coordinator.get_bound_channel(GUILD_ID) == TEXT_CHANNEL_ID


class TestBinding:
    def test_bind_unbind_roundtrip(self, coordinator):
        coordinator.bind_channel(GUILD_ID, TEXT_CHANNEL_ID)
        coordinator.bind_channel(GUILD_ID, TEXT_CHANNEL_ID)
        assert coordinator.get_bound_channel(GUILD_ID) == TEXT_CHANNEL_ID

        coordinator.unbind_channel(GUILD_ID)
        assert coordinator.get_bound_channel(GUILD_ID) is None

    def test_bind_other_channel_raises(self, coordinator):
        coordinator.bind_channel(GUILD_ID, TEXT_CHANNEL_ID)

        with pytest.raises(AlreadyBoundError):
            coordinator.bind_channel(GUILD_ID, OTHER_TEXT_CHANNEL_ID)


# =============================================================================
# Admission Tests
# =============================================================================


class TestAdd:
    """Unit tests for PlaybackCoordinator.add and queue_song."""

    @pytest.mark.asyncio
    async def test_idle_add_plays_immediately(self, coordinator, voice_adapter, queue_service):
        """Adding while idle should start playback without growing the queue."""
        before = queue_service.length(GUILD_ID)

        result = await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A)

        assert result == META_A
        assert played_ids(voice_adapter) == ["aaaaaaaaaaa"]
        assert queue_service.length(GUILD_ID) == before
        assert coordinator.is_playing(GUILD_ID)
        assert coordinator.now_playing(GUILD_ID) == META_A

    @pytest.mark.asyncio
    async def test_playing_add_appends(self, coordinator, voice_adapter, queue_service):
        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A)

        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_B)

        assert queue_service.length(GUILD_ID) == 1
        assert played_ids(voice_adapter) == ["aaaaaaaaaaa"]
        assert queue_service.items(GUILD_ID)[0].url == META_B.url

    @pytest.mark.asyncio
    async def test_concurrent_adds_play_only_once(self, coordinator, voice_adapter, queue_service):
        """Two adds racing on an idle session must not both start playback."""
        await asyncio.gather(
            coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A),
            coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_B),
        )

        assert len(voice_adapter.plays) == 1
        assert queue_service.length(GUILD_ID) == 1

    @pytest.mark.asyncio
    async def test_uses_session_volume(self, coordinator, voice_adapter):
        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A)

        assert voice_adapter.plays[0][2] == 2.0

    @pytest.mark.asyncio
    async def test_too_long_rejected(self, coordinator, resolver, voice_adapter, queue_service):
        resolver.resolve.side_effect = None
        resolver.resolve.return_value = make_metadata("aaaaaaaaaaa", length=5401)

        with pytest.raises(TooLongError) as exc_info:
            await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A)

        assert exc_info.value.code == "tooLong"
        assert voice_adapter.plays == []
        assert queue_service.length(GUILD_ID) == 0

    @pytest.mark.asyncio
    async def test_exact_limit_accepted(self, coordinator, resolver, voice_adapter):
        resolver.resolve.side_effect = None
        resolver.resolve.return_value = make_metadata("aaaaaaaaaaa", length=5400)

        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A)

        assert len(voice_adapter.plays) == 1

    @pytest.mark.asyncio
    async def test_custom_duration_limit(
        self, session_registry, queue_service, resolver, voice_adapter, permissions
    ):
        coordinator = PlaybackCoordinator(
            session_registry=session_registry,
            queue_service=queue_service,
            resolver=resolver,
            voice_adapter=voice_adapter,
            permission_checker=permissions,
            max_duration_seconds=60,
        )

        with pytest.raises(TooLongError):
            await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reference", [42, None, {"title": "x"}, {"url": 5}, ["url"], "  <>  "])
    async def test_invalid_reference(self, coordinator, resolver, reference):
        with pytest.raises(InvalidURLError) as exc_info:
            await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, reference)

        assert exc_info.value.code == "invalidURL"
        resolver.resolve.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "reference",
        [
            {"url": URL_A},
            SimpleNamespace(url=URL_A),
            f"<{URL_A}>",
            f"  {URL_A} ",
        ],
    )
    async def test_reference_forms_accepted(self, coordinator, resolver, reference):
        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, reference)

        resolver.resolve.assert_awaited_once_with(URL_A)

    @pytest.mark.asyncio
    async def test_resolver_errors_propagate(self, coordinator, resolver):
        resolver.resolve.side_effect = ResolutionFailedError(URL_A, "403")

        with pytest.raises(ResolutionFailedError):
            await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A)

    @pytest.mark.asyncio
    async def test_idle_queue_song_without_stream_resolves_first(
        self, coordinator, voice_adapter, resolver
    ):
        """Metadata without audiourl should be re-resolved before it plays."""
        stale = make_metadata("bbbbbbbbbbb", audiourl="")

        await coordinator.queue_song(GUILD_ID, VOICE_CHANNEL_ID, stale)

        resolver.resolve.assert_awaited_once_with(URL_B)
        assert played_ids(voice_adapter) == ["bbbbbbbbbbb"]
        assert voice_adapter.plays[0][1].is_playable


# =============================================================================
# Play Tests
# =============================================================================


class TestPlay:
    """Unit tests for PlaybackCoordinator.play."""

    @pytest.mark.asyncio
    async def test_empty_queue_raises_no_songs(self, coordinator):
        with pytest.raises(NoSongsError) as exc_info:
            await coordinator.play(GUILD_ID, VOICE_CHANNEL_ID)

        assert exc_info.value.code == "noSongs"

    @pytest.mark.asyncio
    async def test_resolves_front_item(self, coordinator, queue_service, voice_adapter):
        queue_service.add(GUILD_ID, QueueItem(url=URL_B))
        queue_service.add(GUILD_ID, QueueItem(url=URL_C))

        result = await coordinator.play(GUILD_ID, VOICE_CHANNEL_ID)

        assert result == META_B
        assert played_ids(voice_adapter) == ["bbbbbbbbbbb"]
        assert queue_service.length(GUILD_ID) == 1

    @pytest.mark.asyncio
    async def test_supplied_metadata_plays_directly(
        self, coordinator, queue_service, resolver, voice_adapter
    ):
        queue_service.add(GUILD_ID, QueueItem.from_metadata(META_A))

        await coordinator.play(GUILD_ID, VOICE_CHANNEL_ID, META_A)

        resolver.resolve.assert_not_called()
        assert played_ids(voice_adapter) == ["aaaaaaaaaaa"]
        assert queue_service.length(GUILD_ID) == 0

    @pytest.mark.asyncio
    async def test_bot_alone_stops_and_idles(
        self, coordinator, queue_service, voice_adapter, session_registry
    ):
        """With only the bot left in the channel nothing should play."""
        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A)
        queue_service.add(GUILD_ID, QueueItem(url=URL_B))
        voice_adapter.members[VOICE_CHANNEL_ID] = [BOT_ID]

        result = await coordinator.play(GUILD_ID, VOICE_CHANNEL_ID)
        await voice_adapter.drain()

        assert result is None
        assert voice_adapter.stops == [(GUILD_ID, True)]
        assert session_registry.get(GUILD_ID).is_idle
        assert played_ids(voice_adapter) == ["aaaaaaaaaaa"]
        assert queue_service.length(GUILD_ID) == 1

    @pytest.mark.asyncio
    async def test_lone_human_is_not_bot_alone(self, coordinator, queue_service, voice_adapter):
        voice_adapter.members[VOICE_CHANNEL_ID] = [USER_ID]
        queue_service.add(GUILD_ID, QueueItem(url=URL_A))

        assert await coordinator.play(GUILD_ID, VOICE_CHANNEL_ID) == META_A

    @pytest.mark.asyncio
    async def test_stops_active_stream_before_playing(
        self, coordinator, queue_service, voice_adapter
    ):
        """A manual play while playing should stop first and not double-advance."""
        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A)
        queue_service.add(GUILD_ID, QueueItem(url=URL_B))
        queue_service.add(GUILD_ID, QueueItem(url=URL_C))

        await coordinator.play(GUILD_ID, VOICE_CHANNEL_ID)
        await voice_adapter.drain()

        assert voice_adapter.stops == [(GUILD_ID, False)]
        assert played_ids(voice_adapter) == ["aaaaaaaaaaa", "bbbbbbbbbbb"]
        assert queue_service.length(GUILD_ID) == 1
        assert coordinator.now_playing(GUILD_ID) == META_B

    @pytest.mark.asyncio
    async def test_dead_item_clears_queue(self, coordinator, queue_service, resolver, voice_adapter):
        """An item resolving without audio should drop the queue and end in NoSongs."""
        resolver.resolve.side_effect = None
        resolver.resolve.return_value = make_metadata("bbbbbbbbbbb", audiourl="")
        for url in (URL_A, URL_B, URL_C):
            queue_service.add(GUILD_ID, QueueItem(url=url))

        with pytest.raises(NoSongsError):
            await coordinator.play(GUILD_ID, VOICE_CHANNEL_ID)

        assert queue_service.length(GUILD_ID) == 0
        assert voice_adapter.plays == []
        assert resolver.resolve.await_count == 1

    @pytest.mark.asyncio
    async def test_stale_resolution_is_discarded(
        self, coordinator, queue_service, resolver, voice_adapter, session_registry
    ):
        """A session torn down mid-resolution must not start playing."""
        queue_service.add(GUILD_ID, QueueItem(url=URL_A))

        async def resolve_and_destroy(url, fetch_all=False):
            session_registry.destroy(GUILD_ID)
            return META_A

        resolver.resolve.side_effect = resolve_and_destroy

        assert await coordinator.play(GUILD_ID, VOICE_CHANNEL_ID) is None
        assert voice_adapter.plays == []

    @pytest.mark.asyncio
    async def test_unbind_mid_resolution_is_discarded(
        self, coordinator, queue_service, resolver, voice_adapter
    ):
        coordinator.bind_channel(GUILD_ID, TEXT_CHANNEL_ID)
        queue_service.add(GUILD_ID, QueueItem(url=URL_A))

        async def resolve_and_unbind(url, fetch_all=False):
            coordinator.unbind_channel(GUILD_ID)
            return META_A

        resolver.resolve.side_effect = resolve_and_unbind

        assert await coordinator.play(GUILD_ID, VOICE_CHANNEL_ID) is None
        assert voice_adapter.plays == []

    @pytest.mark.asyncio
    async def test_player_failure_leaves_session_idle(
        self, coordinator, voice_adapter, session_registry
    ):
        voice_adapter.play_error = RuntimeError("ffmpeg missing")

        with pytest.raises(RuntimeError):
            await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A)

        assert session_registry.get(GUILD_ID).is_idle


# =============================================================================
# Auto-advance Tests
# =============================================================================


class TestTrackEnd:
    """Unit tests for PlaybackCoordinator.handle_track_end."""

    @pytest.mark.asyncio
    async def test_advances_to_next_item(self, coordinator, voice_adapter, queue_service):
        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A)
        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_B)

        await voice_adapter.finish(GUILD_ID)

        assert played_ids(voice_adapter) == ["aaaaaaaaaaa", "bbbbbbbbbbb"]
        assert queue_service.length(GUILD_ID) == 0

    @pytest.mark.asyncio
    async def test_add_during_advance_waits_its_turn(
        self, coordinator, voice_adapter, queue_service, resolver, session_registry
    ):
        """An add landing while the next item resolves is queued behind it."""
        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A)
        queue_service.add(GUILD_ID, QueueItem(url=URL_B))
        resolving, release = hold_resolution(resolver, URL_B)

        advance = asyncio.create_task(voice_adapter.finish(GUILD_ID))
        await resolving.wait()
        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_C)
        release.set()
        await advance

        assert played_ids(voice_adapter) == ["aaaaaaaaaaa", "bbbbbbbbbbb"]
        assert queued_urls(session_registry) == [URL_C]
        assert coordinator.now_playing(GUILD_ID) == META_B
        assert not session_registry.get(GUILD_ID).is_resolving

        await voice_adapter.finish(GUILD_ID)

        assert played_ids(voice_adapter)[-1] == "ccccccccccc"

    @pytest.mark.asyncio
    async def test_late_callback_does_not_cut_active_stream(
        self, coordinator, voice_adapter, queue_service, session_registry
    ):
        """A track-end that arrives after a new stream began leaves the queue alone."""
        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A)
        queue_service.add(GUILD_ID, QueueItem(url=URL_B))

        await coordinator.handle_track_end(GUILD_ID)

        assert played_ids(voice_adapter) == ["aaaaaaaaaaa"]
        assert voice_adapter.stops == []
        assert queued_urls(session_registry) == [URL_B]

    @pytest.mark.asyncio
    async def test_stream_started_during_resolution_keeps_item_queued(
        self, coordinator, voice_adapter, queue_service, resolver, session_registry
    ):
        queue_service.add(GUILD_ID, QueueItem(url=URL_B))
        queue_service.add(GUILD_ID, QueueItem(url=URL_C))
        resolving, release = hold_resolution(resolver, URL_B)

        pending = asyncio.create_task(coordinator.play(GUILD_ID, VOICE_CHANNEL_ID))
        await resolving.wait()
        await coordinator.play(GUILD_ID, VOICE_CHANNEL_ID, META_C)
        release.set()

        assert await pending is None
        assert played_ids(voice_adapter) == ["ccccccccccc"]
        assert queued_urls(session_registry) == [URL_B]
        assert voice_adapter.stops == []

    @pytest.mark.asyncio
    async def test_goes_idle_when_queue_empty(self, coordinator, voice_adapter, session_registry):
        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A)

        await voice_adapter.finish(GUILD_ID)

        assert session_registry.get(GUILD_ID).is_idle
        assert len(voice_adapter.plays) == 1

    @pytest.mark.asyncio
    async def test_clears_votes(self, coordinator, voice_adapter, session_registry):
        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A)
        session_registry.get(GUILD_ID).votes.add_vote(USER_ID)

        await voice_adapter.finish(GUILD_ID)

        assert session_registry.get(GUILD_ID).votes.voters == set()

    @pytest.mark.asyncio
    async def test_advance_failure_is_logged(self, coordinator, voice_adapter, resolver, caplog):
        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A)
        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_B)
        resolver.resolve.side_effect = ResolutionFailedError(URL_B, "gone")

        with caplog.at_level(logging.ERROR):
            await voice_adapter.finish(GUILD_ID)

        failures = [r for r in caplog.records if "Auto-advance failed" in r.getMessage()]
        assert failures
        assert failures[0].guild_id == GUILD_ID

    @pytest.mark.asyncio
    async def test_unknown_guild_is_ignored(self, coordinator, voice_adapter):
        await coordinator.handle_track_end(GUILD_ID)

        assert voice_adapter.plays == []


# =============================================================================
# Control Tests
# =============================================================================


class TestVolume:
    """Unit tests for PlaybackCoordinator.set_volume."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("percent,expected", [(50, 1.0), ("75", 1.5), (0, 0.0), (100, 2.0)])
    async def test_stores_scalar(self, coordinator, session_registry, percent, expected):
        assert await coordinator.set_volume(GUILD_ID, percent) == pytest.approx(expected)
        assert session_registry.get(GUILD_ID).volume == pytest.approx(expected)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("percent", ["loud", None, -5, "1.5"])
    async def test_rejects_invalid(self, coordinator, percent):
        with pytest.raises(ValidationError):
            await coordinator.set_volume(GUILD_ID, percent)

    @pytest.mark.asyncio
    async def test_applies_on_next_play(self, coordinator, voice_adapter):
        await coordinator.set_volume(GUILD_ID, 50)

        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A)

        assert voice_adapter.plays[0][2] == pytest.approx(1.0)


class TestStopAndLeave:
    @pytest.mark.asyncio
    async def test_stop_clears_queue_without_advancing(
        self, coordinator, voice_adapter, queue_service, session_registry
    ):
        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A)
        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_B)

        assert await coordinator.stop(GUILD_ID) is True
        await voice_adapter.drain()

        assert queue_service.length(GUILD_ID) == 0
        assert len(voice_adapter.plays) == 1
        assert session_registry.get(GUILD_ID).is_idle
        assert not coordinator.is_playing(GUILD_ID)

    @pytest.mark.asyncio
    async def test_stop_unknown_guild(self, coordinator):
        assert await coordinator.stop(GUILD_ID) is False

    @pytest.mark.asyncio
    async def test_leave_disconnects_and_forgets(
        self, coordinator, voice_adapter, session_registry
    ):
        await coordinator.connect(GUILD_ID, TEXT_CHANNEL_ID, VOICE_CHANNEL_ID)
        await coordinator.add(GUILD_ID, VOICE_CHANNEL_ID, URL_A)

        await coordinator.leave(GUILD_ID)
        await voice_adapter.drain()

        assert voice_adapter.stops == [(GUILD_ID, True)]
        assert voice_adapter.disconnects == [GUILD_ID]
        assert GUILD_ID not in session_registry
        assert coordinator.get_bound_channel(GUILD_ID) is None
        assert coordinator.now_playing(GUILD_ID) is None
