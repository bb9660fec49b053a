"""
Unit Tests for the Application Services

Tests for PlaybackApplicationService:
- Enqueue on an idle session connects, binds and starts the head
- FIFO advance on natural end, skip, drained-queue teardown
- Pause / resume transitions
- Stop, error teardown and generation bumps
- Stale player events and stale stream openings are ignored
- Background event consumer

Tests for TrackResolutionService:
- Direct stream URLs, Spotify links and free-text search
- Failure reporting without fallback

Uses in-process fakes for the voice adapter, resolver and notifier.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
from conftest import (
    GUILD_ID,
    TEXT_CHANNEL_ID,
    TRACK_A,
    TRACK_B,
    TRACK_C,
    VOICE_CHANNEL_ID,
)

from discord_jukebox.application.services.playback_models import EnqueueStatus
from discord_jukebox.application.services.track_resolution import TrackResolutionService
from discord_jukebox.domain.music.events import PlayerEvent
from discord_jukebox.domain.music.value_objects import PlaybackState, TrackMetadata, TrackReference
from discord_jukebox.domain.shared.exceptions import (
    MetadataLookupFailedError,
    NothingPlayingError,
    NoSearchResultsError,
    NoVoiceChannelError,
    VoiceConnectionError,
)
from discord_jukebox.domain.shared.messages import DiscordUIMessages
from discord_jukebox.infrastructure.audio.ytdlp_resolver import YtDlpResolver


async def _settle(rounds: int = 5) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


# =============================================================================
# Enqueue
# =============================================================================


class TestEnqueue:
    async def test_first_track_connects_and_plays(
        self, enqueue, session_repository, voice_adapter, notifier
    ):
        """Enqueueing on an idle session should join voice and start the track."""
        result = await enqueue(TRACK_A)

        assert result.status == EnqueueStatus.STARTED
        assert result.started
        assert result.position == 0

        session = await session_repository.get(GUILD_ID)
        assert session.state == PlaybackState.PLAYING
        assert session.queue == [TRACK_A]
        assert session.text_channel_id == TEXT_CHANNEL_ID
        assert voice_adapter.joins == [(GUILD_ID, VOICE_CHANNEL_ID)]
        assert voice_adapter.player.played_tracks == [TRACK_A]
        assert notifier.messages == [(TEXT_CHANNEL_ID, DiscordUIMessages.ACTION_NOW_PLAYING)]

    async def test_second_track_is_queued_without_rejoining(
        self, enqueue, session_repository, voice_adapter, notifier
    ):
        await enqueue(TRACK_A)
        result = await enqueue(TRACK_B)

        assert result.status == EnqueueStatus.QUEUED
        assert result.position == 1
        assert result.queue_length == 2
        assert len(voice_adapter.joins) == 1
        assert voice_adapter.player.played_tracks == [TRACK_A]
        assert notifier.contents == [DiscordUIMessages.ACTION_NOW_PLAYING]

        session = await session_repository.get(GUILD_ID)
        assert session.queue == [TRACK_A, TRACK_B]

    async def test_no_voice_channel_rejected_before_state_changes(
        self, playback_service, session_repository, voice_adapter
    ):
        with pytest.raises(NoVoiceChannelError):
            await playback_service.enqueue(
                GUILD_ID, TRACK_A, voice_channel_id=None, text_channel_id=TEXT_CHANNEL_ID
            )

        assert await session_repository.get(GUILD_ID) is None
        assert voice_adapter.joins == []

    async def test_join_failure_leaves_session_idle(
        self, enqueue, session_repository, voice_adapter, notifier
    ):
        voice_adapter.join_error = VoiceConnectionError(channel_id=VOICE_CHANNEL_ID)

        with pytest.raises(VoiceConnectionError):
            await enqueue(TRACK_A)

        session = await session_repository.get(GUILD_ID)
        assert session.is_idle
        assert session.queue == []
        assert session.generation == 0
        assert notifier.messages == []

    async def test_join_failure_announces_dropped_queue(
        self, playback_service, enqueue, session_repository, voice_adapter, notifier
    ):
        """Tracks acknowledged while the join was pending are reported as dropped."""
        voice_adapter.join_gate = asyncio.Event()
        voice_adapter.join_error = VoiceConnectionError(channel_id=VOICE_CHANNEL_ID)

        first = asyncio.create_task(enqueue(TRACK_A))
        await _settle()
        queued = await enqueue(TRACK_B)
        assert queued.status == EnqueueStatus.QUEUED

        voice_adapter.join_gate.set()
        with pytest.raises(VoiceConnectionError):
            await first

        session = await session_repository.get(GUILD_ID)
        assert session.queue == []
        assert notifier.messages == [(TEXT_CHANNEL_ID, DiscordUIMessages.ERROR_QUEUE_DROPPED_NO_VOICE)]

    async def test_stale_generation_is_discarded(
        self, playback_service, enqueue, session_repository, voice_adapter
    ):
        """A request captured before a stop must not restart playback."""
        generation = await playback_service.current_generation(GUILD_ID)
        await enqueue(TRACK_A)
        await playback_service.stop(GUILD_ID)

        result = await enqueue(TRACK_B, expected_generation=generation)

        assert result.status == EnqueueStatus.DISCARDED
        session = await session_repository.get(GUILD_ID)
        assert session.is_idle
        assert len(voice_adapter.joins) == 1

    async def test_current_generation_accepted(self, playback_service, enqueue):
        generation = await playback_service.current_generation(GUILD_ID)

        result = await enqueue(TRACK_A, expected_generation=generation)

        assert result.status == EnqueueStatus.STARTED

    async def test_guilds_have_independent_sessions(
        self, playback_service, enqueue, voice_adapter
    ):
        other_guild = 444444444444444444
        await enqueue(TRACK_A)
        result = await playback_service.enqueue(
            other_guild, TRACK_B, voice_channel_id=555555555555555555, text_channel_id=TEXT_CHANNEL_ID
        )

        assert result.status == EnqueueStatus.STARTED
        assert len(voice_adapter.joins) == 2
        assert await playback_service.peek_queue(GUILD_ID) == (TRACK_A,)
        assert await playback_service.peek_queue(other_guild) == (TRACK_B,)


# =============================================================================
# Advancing
# =============================================================================


class TestAdvance:
    async def test_tracks_play_in_fifo_order(self, playback_service, enqueue, voice_adapter, notifier):
        for track in (TRACK_A, TRACK_B, TRACK_C):
            await enqueue(track)
        player = voice_adapter.player

        player.finish()
        await playback_service.process_pending_events()
        assert player.played_tracks == [TRACK_A, TRACK_B]

        player.finish()
        await playback_service.process_pending_events()
        assert player.played_tracks == [TRACK_A, TRACK_B, TRACK_C]
        assert await playback_service.peek_queue(GUILD_ID) == (TRACK_C,)

        player.finish()
        await playback_service.process_pending_events()
        assert notifier.contents[-1] == DiscordUIMessages.ACTION_FINISHED

    async def test_drained_queue_tears_down_without_bumping_generation(
        self, playback_service, enqueue, session_repository, voice_adapter, notifier
    ):
        await enqueue(TRACK_A)

        voice_adapter.player.finish()
        await playback_service.process_pending_events()

        session = await session_repository.get(GUILD_ID)
        assert session.is_idle
        assert session.state == PlaybackState.IDLE
        assert session.generation == 0
        assert voice_adapter.connection.destroyed
        assert notifier.contents == [
            DiscordUIMessages.ACTION_NOW_PLAYING,
            DiscordUIMessages.ACTION_FINISHED,
        ]

    async def test_enqueue_after_drain_reconnects(self, playback_service, enqueue, voice_adapter):
        await enqueue(TRACK_A)
        voice_adapter.player.finish()
        await playback_service.process_pending_events()

        result = await enqueue(TRACK_B)

        assert result.status == EnqueueStatus.STARTED
        assert len(voice_adapter.joins) == 2
        assert voice_adapter.player.played_tracks == [TRACK_B]

    async def test_stream_failure_on_advance_fails_session(
        self, playback_service, enqueue, resolver, session_repository, notifier
    ):
        resolver.failing_streams.add(TRACK_B.url)
        await enqueue(TRACK_A)
        await enqueue(TRACK_B)
        await enqueue(TRACK_C)

        session = await session_repository.get(GUILD_ID)
        session.player.finish()
        await playback_service.process_pending_events()

        assert session.is_idle
        assert session.generation == 1
        assert notifier.contents[-1] == DiscordUIMessages.ERROR_PLAYBACK_FAILED


# =============================================================================
# Controls
# =============================================================================


class TestSkip:
    async def test_skip_plays_next_track(self, playback_service, enqueue, voice_adapter, notifier):
        await enqueue(TRACK_A)
        await enqueue(TRACK_B)

        await playback_service.skip(GUILD_ID)
        await playback_service.process_pending_events()

        assert voice_adapter.player.played_tracks == [TRACK_A, TRACK_B]
        assert await playback_service.peek_queue(GUILD_ID) == (TRACK_B,)
        assert notifier.contents.count(DiscordUIMessages.ACTION_NOW_PLAYING) == 2

    async def test_skip_last_track_finishes(
        self, playback_service, enqueue, session_repository, notifier
    ):
        await enqueue(TRACK_A)

        await playback_service.skip(GUILD_ID)
        await playback_service.process_pending_events()

        session = await session_repository.get(GUILD_ID)
        assert session.is_idle
        assert notifier.contents[-1] == DiscordUIMessages.ACTION_FINISHED

    async def test_skip_without_session_raises(self, playback_service):
        with pytest.raises(NothingPlayingError):
            await playback_service.skip(GUILD_ID)

    async def test_skip_while_stream_is_loading(
        self, playback_service, enqueue, resolver, voice_adapter, session_repository
    ):
        """The loading head is skipped and its late stream is never played."""
        gate = asyncio.Event()
        resolver.stream_gates[TRACK_A.url] = gate

        first = asyncio.create_task(enqueue(TRACK_A))
        await _settle()
        await enqueue(TRACK_B)

        await playback_service.skip(GUILD_ID)
        await playback_service.process_pending_events()

        gate.set()
        result = await first

        assert result.status == EnqueueStatus.STARTED
        assert voice_adapter.player.played_tracks == [TRACK_B]
        session = await session_repository.get(GUILD_ID)
        assert session.queue == [TRACK_B]

    async def test_stream_landing_after_skip_is_not_played(
        self, playback_service, enqueue, resolver, voice_adapter, session_repository
    ):
        """A loading head that opens after a skip never reaches the player."""
        gate = asyncio.Event()
        resolver.stream_gates[TRACK_A.url] = gate

        first = asyncio.create_task(enqueue(TRACK_A))
        await _settle()
        await enqueue(TRACK_B)
        await enqueue(TRACK_C)

        await playback_service.skip(GUILD_ID)
        gate.set()
        await first
        await playback_service.process_pending_events()

        player = voice_adapter.player
        assert player.played_tracks == [TRACK_B]
        session = await session_repository.get(GUILD_ID)
        assert session.queue == [TRACK_B, TRACK_C]

        player.finish()
        await playback_service.process_pending_events()

        assert player.played_tracks == [TRACK_B, TRACK_C]
        assert session.queue == [TRACK_C]


class TestPauseResume:
    async def test_pause_then_resume(self, playback_service, enqueue, session_repository, voice_adapter):
        await enqueue(TRACK_A)
        await enqueue(TRACK_B)
        session = await session_repository.get(GUILD_ID)
        connection, player = session.connection, session.player

        await playback_service.pause(GUILD_ID)
        assert session.state == PlaybackState.PAUSED
        assert voice_adapter.player.state == "paused"
        assert session.queue == [TRACK_A, TRACK_B]

        await playback_service.resume(GUILD_ID)
        assert session.state == PlaybackState.PLAYING
        assert voice_adapter.player.state == "playing"
        assert session.queue == [TRACK_A, TRACK_B]
        assert session.connection is connection
        assert session.player is player
        assert len(voice_adapter.joins) == 1

    async def test_pause_twice_raises(self, playback_service, enqueue):
        await enqueue(TRACK_A)
        await playback_service.pause(GUILD_ID)

        with pytest.raises(NothingPlayingError):
            await playback_service.pause(GUILD_ID)

    async def test_resume_while_playing_raises(self, playback_service, enqueue):
        await enqueue(TRACK_A)

        with pytest.raises(NothingPlayingError):
            await playback_service.resume(GUILD_ID)

    @pytest.mark.parametrize("operation", ["pause", "resume", "stop", "skip"])
    async def test_controls_on_idle_guild_raise(self, playback_service, operation):
        with pytest.raises(NothingPlayingError):
            await getattr(playback_service, operation)(GUILD_ID)

    async def test_pause_while_stream_loading_raises(self, playback_service, enqueue, resolver):
        """Nothing is rendering yet, so there is nothing to pause."""
        gate = asyncio.Event()
        resolver.stream_gates[TRACK_A.url] = gate
        first = asyncio.create_task(enqueue(TRACK_A))
        await _settle()

        with pytest.raises(NothingPlayingError):
            await playback_service.pause(GUILD_ID)

        gate.set()
        await first


class TestStop:
    async def test_stop_clears_queue_and_leaves_voice(
        self, playback_service, enqueue, session_repository, voice_adapter, notifier
    ):
        await enqueue(TRACK_A)
        await enqueue(TRACK_B)

        result = await playback_service.stop(GUILD_ID)
        await playback_service.process_pending_events()

        assert result.tracks_cleared == 2
        session = await session_repository.get(GUILD_ID)
        assert session.is_idle
        assert session.generation == 1
        assert voice_adapter.connection.destroyed
        # The player's own IDLE after stop belongs to a released binding.
        assert notifier.contents == [DiscordUIMessages.ACTION_NOW_PLAYING]

    async def test_events_from_released_player_are_ignored(
        self, playback_service, enqueue, session_repository, voice_adapter
    ):
        await enqueue(TRACK_A)
        old_player = voice_adapter.player
        await playback_service.stop(GUILD_ID)
        await playback_service.process_pending_events()

        await enqueue(TRACK_B)
        old_player.finish()
        await playback_service.process_pending_events()

        session = await session_repository.get(GUILD_ID)
        assert session.queue == [TRACK_B]
        assert session.is_playing
        assert voice_adapter.player.played_tracks == [TRACK_B]

    async def test_stale_binding_event_dropped(self, playback_service, enqueue, session_repository):
        await enqueue(TRACK_A)
        await enqueue(TRACK_B)

        await playback_service.handle_event(PlayerEvent.idle(GUILD_ID, binding_id=99))

        session = await session_repository.get(GUILD_ID)
        assert session.queue == [TRACK_A, TRACK_B]


class TestPlaybackErrors:
    async def test_player_error_tears_down_session(
        self, playback_service, enqueue, session_repository, voice_adapter, notifier
    ):
        await enqueue(TRACK_A)
        await enqueue(TRACK_B)

        voice_adapter.player.fail(RuntimeError("decoder crashed"))
        await playback_service.process_pending_events()

        session = await session_repository.get(GUILD_ID)
        assert session.is_idle
        assert session.generation == 1
        assert voice_adapter.connection.destroyed
        assert notifier.contents[-1] == DiscordUIMessages.ERROR_PLAYBACK_FAILED

    async def test_stream_failure_on_first_track(
        self, enqueue, resolver, session_repository, voice_adapter, notifier
    ):
        resolver.failing_streams.add(TRACK_A.url)

        await enqueue(TRACK_A)

        session = await session_repository.get(GUILD_ID)
        assert session.is_idle
        assert voice_adapter.player.played == []
        assert notifier.contents == [DiscordUIMessages.ERROR_PLAYBACK_FAILED]


# =============================================================================
# Queue inspection and lifecycle
# =============================================================================


class TestQueueAndLifecycle:
    async def test_peek_queue_is_a_snapshot(self, playback_service, enqueue, session_repository):
        await enqueue(TRACK_A)
        snapshot = await playback_service.peek_queue(GUILD_ID)

        await enqueue(TRACK_B)

        assert snapshot == (TRACK_A,)
        assert await playback_service.peek_queue(GUILD_ID) == (TRACK_A, TRACK_B)

    async def test_peek_queue_unknown_guild(self, playback_service):
        assert await playback_service.peek_queue(GUILD_ID) == ()

    async def test_consumer_applies_posted_events(self, playback_service, enqueue, voice_adapter):
        playback_service.start()
        assert playback_service.is_consuming
        try:
            await enqueue(TRACK_A)
            await enqueue(TRACK_B)
            voice_adapter.player.finish()

            for _ in range(50):
                if voice_adapter.player.played_tracks == [TRACK_A, TRACK_B]:
                    break
                await asyncio.sleep(0)

            assert voice_adapter.player.played_tracks == [TRACK_A, TRACK_B]
        finally:
            await playback_service.stop_consumer()

        assert not playback_service.is_consuming

    async def test_start_twice_keeps_single_consumer(self, playback_service):
        playback_service.start()
        first = playback_service._consumer
        playback_service.start()

        assert playback_service._consumer is first
        await playback_service.stop_consumer()

    async def test_shutdown_releases_active_sessions(
        self, playback_service, enqueue, session_repository, voice_adapter
    ):
        await enqueue(TRACK_A)

        await playback_service.shutdown()

        session = await session_repository.get(GUILD_ID)
        assert session.is_idle
        assert voice_adapter.connection.destroyed


# =============================================================================
# TrackResolutionService
# =============================================================================


@pytest.fixture
def metadata_service():
    service = AsyncMock()
    service.get_track_metadata = AsyncMock(return_value=TrackMetadata("Rick Astley", "Never Gonna Give You Up"))
    return service


@pytest.fixture
def search_service():
    service = AsyncMock()
    service.search_by_keyword = AsyncMock(return_value="dQw4w9WgXcQ")
    return service


@pytest.fixture
def track_resolution(metadata_service, search_service):
    return TrackResolutionService(
        metadata_service=metadata_service,
        search_service=search_service,
        streaming_service=YtDlpResolver(),
    )


class TestTrackResolutionService:
    async def test_direct_url_used_unchanged(self, track_resolution, search_service):
        url = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

        track = await track_resolution.resolve(f"  {url} ")

        assert track == TrackReference(url)
        search_service.search_by_keyword.assert_not_awaited()

    async def test_spotify_link_searches_artist_and_title(
        self, track_resolution, metadata_service, search_service
    ):
        track = await track_resolution.resolve("https://open.spotify.com/track/4uLU6hMCjMI75M1A2tKUQC?si=x")

        metadata_service.get_track_metadata.assert_awaited_once_with("4uLU6hMCjMI75M1A2tKUQC")
        search_service.search_by_keyword.assert_awaited_once_with("Rick Astley - Never Gonna Give You Up")
        assert track.url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

    async def test_spotify_lookup_failure_does_not_fall_back(
        self, track_resolution, metadata_service, search_service
    ):
        metadata_service.get_track_metadata.side_effect = MetadataLookupFailedError(track_id="abc")

        with pytest.raises(MetadataLookupFailedError):
            await track_resolution.resolve("spotify:track:abc")

        search_service.search_by_keyword.assert_not_awaited()

    async def test_spotify_search_without_results(self, track_resolution, search_service):
        search_service.search_by_keyword.return_value = None

        with pytest.raises(NoSearchResultsError):
            await track_resolution.resolve("https://open.spotify.com/track/4uLU6hMCjMI75M1A2tKUQC")

    async def test_free_text_search(self, track_resolution, search_service, metadata_service):
        track = await track_resolution.resolve("never gonna give you up")

        search_service.search_by_keyword.assert_awaited_once_with("never gonna give you up")
        metadata_service.get_track_metadata.assert_not_awaited()
        assert track.url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

    async def test_free_text_without_results(self, track_resolution, search_service):
        search_service.search_by_keyword.return_value = None

        with pytest.raises(NoSearchResultsError) as exc_info:
            await track_resolution.resolve("zzzz no such song")

        assert exc_info.value.message == DiscordUIMessages.ERROR_NO_SEARCH_RESULTS

    async def test_resolving_a_result_again_is_stable(self, track_resolution):
        first = await track_resolution.resolve("never gonna give you up")

        second = await track_resolution.resolve(first.url)

        assert second == first

    async def test_open_audio_stream_delegates(self, metadata_service, search_service):
        streaming = AsyncMock()
        streaming.is_stream_url = lambda text: False
        resolution = TrackResolutionService(
            metadata_service=metadata_service,
            search_service=search_service,
            streaming_service=streaming,
        )

        await resolution.open_audio_stream(TRACK_A)

        streaming.open_audio_stream.assert_awaited_once_with(TRACK_A)
