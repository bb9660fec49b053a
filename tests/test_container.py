"""
Unit Tests for Dependency Injection Container

Tests for:
- Container initialization with settings
- Lazy initialization (properties create instances on first access)
- Caching (subsequent property access returns same instance)
- Bot instance management (set_bot, bot property, error when not set)
- Wiring of the resolver, playback service and handlers
- Lifecycle methods (initialize, shutdown)
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from discord_jukebox.application.commands.play_track import PlayTrackHandler
from discord_jukebox.application.queries.get_queue import GetQueueHandler
from discord_jukebox.application.services.playback_service import PlaybackApplicationService
from discord_jukebox.application.services.track_resolution import TrackResolutionService
from discord_jukebox.config.container import Container, create_container
from discord_jukebox.config.settings import Settings
from discord_jukebox.infrastructure.audio.ytdlp_resolver import YtDlpResolver
from discord_jukebox.infrastructure.discord.adapters.channel_notifier import DiscordChannelNotifier
from discord_jukebox.infrastructure.discord.adapters.voice_adapter import DiscordVoiceAdapter
from discord_jukebox.infrastructure.metadata.credential_refresh import CredentialRefreshJob
from discord_jukebox.infrastructure.metadata.spotify_client import SpotifyMetadataService
from discord_jukebox.infrastructure.persistence.session_repository import InMemorySessionRepository


@pytest.fixture
def container():
    """Create container with default settings and a stand-in bot."""
    container = create_container(Settings())
    container.set_bot(MagicMock())
    return container


class TestBot:
    def test_bot_required(self):
        container = Container(Settings())

        with pytest.raises(RuntimeError):
            _ = container.bot

    def test_set_bot(self):
        container = Container(Settings())
        bot = MagicMock()

        container.set_bot(bot)

        assert container.bot is bot


class TestLazyProperties:
    @pytest.mark.parametrize(
        ("attribute", "expected_type"),
        [
            ("session_repository", InMemorySessionRepository),
            ("voice_adapter", DiscordVoiceAdapter),
            ("notifier", DiscordChannelNotifier),
            ("metadata_service", SpotifyMetadataService),
            ("ytdlp_resolver", YtDlpResolver),
            ("track_resolver", TrackResolutionService),
            ("playback_service", PlaybackApplicationService),
            ("play_track_handler", PlayTrackHandler),
            ("get_queue_handler", GetQueueHandler),
            ("credential_refresh_job", CredentialRefreshJob),
        ],
    )
    def test_created_once(self, container, attribute, expected_type):
        first = getattr(container, attribute)

        assert isinstance(first, expected_type)
        assert getattr(container, attribute) is first

    def test_nothing_created_until_accessed(self):
        container = Container(Settings())

        assert container._playback_service is None
        assert container._track_resolver is None

    def test_search_and_streaming_share_resolver(self, container):
        resolution = container.track_resolver

        assert resolution._search is container.ytdlp_resolver
        assert resolution._streaming is container.ytdlp_resolver

    def test_handlers_share_playback_service(self, container):
        assert container.play_track_handler._playback is container.playback_service
        assert container.get_queue_handler._playback is container.playback_service


class TestLifecycle:
    async def test_initialize_starts_background_work(self, container):
        container._playback_service = MagicMock()
        container._credential_refresh_job = MagicMock()

        await container.initialize()

        container._playback_service.start.assert_called_once()
        container._credential_refresh_job.start.assert_called_once()

    async def test_shutdown_stops_background_work(self, container):
        container._playback_service = MagicMock()
        container._playback_service.shutdown = AsyncMock()
        container._credential_refresh_job = MagicMock()
        container._credential_refresh_job.stop = AsyncMock()

        await container.shutdown()

        container._credential_refresh_job.stop.assert_awaited_once()
        container._playback_service.shutdown.assert_awaited_once()

    async def test_shutdown_continues_after_job_failure(self, container, caplog):
        container._playback_service = MagicMock()
        container._playback_service.shutdown = AsyncMock()
        container._credential_refresh_job = MagicMock()
        container._credential_refresh_job.stop = AsyncMock(side_effect=RuntimeError("boom"))

        await container.shutdown()

        container._playback_service.shutdown.assert_awaited_once()
        assert "Failed stopping credential refresh job: RuntimeError('boom')" in caplog.text

    async def test_shutdown_logs_playback_failure(self, container, caplog):
        container._playback_service = MagicMock()
        container._playback_service.shutdown = AsyncMock(side_effect=RuntimeError("stuck"))

        await container.shutdown()

        assert "Failed shutting down playback service: RuntimeError('stuck')" in caplog.text

    async def test_shutdown_before_initialize(self):
        await Container(Settings()).shutdown()
