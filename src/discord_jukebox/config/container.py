"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for services, repositories, adapters, and handlers.
Components are created on-demand and cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.commands.play_track import PlayTrackHandler
    from ..application.interfaces.notifier import PlaybackNotifier
    from ..application.interfaces.track_resolver import TrackResolver
    from ..application.interfaces.voice_adapter import VoiceAdapter
    from ..application.queries.get_queue import GetQueueHandler
    from ..application.services.playback_service import PlaybackApplicationService
    from ..domain.music.repository import SessionRepository
    from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver
    from ..infrastructure.metadata.credential_refresh import CredentialRefreshJob
    from ..infrastructure.metadata.spotify_client import SpotifyMetadataService
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    This container manages all application dependencies and their lifecycle.
    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    # Persistence layer
    _session_repository: SessionRepository | None = None

    # Infrastructure adapters
    _voice_adapter: VoiceAdapter | None = None
    _notifier: PlaybackNotifier | None = None
    _metadata_service: SpotifyMetadataService | None = None
    _ytdlp_resolver: YtDlpResolver | None = None

    # Application services
    _track_resolver: TrackResolver | None = None
    _playback_service: PlaybackApplicationService | None = None

    # Command / query handlers
    _play_track_handler: PlayTrackHandler | None = None
    _get_queue_handler: GetQueueHandler | None = None

    # Background jobs
    _credential_refresh_job: CredentialRefreshJob | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Repositories ===

    @property
    def session_repository(self) -> SessionRepository:
        if self._session_repository is None:
            from ..infrastructure.persistence.session_repository import InMemorySessionRepository

            self._session_repository = InMemorySessionRepository()
        return self._session_repository

    # === Infrastructure Adapters ===

    @property
    def voice_adapter(self) -> VoiceAdapter:
        if self._voice_adapter is None:
            from ..infrastructure.discord.adapters.voice_adapter import DiscordVoiceAdapter

            self._voice_adapter = DiscordVoiceAdapter(
                self.bot,
                self.settings.audio,
                connect_timeout=self.settings.discord.voice_connect_timeout,
            )
        return self._voice_adapter

    @property
    def notifier(self) -> PlaybackNotifier:
        if self._notifier is None:
            from ..infrastructure.discord.adapters.channel_notifier import DiscordChannelNotifier

            self._notifier = DiscordChannelNotifier(self.bot)
        return self._notifier

    @property
    def metadata_service(self) -> SpotifyMetadataService:
        if self._metadata_service is None:
            from ..infrastructure.metadata.spotify_client import SpotifyMetadataService

            self._metadata_service = SpotifyMetadataService(self.settings.spotify)
        return self._metadata_service

    @property
    def ytdlp_resolver(self) -> YtDlpResolver:
        """Search and streaming services share one yt-dlp resolver."""
        if self._ytdlp_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver

            self._ytdlp_resolver = YtDlpResolver(self.settings.audio)
        return self._ytdlp_resolver

    # === Application Services ===

    @property
    def track_resolver(self) -> TrackResolver:
        if self._track_resolver is None:
            from ..application.services.track_resolution import TrackResolutionService

            self._track_resolver = TrackResolutionService(
                metadata_service=self.metadata_service,
                search_service=self.ytdlp_resolver,
                streaming_service=self.ytdlp_resolver,
            )
        return self._track_resolver

    @property
    def playback_service(self) -> PlaybackApplicationService:
        if self._playback_service is None:
            from ..application.services.playback_service import PlaybackApplicationService

            self._playback_service = PlaybackApplicationService(
                session_repository=self.session_repository,
                voice_adapter=self.voice_adapter,
                track_resolver=self.track_resolver,
                notifier=self.notifier,
            )
        return self._playback_service

    # === Handlers ===

    @property
    def play_track_handler(self) -> PlayTrackHandler:
        if self._play_track_handler is None:
            from ..application.commands.play_track import PlayTrackHandler

            self._play_track_handler = PlayTrackHandler(
                track_resolver=self.track_resolver,
                playback_service=self.playback_service,
            )
        return self._play_track_handler

    @property
    def get_queue_handler(self) -> GetQueueHandler:
        if self._get_queue_handler is None:
            from ..application.queries.get_queue import GetQueueHandler

            self._get_queue_handler = GetQueueHandler(playback_service=self.playback_service)
        return self._get_queue_handler

    # === Background Jobs ===

    @property
    def credential_refresh_job(self) -> CredentialRefreshJob:
        if self._credential_refresh_job is None:
            from ..infrastructure.metadata.credential_refresh import CredentialRefreshJob

            self._credential_refresh_job = CredentialRefreshJob(
                metadata_service=self.metadata_service,
                settings=self.settings.spotify,
            )
        return self._credential_refresh_job

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Start the player-event consumer and the credential refresh job."""
        self.playback_service.start()
        self.credential_refresh_job.start()

    async def shutdown(self) -> None:
        """Stop background work and release every voice session."""
        if self._credential_refresh_job is not None:
            try:
                await self._credential_refresh_job.stop()
            except Exception as exc:
                logger.warning(LogTemplates.CONTAINER_JOB_STOP_FAILED, exc)

        if self._playback_service is not None:
            try:
                await self._playback_service.shutdown()
            except Exception as exc:
                logger.warning(LogTemplates.CONTAINER_PLAYBACK_SHUTDOWN_FAILED, exc)


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
