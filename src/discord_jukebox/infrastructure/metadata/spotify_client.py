"""MetadataService implementation using the Spotify Web API via spotipy."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import spotipy
from spotipy.oauth2 import SpotifyClientCredentials

from discord_jukebox.application.interfaces.track_resolver import MetadataService
from discord_jukebox.config.settings import SpotifySettings
from discord_jukebox.domain.music.value_objects import TrackMetadata
from discord_jukebox.domain.shared.exceptions import MetadataLookupFailedError
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)


class SpotifyMetadataService(MetadataService):
    """Looks up track artist and title with a client-credentials token.

    The token is fetched explicitly by :meth:`refresh_credentials`, normally
    driven by ``CredentialRefreshJob``. Until the first successful refresh,
    every lookup fails. A failed refresh keeps the previous token.
    """

    def __init__(self, settings: SpotifySettings | None = None) -> None:
        self._settings = settings or SpotifySettings()
        self._client: spotipy.Spotify | None = None
        self._credentials: SpotifyClientCredentials | None = None

    @property
    def has_token(self) -> bool:
        return self._client is not None

    def _credentials_manager(self) -> SpotifyClientCredentials:
        if self._credentials is None:
            self._credentials = SpotifyClientCredentials(
                client_id=self._settings.client_id.get_secret_value(),
                client_secret=self._settings.client_secret.get_secret_value(),
                requests_timeout=self._settings.request_timeout,
            )
        return self._credentials

    def _refresh_sync(self) -> spotipy.Spotify:
        token = self._credentials_manager().get_access_token(as_dict=False, check_cache=False)
        return spotipy.Spotify(auth=token, requests_timeout=self._settings.request_timeout)

    async def refresh_credentials(self) -> bool:
        """Perform a client-credentials grant. Returns False on failure, never raises."""
        if not self._settings.is_configured:
            logger.warning(LogTemplates.SPOTIFY_NOT_CONFIGURED)
            return False

        try:
            self._client = await asyncio.to_thread(self._refresh_sync)
        except Exception as exc:
            logger.error(LogTemplates.SPOTIFY_TOKEN_REFRESH_FAILED, exc)
            return False

        logger.info(LogTemplates.SPOTIFY_TOKEN_REFRESHED)
        return True

    async def get_track_metadata(self, track_id: str) -> TrackMetadata:
        client = self._client
        if client is None:
            logger.warning(
                LogTemplates.SPOTIFY_LOOKUP_FAILED,
                track_id,
                ErrorMessages.SPOTIFY_CREDENTIALS_MISSING,
            )
            raise MetadataLookupFailedError(track_id=track_id)

        try:
            data: dict[str, Any] | None = await asyncio.to_thread(client.track, track_id)
        except Exception as exc:
            logger.error(LogTemplates.SPOTIFY_LOOKUP_FAILED, track_id, exc)
            raise MetadataLookupFailedError(track_id=track_id) from exc

        artists = (data or {}).get("artists") or []
        title = (data or {}).get("name")
        artist_name = artists[0].get("name") if artists else None
        if not artist_name or not title:
            logger.error(LogTemplates.SPOTIFY_LOOKUP_FAILED, track_id, data)
            raise MetadataLookupFailedError(track_id=track_id)

        return TrackMetadata(artist_name=artist_name, track_title=title)
