"""Track metadata infrastructure - Spotify lookups and token refresh."""

from discord_jukebox.infrastructure.metadata.credential_refresh import CredentialRefreshJob
from discord_jukebox.infrastructure.metadata.spotify_client import SpotifyMetadataService

__all__ = [
    "CredentialRefreshJob",
    "SpotifyMetadataService",
]
