"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (in-memory session registry)
- Discord (bot, cogs, dispatcher, voice and channel adapters)
- Audio (yt-dlp search and stream extraction)
- Metadata (Spotify track lookup and credential refresh)
"""

from discord_jukebox.infrastructure.discord.adapters.voice_adapter import DiscordVoiceAdapter
from discord_jukebox.infrastructure.discord.bot import create_bot
from discord_jukebox.infrastructure.persistence.session_repository import InMemorySessionRepository

__all__ = [
    "create_bot",
    "DiscordVoiceAdapter",
    "InMemorySessionRepository",
]
