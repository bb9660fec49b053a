"""Discord voice adapter: joins channels and renders audio through FFmpeg."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import discord

from discord_jukebox.application.interfaces.voice_adapter import (
    AudioPlayer,
    PlayerListener,
    VoiceAdapter,
    VoiceConnection,
)
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.music.value_objects import PlayerEventKind
from discord_jukebox.domain.shared.exceptions import PlaybackError, VoiceConnectionError
from discord_jukebox.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ....domain.music.value_objects import AudioStream

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT: float = 10.0


class DiscordVoiceConnection(VoiceConnection):
    def __init__(self, voice_client: discord.VoiceClient) -> None:
        self.voice_client = voice_client
        self._destroyed = False

    @property
    def channel_id(self) -> int:
        return self.voice_client.channel.id

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    async def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True
        await self.voice_client.disconnect(force=True)


class DiscordAudioPlayer(AudioPlayer):
    """Wraps a ``VoiceClient`` as a single-resource player.

    discord.py calls ``after`` from its audio thread; the result is hopped
    back onto the event loop before the listener sees it. ``_loaded`` stays
    True until that hop has run, so ``stop`` reports whether an IDLE event
    is still owed.
    """

    def __init__(
        self,
        voice_client: discord.VoiceClient,
        listener: PlayerListener,
        *,
        loop: asyncio.AbstractEventLoop,
        ffmpeg_options: dict[str, str],
    ) -> None:
        self._vc = voice_client
        self._listener = listener
        self._loop = loop
        self._ffmpeg_options = ffmpeg_options
        self._loaded = False

    @property
    def guild_id(self) -> int | None:
        guild = getattr(self._vc, "guild", None)
        return guild.id if guild is not None else None

    def play(self, stream: AudioStream) -> None:
        try:
            source = discord.FFmpegPCMAudio(
                stream.stream_url,
                before_options=self._ffmpeg_options.get("before_options", ""),
                options=self._ffmpeg_options.get("options", ""),
            )
            self._vc.play(source, after=self._after)
        except discord.ClientException as exc:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, exc)
            raise PlaybackError(cause=exc) from exc
        self._loaded = True

    def _after(self, error: Exception | None) -> None:
        logger.debug(LogTemplates.PLAYER_AFTER_CALLBACK, self.guild_id, error)
        self._loop.call_soon_threadsafe(self._report, error)

    def _report(self, error: Exception | None) -> None:
        self._loaded = False
        if error is not None:
            self._listener(PlayerEventKind.ERROR, error)
        else:
            self._listener(PlayerEventKind.IDLE, None)

    def pause(self) -> bool:
        if self._vc.is_playing():
            self._vc.pause()
            return True
        return False

    def unpause(self) -> bool:
        if self._vc.is_paused():
            self._vc.resume()
            return True
        return False

    def stop(self) -> bool:
        if self._vc.is_playing() or self._vc.is_paused():
            self._vc.stop()
        return self._loaded


class DiscordVoiceAdapter(VoiceAdapter):
    def __init__(
        self,
        bot: discord.Client,
        settings: AudioSettings | None = None,
        *,
        connect_timeout: float = CONNECT_TIMEOUT,
    ) -> None:
        self._bot = bot
        self._settings = settings or AudioSettings()
        self._connect_timeout = connect_timeout

    async def join(self, guild_id: int, channel_id: int) -> DiscordVoiceConnection:
        guild = self._bot.get_guild(guild_id)
        channel = guild.get_channel(channel_id) if guild is not None else None
        if guild is None or not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(LogTemplates.VOICE_CHANNEL_NOT_FOUND, channel_id, guild_id)
            raise VoiceConnectionError(channel_id=channel_id)

        # A voice client left over from an earlier run would make connect() fail.
        stale = guild.voice_client
        if stale is not None:
            await stale.disconnect(force=True)

        try:
            async with asyncio.timeout(self._connect_timeout):
                voice_client = await channel.connect(self_deaf=True)
        except TimeoutError as exc:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            raise VoiceConnectionError(channel_id=channel_id) from exc
        except discord.Forbidden as exc:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel_id)
            raise VoiceConnectionError(channel_id=channel_id) from exc
        except discord.ClientException as exc:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, exc)
            raise VoiceConnectionError(channel_id=channel_id) from exc

        logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.name)
        return DiscordVoiceConnection(voice_client)

    def create_player(self, connection: VoiceConnection, listener: PlayerListener) -> DiscordAudioPlayer:
        if not isinstance(connection, DiscordVoiceConnection):
            raise TypeError(f"Expected DiscordVoiceConnection, got {type(connection).__name__}")

        return DiscordAudioPlayer(
            connection.voice_client,
            listener,
            loop=asyncio.get_running_loop(),
            ffmpeg_options=self._settings.ffmpeg_options,
        )
