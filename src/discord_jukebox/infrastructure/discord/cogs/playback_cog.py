"""Prefix-command cog for playback: play, skip, pause, resume, stop, queue."""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_jukebox.application.commands.play_track import PlayTrackCommand
from discord_jukebox.application.queries.get_queue import GetQueueQuery
from discord_jukebox.domain.shared.exceptions import (
    DomainError,
    EmptyQueryError,
    NothingPlayingError,
    NoVoiceChannelError,
)
from discord_jukebox.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from discord_jukebox.infrastructure.discord.dispatcher import CommandDispatcher
from discord_jukebox.utils.reply import chunk_message

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)

CogHandler = Callable[["PlaybackCog", discord.Message, list[str]], Awaitable[None]]


def replies_on_domain_error(func: CogHandler) -> CogHandler:
    """Turn a DomainError raised by a handler into a reply in the originating channel."""

    @functools.wraps(func)
    async def wrapper(self: PlaybackCog, message: discord.Message, args: list[str]) -> None:
        try:
            await func(self, message, args)
        except DomainError as exc:
            logger.info(LogTemplates.COMMAND_REJECTED, func.__name__, exc.code)
            await self.reply(message, exc.message)

    return wrapper


class PlaybackCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container
        self.dispatcher: CommandDispatcher[discord.Message] = CommandDispatcher(
            {
                "play": self.play,
                "p": self.play,
                "skip": self.skip,
                "s": self.skip,
                "pause": self.pause,
                "resume": self.resume,
                "stop": self.stop,
                "queue": self.queue,
                "q": self.queue,
            },
            prefix=container.settings.discord.command_prefix,
        )

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        await self.dispatcher.dispatch(
            message.content or "",
            sender_is_bot=message.author.bot,
            context=message,
        )

    async def reply(self, message: discord.Message, content: str) -> None:
        try:
            for chunk in chunk_message(content):
                await message.channel.send(chunk)
        except discord.HTTPException as exc:
            logger.warning(LogTemplates.NOTIFY_SEND_FAILED, message.channel.id, exc)

    @staticmethod
    def _voice_channel_id(message: discord.Message) -> int | None:
        voice = getattr(message.author, "voice", None)
        channel = getattr(voice, "channel", None)
        return channel.id if channel is not None else None

    @staticmethod
    def _guild_id(message: discord.Message, operation: str) -> int:
        if message.guild is None:
            raise NothingPlayingError(operation=operation)
        return message.guild.id

    # ─────────────────────────────────────────────────────────────────
    # Commands
    # ─────────────────────────────────────────────────────────────────

    @replies_on_domain_error
    async def play(self, message: discord.Message, args: list[str]) -> None:
        query = " ".join(args)
        if not query:
            raise EmptyQueryError()

        voice_channel_id = self._voice_channel_id(message)
        if message.guild is None or voice_channel_id is None:
            raise NoVoiceChannelError()

        result = await self.container.play_track_handler.handle(
            PlayTrackCommand(
                guild_id=message.guild.id,
                text_channel_id=message.channel.id,
                voice_channel_id=voice_channel_id,
                query=query,
            )
        )
        if result.reply is not None:
            await self.reply(message, result.reply)

    @replies_on_domain_error
    async def skip(self, message: discord.Message, args: list[str]) -> None:
        await self.container.playback_service.skip(self._guild_id(message, "skip"))
        await self.reply(message, DiscordUIMessages.ACTION_SKIPPED)

    @replies_on_domain_error
    async def pause(self, message: discord.Message, args: list[str]) -> None:
        await self.container.playback_service.pause(self._guild_id(message, "pause"))
        await self.reply(message, DiscordUIMessages.ACTION_PAUSED)

    @replies_on_domain_error
    async def resume(self, message: discord.Message, args: list[str]) -> None:
        await self.container.playback_service.resume(self._guild_id(message, "resume"))
        await self.reply(message, DiscordUIMessages.ACTION_RESUMED)

    @replies_on_domain_error
    async def stop(self, message: discord.Message, args: list[str]) -> None:
        await self.container.playback_service.stop(self._guild_id(message, "stop"))
        await self.reply(message, DiscordUIMessages.ACTION_STOPPED)

    @replies_on_domain_error
    async def queue(self, message: discord.Message, args: list[str]) -> None:
        if message.guild is None:
            await self.reply(message, DiscordUIMessages.STATE_QUEUE_EMPTY)
            return

        info = await self.container.get_queue_handler.handle(GetQueueQuery(guild_id=message.guild.id))
        await self.reply(message, info.render())


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(PlaybackCog(bot, container))
