"""Text-command dispatcher: maps the first word of a message to a handler."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from types import MappingProxyType
from typing import Generic, TypeVar

from discord_jukebox.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

ContextT = TypeVar("ContextT")

CommandHandler = Callable[[ContextT, list[str]], Awaitable[None]]


class CommandDispatcher(Generic[ContextT]):
    """Routes raw message text to registered handlers.

    Command keys are matched case-insensitively after the prefix is removed.
    Unknown commands are ignored without a reply. A handler that raises is
    logged and never propagates out of :meth:`dispatch`.
    """

    def __init__(self, commands: Mapping[str, CommandHandler[ContextT]], *, prefix: str = "!") -> None:
        self._commands: Mapping[str, CommandHandler[ContextT]] = MappingProxyType(
            {name.lower(): handler for name, handler in commands.items()}
        )
        self._prefix = prefix.lower()

    @property
    def commands(self) -> Mapping[str, CommandHandler[ContextT]]:
        return self._commands

    @property
    def prefix(self) -> str:
        return self._prefix

    def parse(self, text: str) -> tuple[str, list[str]] | None:
        """Split *text* into (command key, arguments), or None if it is not a command."""
        tokens = text.split()
        if not tokens:
            return None

        head = tokens[0].lower()
        if not head.startswith(self._prefix):
            return None

        key = head[len(self._prefix):]
        if key not in self._commands:
            return None
        return key, tokens[1:]

    async def dispatch(self, text: str, *, sender_is_bot: bool, context: ContextT) -> bool:
        """Run the handler for *text*. Returns True when a handler was invoked."""
        if sender_is_bot:
            return False

        parsed = self.parse(text)
        if parsed is None:
            return False

        key, args = parsed
        logger.debug(LogTemplates.COMMAND_RECEIVED, key, context, len(args))
        try:
            await self._commands[key](context, args)
        except Exception:
            logger.exception(LogTemplates.COMMAND_FAILED, key)
        return True
