"""Exception hierarchy for domain-level errors.

Every error raised to a command handler carries the reply shown to the user
as ``message``; handlers catch :class:`DomainError` and send it verbatim.
"""

from __future__ import annotations

from discord_jukebox.domain.shared.messages import DiscordUIMessages


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class NoVoiceChannelError(DomainError):
    """Raised when the requester is not connected to a voice channel."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or DiscordUIMessages.ERROR_NO_VOICE_CHANNEL, code="NO_VOICE_CHANNEL")


class MetadataLookupFailedError(DomainError):
    """Raised when the metadata service cannot describe a shared track."""

    def __init__(self, track_id: str | None = None, message: str | None = None) -> None:
        super().__init__(
            message or DiscordUIMessages.ERROR_METADATA_LOOKUP_FAILED,
            code="METADATA_LOOKUP_FAILED",
        )
        self.track_id = track_id


class NoSearchResultsError(DomainError):
    """Raised when a keyword search returns nothing."""

    def __init__(self, query: str | None = None, message: str | None = None) -> None:
        super().__init__(message or DiscordUIMessages.ERROR_NO_SEARCH_RESULTS, code="NO_SEARCH_RESULTS")
        self.query = query


class NothingPlayingError(DomainError):
    """Raised when a control command arrives without an active session."""

    def __init__(self, operation: str | None = None, message: str | None = None) -> None:
        super().__init__(message or DiscordUIMessages.STATE_NOTHING_PLAYING, code="NOTHING_PLAYING")
        self.operation = operation


class PlaybackError(DomainError):
    """Raised when a stream cannot be opened or rendered."""

    def __init__(self, message: str | None = None, cause: BaseException | None = None) -> None:
        super().__init__(message or DiscordUIMessages.ERROR_PLAYBACK_FAILED, code="PLAYBACK_ERROR")
        self.cause = cause


class EmptyQueryError(DomainError):
    """Raised when ``play`` is issued without a query."""

    def __init__(self) -> None:
        super().__init__(DiscordUIMessages.ERROR_EMPTY_QUERY, code="EMPTY_QUERY")


class VoiceConnectionError(DomainError):
    """Raised when the voice transport refuses or times out a join."""

    def __init__(self, channel_id: int | None = None, message: str | None = None) -> None:
        super().__init__(
            message or DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE, code="VOICE_CONNECTION"
        )
        self.channel_id = channel_id


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state
