"""
Shared Domain Kernel

Contains messages, constrained types, and exceptions shared across the domain.
"""

from discord_jukebox.domain.shared.exceptions import (
    DomainError,
    EmptyQueryError,
    InvalidOperationError,
    MetadataLookupFailedError,
    NoSearchResultsError,
    NothingPlayingError,
    NoVoiceChannelError,
    PlaybackError,
    VoiceConnectionError,
)

__all__ = [
    "DomainError",
    "EmptyQueryError",
    "InvalidOperationError",
    "MetadataLookupFailedError",
    "NoSearchResultsError",
    "NoVoiceChannelError",
    "NothingPlayingError",
    "PlaybackError",
    "VoiceConnectionError",
]
