"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from discord_jukebox.application.interfaces.notifier import PlaybackNotifier
from discord_jukebox.application.interfaces.track_resolver import (
    MetadataService,
    SearchService,
    StreamingService,
    TrackResolver,
)
from discord_jukebox.application.interfaces.voice_adapter import (
    AudioPlayer,
    PlayerListener,
    VoiceAdapter,
    VoiceConnection,
)

__all__ = [
    "AudioPlayer",
    "MetadataService",
    "PlaybackNotifier",
    "PlayerListener",
    "SearchService",
    "StreamingService",
    "TrackResolver",
    "VoiceAdapter",
    "VoiceConnection",
]
