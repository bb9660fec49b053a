"""Centralized message constants for errors, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Discord ID Validation Errors
    INVALID_SNOWFLAKE = "Discord snowflake ID must be positive"

    # Track Validation Errors
    EMPTY_TRACK_URL = "Track reference URL cannot be empty"
    INVALID_TRACK_URL = "Track reference must be an http(s) URL: {url}"
    EMPTY_VIDEO_ID = "Video ID cannot be empty"
    EMPTY_STREAM_URL = "Stream URL cannot be empty"

    # Settings Validation Errors
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"

    # Audio/Stream Errors
    NO_STREAM_URL_FOR_TRACK = "No stream URL found for {url}"

    # Authentication/Security Errors
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    SPOTIFY_CREDENTIALS_MISSING = "Spotify client credentials are not configured"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters.
    """

    # Voice/Audio Operations
    VOICE_CONNECTED = "Connected to voice channel %s in guild %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting: %r"
    VOICE_CHANNEL_NOT_FOUND = "Voice channel %s not found in guild %s"
    VOICE_CLEANUP_ERROR = "Error during voice cleanup in guild %s"
    VOICE_JOIN_SUPERSEDED = "Voice join for guild %s superseded, releasing new connection"

    # Playback Operations
    PLAYBACK_STARTED = "Started playing '%s' in guild %s"
    PLAYBACK_STOPPED = "Stopped playback in guild %s"
    PLAYBACK_PAUSED = "Paused playback in guild %s"
    PLAYBACK_RESUMED = "Resumed playback in guild %s"
    PLAYBACK_ERROR = "Playback error in guild %s: %r"
    PLAYBACK_FINISHED = "Queue drained in guild %s, session closed"
    PLAYBACK_STREAM_SUPERSEDED = "Stream for '%s' in guild %s arrived after the head moved, dropping it"
    PLAYBACK_SKIPPED_LOADING = "Skipped '%s' in guild %s before its stream opened"
    PLAYER_AFTER_CALLBACK = "Player finished in guild %s (error: %r)"

    # Player events
    EVENT_RECEIVED = "Player event %s for guild %s (binding %s)"
    EVENT_STALE = "Dropping stale %s event for guild %s (binding %s, current %s)"
    EVENT_HANDLER_ERROR = "Error handling player event %s for guild %s"
    EVENT_CONSUMER_STARTED = "Player event consumer started"
    EVENT_CONSUMER_STOPPED = "Player event consumer stopped"
    EVENT_CONSUMER_ALREADY_RUNNING = "Player event consumer is already running"

    # Queue Operations
    SESSION_CREATED = "Created playback session for guild %s"
    QUEUE_ENQUEUED = "Enqueued '%s' at position %s in guild %s"
    QUEUE_ADVANCED = "Advanced queue in guild %s, %s track(s) remaining"
    QUEUE_CLEARED = "Cleared %s track(s) from queue in guild %s"
    QUEUE_STALE_REQUEST = "Discarding '%s' for guild %s: generation %s is now %s"
    QUEUE_DROPPED_ON_JOIN_FAILURE = "Voice join failed, dropped %s queued track(s) in guild %s"

    # Resolution/Search
    RESOLVE_DIRECT = "Using direct stream URL %s"
    RESOLVE_SPOTIFY = "Resolving Spotify track %s"
    RESOLVE_SEARCH = "Searching for %r"
    RESOLVE_RESULT = "Resolved %r to %s"
    YTDLP_FAILED_SEARCH = "Failed to search for %r"
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info from %s"
    YTDLP_NO_STREAM_URL = "No stream URL found for %s"
    CACHE_HIT_URL = "Cache hit for URL: %s"
    CACHE_EXPIRED_CLEANED = "Cleaned %d expired cache entries"
    CACHE_EVICTED_OLDEST = "Evicted %d oldest cache entries"

    # Spotify
    SPOTIFY_TOKEN_REFRESHED = "Spotify access token refreshed"
    SPOTIFY_TOKEN_REFRESH_FAILED = "Error refreshing Spotify access token: %r"
    SPOTIFY_NOT_CONFIGURED = "Spotify credentials missing; track links cannot be resolved"
    SPOTIFY_LOOKUP_FAILED = "Error fetching Spotify track %s: %r"
    CREDENTIAL_REFRESH_STARTED = "Credential refresh job started (every %ss)"
    CREDENTIAL_REFRESH_STOPPED = "Credential refresh job stopped"
    CREDENTIAL_REFRESH_ALREADY_RUNNING = "Credential refresh job is already running"
    CREDENTIAL_REFRESH_ERROR = "Error during credential refresh"

    # Notifications
    NOTIFY_CHANNEL_MISSING = "Channel %s not found, dropping announcement"
    NOTIFY_SEND_FAILED = "Failed to send announcement to channel %s: %r"

    # Commands
    COMMAND_RECEIVED = "Command %r from %s with %d arg(s)"
    COMMAND_FAILED = "Unhandled error in command %r"
    COMMAND_REJECTED = "Command %r rejected: %s"

    # Application Lifecycle
    BOT_STARTING = "Starting jukebox in %s mode (prefix %r, Spotify %s)"
    BOT_SETUP = "Setting up bot..."
    BOT_CONTAINER_INITIALIZED = "Container initialized successfully"
    BOT_CONTAINER_INIT_FAILED = "Failed to initialize container: %s"
    BOT_SETUP_COMPLETE = "Bot setup complete"
    LOGGING_CONFIG_FALLBACK = "Could not load %s, falling back to basic config"
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %ss"
    BOT_CONTAINER_SHUTDOWN = "Container shutdown complete"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error during container shutdown: %s"
    CONTAINER_JOB_STOP_FAILED = "Failed stopping credential refresh job: %r"
    CONTAINER_PLAYBACK_SHUTDOWN_FAILED = "Failed shutting down playback service: %r"
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %s guilds"
    BOT_PRESENCE_SET = "Presence set to %s (%s)"
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_COGS_LOADED_SUMMARY = "Cogs loaded: %s success, %s failed"


class DiscordUIMessages:
    """User-facing replies sent to the originating text channel."""

    # Playback announcements
    ACTION_NOW_PLAYING = "Now playing"
    ACTION_ADDED_TO_QUEUE = "Added to the queue."
    ACTION_SKIPPED = "Skipped the current song."
    ACTION_PAUSED = "Paused the music."
    ACTION_RESUMED = "Resumed the music."
    ACTION_STOPPED = "Stopped the music and cleared the queue."
    ACTION_FINISHED = "Finished playing!"

    # Queue display
    QUEUE_HEADER = "Current queue:"
    QUEUE_LINE = "{position}. {track}"
    STATE_QUEUE_EMPTY = "The queue is currently empty."

    # State
    STATE_NOTHING_PLAYING = "No song is currently playing."
    STATE_REQUEST_DISCARDED = "Playback was stopped before your request finished, so it was not queued."

    # Errors
    ERROR_NO_VOICE_CHANNEL = "You need to be in a voice channel to play music!"
    ERROR_METADATA_LOOKUP_FAILED = "No results found on Spotify."
    ERROR_NO_SEARCH_RESULTS = "No results found on YouTube."
    ERROR_PLAYBACK_FAILED = "An error occurred while trying to play the audio."
    ERROR_EMPTY_QUERY = "Please provide a song name or YouTube/Spotify URL."
    ERROR_COULD_NOT_JOIN_VOICE = "I couldn't join your voice channel."
    ERROR_QUEUE_DROPPED_NO_VOICE = "I couldn't join the voice channel, so the queued songs were dropped."
