"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    EMPTY_SOURCE_REFERENCE = "Song source reference cannot be empty"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"
    YTDLP_BINARY_NOT_FOUND = "yt-dlp executable not found: {binary}"
    NO_PLAYER_BOUND = "No audio player bound for guild {guild_id}"


class LogTemplates:
    """Log message templates.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters.
    """

    # Voice/Audio Operations
    VOICE_CONNECTED = "Connected to voice channel %s in guild %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting: %r"
    VOICE_LOST = "Voice connection lost in guild %s, attempting reconnect"
    VOICE_RECONNECTED = "Voice connection re-established in guild %s"
    VOICE_RECONNECT_FAILED = "Failed to reconnect in guild %s, destroying connection"
    VOICE_CLEANUP_ERROR = "Error during voice cleanup in guild %s"

    # Playback Operations
    PLAYBACK_STARTED = "Started playing '%s' in guild %s"
    PLAYBACK_STOPPED = "Stopped playback in guild %s"
    PLAYBACK_PAUSED = "Paused playback in guild %s"
    PLAYBACK_RESUMED = "Resumed playback in guild %s"
    PLAYBACK_ERROR = "Playback error in guild %s: %s"
    PLAYBACK_FAILED_START = "Failed to start '%s' in guild %s"
    PLAYBACK_STALE_EVENT = "Ignoring stale %s event (token %s, current %s) in guild %s"
    PLAYBACK_SUPERSEDED = "Playback attempt %s superseded in guild %s"
    PLAYBACK_EVENT_LOOP_ERROR = "Unhandled error while processing %s in guild %s"

    # Track Operations
    TRACK_FINISHED = "Track finished: '%s' in guild %s"
    TRACK_FAILED = "Track failed: '%s' in guild %s (%s)"
    TRACK_SKIPPED = "Skip requested for '%s' in guild %s"

    # Queue Operations
    QUEUE_CREATED = "Created queue for guild %s"
    QUEUE_EMPTY = "Queue empty in guild %s"
    QUEUE_ENQUEUED = "Enqueued '%s' at position %s in guild %s"
    QUEUE_CLEARED = "Cleared %s songs from queue in guild %s"
    QUEUE_STATE = "Guild %s: %s -> %s"

    # Stream subprocess
    STREAM_SPAWNED = "Spawned yt-dlp (pid %s) for %s"
    STREAM_STDERR = "yt-dlp stderr (pid %s): %s"
    STREAM_TERMINATED = "Terminated yt-dlp (pid %s)"
    STREAM_CLEANUP_ERROR = "Error terminating yt-dlp (pid %s): %s"

    # Resolution/Search
    YTDLP_RESOLVING = "Resolving %r (direct=%s)"
    YTDLP_FAILED_RESOLVE = "Failed to resolve %r"
    YTDLP_FAILED_SEARCH = "Failed to search for %r"
    YTDLP_NO_RESULTS = "No results for %r"
    YTDLP_COOKIES_CONFIGURED = "Using YouTube cookies from %s"

    # Notifier
    NOTIFY_SEND_FAILED = "Failed to send notification to guild %s: %s"
    NOTIFY_NO_TARGET = "No notify target for guild %s, dropping %s"

    # Commands
    COMMAND_RECEIVED = "Command %r from %s in guild %s"
    COMMAND_REJECTED = "Command %r rejected in guild %s: %s"
    COMMAND_ERROR = "Command error in %r"

    # Application Lifecycle
    BOT_STARTING = "Starting Discord DJ Bot in {environment} mode"
    BOT_SETUP = "Setting up bot..."
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %.1fs"
    BOT_READY = "Bot is online and logged in as %s (%s)"
    BOT_CONNECTED_GUILDS = "Ready to play music in %s servers"
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_UNHANDLED_ASYNC_ERROR = "Unhandled asynchronous error: %s"
    BOT_COMMAND_PREFIX = "Listening for commands with prefix %r"
    LOGGING_CONFIG_FALLBACK = "Could not load %s, falling back to basic config"

    # Audio Tooling
    AUDIO_TOOL_MISSING = "%s executable not found on PATH; songs will fail to stream"
    AUDIO_TOOL_FOUND = "Using %s at %s"
    AUDIO_COOKIES_LOADED = "Using yt-dlp cookies from %s"


class DiscordUIMessages:
    """User-facing chat messages."""

    # Errors
    ERROR_GENERIC = "❌ An error occurred while processing your command."
    ERROR_NOT_IN_VOICE = "❌ You need to be in a voice channel to use this command!"
    ERROR_MISSING_VOICE_PERMISSIONS = (
        "❌ I need permission to connect and speak in your voice channel!"
    )
    ERROR_JOIN_FAILED = "❌ Failed to join the voice channel."
    ERROR_NOT_CONNECTED = "❌ I am not connected to any voice channel."
    ERROR_MISSING_QUERY = "❌ Please provide a YouTube URL or search term!"
    ERROR_MISSING_SEARCH_TERM = "❌ Please provide a search term!"
    ERROR_NO_RESULTS = "❌ No search results found for your query."
    ERROR_LOAD_FAILED = "❌ Failed to load the song. Please check your input and try again."
    ERROR_SEARCH_FAILED = "❌ An error occurred while searching."
    ERROR_STREAM_FAILED = "❌ Failed to play the current song. Skipping..."
    ERROR_PLAYBACK = "❌ An error occurred during playback."
    ERROR_NOTHING_PLAYING = "❌ Nothing is currently playing."
    ERROR_NOTHING_PAUSED = "❌ Nothing is currently paused."
    ERROR_NOTHING_TO_SKIP_TO = "❌ No more songs in the queue to skip to."
    ERROR_LEFT_VOICE = "❌ You left the voice channel! Queue cleared."
    ERROR_INVALID_PICK = "❌ Pick a number between 1 and {count} from your last search."
    ERROR_UNKNOWN_COMMAND = "❓ Unknown command. Use `{prefix}help` to see available commands."

    # State
    STATE_SEARCHING = "⏳ Searching for your song..."
    STATE_SEARCHING_YOUTUBE = "🔍 Searching YouTube..."
    STATE_QUEUE_EMPTY = "📭 The queue is currently empty."
    STATE_QUEUE_ALREADY_EMPTY = "📭 The queue is already empty."
    STATE_QUEUE_FINISHED = "📭 Queue is empty. Add more songs with `{prefix}play <url>`"

    # Success
    SUCCESS_JOINED = "🎤 Successfully joined **{channel}**!"
    SUCCESS_LEFT = "👋 Successfully left the voice channel."
    SUCCESS_SKIPPED = "⏭️ Skipped the current song."
    SUCCESS_STOPPED = "⏹️ Stopped playing and cleared the queue."
    SUCCESS_CLEARED = "🗑️ Cleared {count} songs from the queue."
    SUCCESS_PAUSED = "⏸️ Paused the current song."
    SUCCESS_RESUMED = "▶️ Resumed the current song."

    # Embeds
    EMBED_ADDED_TITLE = "🎵 Added to Queue"
    EMBED_NOW_PLAYING_TITLE = "▶️ Now Playing"
    EMBED_QUEUE_TITLE = "🎵 Music Queue"
    EMBED_SEARCH_TITLE = '🔍 Search Results for "{query}"'
    EMBED_SEARCH_FOOTER = (
        "Use {prefix}play <number> or {prefix}play <url> to add a song to the queue"
    )
    EMBED_QUEUE_MORE = "... and {count} more songs"
    EMBED_HELP_TITLE = "🎵 Discord DJ Bot Commands"
    EMBED_HELP_DESCRIPTION = "Use prefix `{prefix}` before commands"
    EMBED_HELP_FOOTER = "Discord DJ Bot v2.0"
    FIELD_DURATION = "Duration"
    FIELD_POSITION = "Position in Queue"
    FIELD_REQUESTED_BY = "Requested by"
    FIELD_TOTAL_SONGS = "Total Songs"
    UNKNOWN_DURATION = "Unknown"
