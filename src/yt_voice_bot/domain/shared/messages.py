"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Discord ID Validation Errors
    INVALID_SNOWFLAKE = "Discord snowflake ID must be positive"
    SNOWFLAKE_TOO_LARGE = "Discord snowflake ID exceeds maximum value (2^64)"

    # Settings Validation Errors
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"

    # Voice Transport Errors
    GUILD_NOT_FOUND = "Guild {guild_id} not found"
    CHANNEL_NOT_VOICE = "Channel {channel_id} is not a voice channel"
    VOICE_CONNECT_TIMEOUT = "Timed out connecting to channel {channel_id}"
    VOICE_NO_PERMISSION = "Missing permission to connect to channel {channel_id}"

    # Gateway Errors
    TEXT_CHANNEL_NOT_FOUND = "Channel not found or not messageable"

    # Audio Errors
    NO_STREAM_URL = "No stream URL found"
    EMPTY_EXTRACTION = "Extractor returned no information"

    # Startup Errors
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"


class LogTemplates:
    """Log message templates.

    Use these with logger.info(), logger.error(), etc. and pass values as
    parameters for proper log formatting.
    """

    # Voice Transport
    VOICE_CONNECTED = "Connected to voice channel %s in guild %s"
    VOICE_MOVED = "Moved to voice channel %s in guild %s"
    VOICE_JOIN_FAILED = "Error joining voice channel %s in guild %s: %s"
    VOICE_LEAVE_FAILED = "Failed to leave voice channel cleanly for %s: %s"
    VOICE_REMOVE_FAILED = "Failed to remove call handler for %s: %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_SELF_DEAFEN_FAILED = "Failed to self-deafen in guild %s: %r"

    # Track Queue
    QUEUE_ENQUEUED = "Enqueued %s in guild %s (queue length %s)"
    QUEUE_SKIPPED = "Skipped %s in guild %s (%s remaining)"
    QUEUE_STOPPED = "Stopped queue in guild %s (%s pending dropped)"
    TRACK_STARTED = "Started playing %s in guild %s"
    TRACK_ENDED = "Track ended in guild %s (error: %s)"
    TRACK_SOURCE_FAILED = "Could not start %s in guild %s: %s"
    TRACK_END_HANDLER_ERROR = "Error in track end handler for guild %s"

    # Session Lifecycle
    SESSION_JOINED = "Joined channel %s in guild %s, notifying %s"
    SESSION_REJOIN = "Replacing session in guild %s: channel %s -> %s"
    SESSION_ENQUEUED = "Added to queue in guild %s, %s waiting"
    SESSION_NO_VOICE_CHANNEL = "Requester in guild %s is not in a voice channel"
    SESSION_TRACKS_ENDED = "Track finished in guild %s"
    SESSION_QUEUE_EMPTY = "Queue empty, leaving channel in guild %s"
    SESSION_CHANNEL_EMPTY = "Channel %s is empty, cleaning up for guild %s"
    SESSION_CONNECTION_GONE = "Bot not in a voice channel, cleaning up for guild %s"
    SESSION_ORPHANED_CONNECTION = "Connection without session in guild %s, cleaning up"
    SESSION_TORN_DOWN = "Cleaned up and disconnected from guild %s (%s)"
    SESSION_NOTHING_TO_TEAR_DOWN = "No active call handler found for guild %s"
    SESSION_STARTED_EVENT = "Session started in guild %s on channel %s at %s"
    SESSION_ENDED_EVENT = "Session ended in guild %s (%s) at %s"

    # Gateway
    MESSAGE_SEND_FAILED = "Failed to send a message: %s"

    # Audio
    YTDLP_EXTRACTING = "Extracting stream for %s"
    YTDLP_FAILED_EXTRACT = "Failed to extract info from %s"

    # Application Lifecycle
    BOT_STARTING = "Starting voice bot in {environment} mode"
    BOT_SETUP = "Setting up bot..."
    BOT_CONTAINER_INITIALIZED = "Container initialized successfully"
    BOT_CONTAINER_INIT_FAILED = "Failed to initialize container: %s"
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_STARTING_RUN = "Starting bot..."
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received Ctrl-C, shutting down."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot, leaving %s voice session(s) to close with the gateway"
    BOT_CONTAINER_SHUTDOWN = "Container shutdown complete"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error during container shutdown: %s"
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_SHUTDOWN_TIMEOUT = "Shutdown did not finish within %ss"
    BOT_READY = "%s is connected!"

    # Bot Cog Management
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_COGS_LOADED_SUMMARY = "Cogs loaded: %s success, %s failed"

    # Bot Command Sync
    BOT_SYNCED_GLOBAL = "Synced %s commands globally"
    BOT_SYNC_GLOBAL_FAILED = "Failed to sync commands globally: %s"

    # Bot Error Handling
    BOT_COMMAND_ERROR = "Unhandled command error in '%s'"


class DiscordUIMessages:
    """User-facing replies sent by the command cogs."""

    PLAY_JOINED = "Joined {channel} and started playback"
    PLAY_ENQUEUED = "Added the song to the queue in {channel}"
    PLAY_NO_VOICE_CHANNEL = "You must be in a voice channel to use this command"
    PLAY_JOIN_FAILED = "Failed to join channel: {cause}"
    PLAY_INVALID_URL = "Please give an http(s) link to play"

    SKIP_DONE = "Song skipped: {remaining} in queue."
    SKIP_NOT_ACTIVE = "Not in a voice channel to play in"

    CLEAR_DONE = "Queue cleared"
    CLEAR_NOT_ACTIVE = "Not in a voice channel anyway"

    TRACKS_ENDED = "Tracks ended: {count}."

    GUILD_ONLY = "This command can only be used in a guild"
    OWNER_ONLY = "Only the bot owner can use this command"
    REGISTER_DONE = "Synced {count} application command(s)"

    HELP_HEADER = "Available commands (prefix `{prefix}` or slash):"
    HELP_LINE = "`{name}` - {description}"
    HELP_UNKNOWN = "No command called `{name}` found"
