"""Centralized message constants for error messages, validation, and log output."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Connect phase
    NOT_CHANNEL = "A voice channel and a guild text channel are required"
    ALREADY_BOUND = "Music is already bound to channel {channel_id}"
    NO_PERMISSION = "Missing permission to connect to or speak in the voice channel"
    CONNECTION_FAILED = "Could not join voice channel {channel_id}: {reason}"
    NOT_CONNECTED = "Not connected to a voice channel"

    # Admission phase
    INVALID_URL = "The reference must be a URL string"
    RESOLUTION_FAILED = "Failed to resolve '{reference}': {reason}"
    NO_MEDIA_FOUND = "No media found for '{reference}'"
    NO_PLAYABLE_AUDIO = "No playable audio stream for '{reference}'"
    TOO_LONG = "Track is {length}s long, the limit is {limit}s"

    # Queue state
    QUEUE_EMPTY = "The queue is empty"
    NO_SONGS = "There are no songs in the queue"

    # Validation
    INVALID_VOLUME = "Volume must be a non-negative integer percentage"
    EMPTY_VIDEO_ID = "Video ID cannot be empty"
    INVALID_QUORUM = "Quorum must be between 0 and 1"

    # Settings
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"


class LogTemplates:
    """%-style log templates; pass values as logger arguments."""

    # Session registry
    SESSION_CREATED = "Created session for guild %s"
    SESSION_DESTROYED = "Destroyed session for guild %s"
    CHANNEL_BOUND = "Bound guild %s to text channel %s"
    CHANNEL_UNBOUND = "Unbound guild %s"
    SHUTDOWN_LEAVE_FAILED = "Failed leaving guild %s on shutdown: %r"

    # Connect
    VOICE_CONNECTING = "Connecting to voice channel %s in guild %s"
    VOICE_CONNECT_FAILED = "Could not join voice channel %s in guild %s - %s"
    VOICE_CONNECTED = "Connected to voice channel %s in guild %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_CLEANUP_ERROR = "Error releasing voice resources for guild %s"
    VOICE_NOT_CONNECTED = "Not connected to voice in guild %s"
    CHANNEL_NOT_VOICE = "Channel %s is not a voice channel"
    GUILD_NOT_FOUND = "Guild %s not found"
    PERMISSION_MISSING = "Member %s lacks %s in channel %s"

    # Resolver
    CACHE_HIT = "Cache hit for %s"
    CACHE_MISS = "Cache miss for %s"
    CACHE_READ_FAILED = "Cache read failed for %s: %s"
    CACHE_WRITE_FAILED = "Cache write failed for %s: %s"
    CACHE_ENTRY_CORRUPT = "Discarding corrupt cache entry %s: %s"
    CACHE_ENTRY_STALE = "Cached entry %s expired at %s"
    CACHE_EXPIRED_CLEANED = "Cleaned %d expired cache entries"
    CACHE_CLEANUP_STARTED = "Cache cleanup job started (every %ss)"
    CACHE_CLEANUP_STOPPED = "Cache cleanup job stopped"
    CACHE_CLEANUP_ALREADY_RUNNING = "Cache cleanup job is already running"
    CACHE_CLEANUP_RUNNING = "Purging expired cache entries"
    CACHE_CLEANUP_FAILED = "Failed to purge expired cache entries: %r"
    RESOLVING = "Resolving %s"
    RESOLVED = "Resolved %s -> %s (%s itag %s, expires %s)"
    RESOLVE_FAILED = "Resolver backend failed for %s"
    NO_AUDIO_CANDIDATE = "No audio candidate among %d formats for %s"

    # Coordinator
    QUEUED = "Queued '%s' in guild %s (queue length %d)"
    PLAY_NOW = "Playing '%s' immediately in guild %s"
    PLAYBACK_STARTED = "Started '%s' in guild %s at volume %.2f"
    PLAYBACK_STOPPED = "Stopped playback in guild %s"
    STOP_BEFORE_PLAY = "Stopping active stream in guild %s before next play"
    BOT_ALONE = "Only the bot is left in channel %s (guild %s), stopping"
    DEAD_ITEM = "Dropping queue for guild %s: '%s' resolved without playable audio"
    STALE_RESOLUTION = "Discarding resolution of %s for guild %s: session changed"
    TRACK_ENDED = "Track ended in guild %s"
    TRACK_END_SUPPRESSED = "Ignoring track-end callback after intentional stop in guild %s"
    AUTO_ADVANCE_FAILED = "Auto-advance failed in guild %s"
    ADVANCE_NOT_NEEDED = "Skipping auto-advance in guild %s: playback already active"
    REQUEUED_BEHIND_ACTIVE = "Kept %s at the front of the queue in guild %s: another stream started"
    QUEUE_FINISHED = "Queue finished in guild %s"
    VOLUME_SET = "Volume for guild %s set to %.2f"

    # Voting
    VOTE_RECORDED = "Skip vote %d/%d recorded in guild %s"
    SKIP_EXECUTED = "Skip executed in guild %s (%s)"
    NOTHING_TO_SKIP = "Skip ignored in guild %s: queue length %d"

    # Player backend
    PLAYER_NO_STREAM_URL = "No stream URL for '%s'"
    PLAYER_ERROR = "Playback error in guild %s: %s"
    PLAYER_CALLBACK_ERROR = "Error in track-end callback for guild %s: %s"
    PLAYER_NO_CALLBACK = "No track-end callback registered for guild %s"

    # Persistence
    CACHE_DB_INITIALIZED = "Cache database initialized at %s"
    CACHE_DB_CLOSED = "Cache database closed"
