"""Exception classes for domain-level errors.

Every failure the coordinator surfaces to its caller is a ``DomainError``
subclass carrying a stable ``code`` that the command layer can map to a
user-facing message.
"""

from __future__ import annotations

from music_coordinator.domain.shared.messages import ErrorMessages


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when domain validation fails."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


# ── Connect phase ──────────────────────────────────────────────────


class InvalidChannelError(DomainError):
    """No voice target or text channel was given, or the channel has no guild."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or ErrorMessages.NOT_CHANNEL, code="notChannel")


class AlreadyBoundError(DomainError):
    """The session is already bound to a different text channel."""

    def __init__(self, guild_id: int, bound_channel_id: int) -> None:
        super().__init__(
            ErrorMessages.ALREADY_BOUND.format(channel_id=bound_channel_id),
            code="alreadyBinded",
        )
        self.guild_id = guild_id
        self.bound_channel_id = bound_channel_id


class NoPermissionError(DomainError):
    def __init__(self, missing: tuple[str, ...] = ()) -> None:
        super().__init__(ErrorMessages.NO_PERMISSION, code="noPerms")
        self.missing = missing


class VoiceConnectionError(DomainError):
    """The voice backend refused or failed the connect call."""

    def __init__(self, guild_id: int, channel_id: int, reason: str | None = None) -> None:
        super().__init__(
            ErrorMessages.CONNECTION_FAILED.format(channel_id=channel_id, reason=reason),
            code="error",
        )
        self.guild_id = guild_id
        self.channel_id = channel_id


class NotConnectedError(DomainError):
    """Playback was requested while no voice connection exists."""

    def __init__(self, guild_id: int) -> None:
        super().__init__(ErrorMessages.NOT_CONNECTED, code="error")
        self.guild_id = guild_id


# ── Admission phase ────────────────────────────────────────────────


class InvalidURLError(DomainError):
    def __init__(self) -> None:
        super().__init__(ErrorMessages.INVALID_URL, code="invalidURL")


class ResolutionFailedError(DomainError):
    """The resolver backend raised while looking the reference up."""

    def __init__(self, reference: str, reason: str | None = None) -> None:
        super().__init__(
            ErrorMessages.RESOLUTION_FAILED.format(reference=reference, reason=reason),
            code="resolutionFailed",
        )
        self.reference = reference


class NoMediaFoundError(DomainError):
    def __init__(self, reference: str) -> None:
        super().__init__(
            ErrorMessages.NO_MEDIA_FOUND.format(reference=reference), code="noVideoFound"
        )
        self.reference = reference


class NoPlayableAudioError(DomainError):
    def __init__(self, reference: str) -> None:
        super().__init__(
            ErrorMessages.NO_PLAYABLE_AUDIO.format(reference=reference), code="noPlayableAudio"
        )
        self.reference = reference


class TooLongError(DomainError):
    def __init__(self, length: int, limit: int) -> None:
        super().__init__(
            ErrorMessages.TOO_LONG.format(length=length, limit=limit), code="tooLong"
        )
        self.length = length
        self.limit = limit


# ── Queue state ────────────────────────────────────────────────────


class QueueEmptyError(DomainError):
    def __init__(self, guild_id: int | None = None) -> None:
        super().__init__(ErrorMessages.QUEUE_EMPTY, code="queueEmpty")
        self.guild_id = guild_id


class NoSongsError(DomainError):
    """Play was requested but nothing is queued."""

    def __init__(self, guild_id: int) -> None:
        super().__init__(ErrorMessages.NO_SONGS, code="noSongs")
        self.guild_id = guild_id
