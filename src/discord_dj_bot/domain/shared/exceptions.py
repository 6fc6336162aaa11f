"""Base exception classes for domain-level errors.

Every error carries a user-facing ``message``; command handlers reply with it
verbatim and leave queue state untouched.
"""

from __future__ import annotations

from discord_dj_bot.domain.shared.messages import DiscordUIMessages


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


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


class NotInVoiceChannelError(DomainError):
    def __init__(self, message: str = DiscordUIMessages.ERROR_NOT_IN_VOICE) -> None:
        super().__init__(message, code="NOT_IN_VOICE_CHANNEL")


class MissingPermissionError(DomainError):
    """Raised when the bot lacks connect/speak permission in the caller's channel."""

    def __init__(
        self,
        permissions: tuple[str, ...] = ("connect", "speak"),
        message: str = DiscordUIMessages.ERROR_MISSING_VOICE_PERMISSIONS,
    ) -> None:
        super().__init__(message, code="MISSING_PERMISSION")
        self.permissions = permissions


class ResolutionError(DomainError):
    """Raised when a query cannot be turned into a song candidate."""

    def __init__(
        self,
        query: str,
        cause: BaseException | None = None,
        message: str = DiscordUIMessages.ERROR_LOAD_FAILED,
    ) -> None:
        super().__init__(message, code="RESOLUTION_ERROR")
        self.query = query
        self.cause = cause


class NoResultsError(ResolutionError):
    def __init__(self, query: str) -> None:
        super().__init__(query, message=DiscordUIMessages.ERROR_NO_RESULTS)
        self.code = "NO_RESULTS"


class StreamAcquisitionError(DomainError):
    """Raised when the external download process cannot supply an audio stream."""

    def __init__(self, source_reference: str, cause: BaseException | None = None) -> None:
        super().__init__(DiscordUIMessages.ERROR_STREAM_FAILED, code="STREAM_ACQUISITION")
        self.source_reference = source_reference
        self.cause = cause


class NothingPlayingError(DomainError):
    def __init__(self, message: str = DiscordUIMessages.ERROR_NOTHING_PLAYING) -> None:
        super().__init__(message, code="NOTHING_PLAYING")


class NothingToSkipError(DomainError):
    """Raised when skipping would leave nothing to play next."""

    def __init__(self) -> None:
        super().__init__(DiscordUIMessages.ERROR_NOTHING_TO_SKIP_TO, code="NOTHING_TO_SKIP")


class VoiceConnectionError(DomainError):
    """Raised when joining or reconnecting to a voice channel fails."""

    def __init__(
        self,
        channel_id: int | None = None,
        cause: BaseException | None = None,
        message: str = DiscordUIMessages.ERROR_JOIN_FAILED,
    ) -> None:
        super().__init__(message, code="VOICE_CONNECTION_ERROR")
        self.channel_id = channel_id
        self.cause = cause


class NotConnectedError(DomainError):
    def __init__(self, message: str = DiscordUIMessages.ERROR_NOT_CONNECTED) -> None:
        super().__init__(message, code="NOT_CONNECTED")
