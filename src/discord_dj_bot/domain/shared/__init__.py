"""
Shared Domain Kernel

Contains exceptions, constrained types and message catalogues shared across the domain.
"""

from discord_dj_bot.domain.shared.exceptions import (
    DomainError,
    InvalidOperationError,
    MissingPermissionError,
    NoResultsError,
    NothingPlayingError,
    NothingToSkipError,
    NotConnectedError,
    NotInVoiceChannelError,
    ResolutionError,
    StreamAcquisitionError,
    ValidationError,
    VoiceConnectionError,
)

__all__ = [
    "DomainError",
    "InvalidOperationError",
    "MissingPermissionError",
    "NoResultsError",
    "NothingPlayingError",
    "NothingToSkipError",
    "NotConnectedError",
    "NotInVoiceChannelError",
    "ResolutionError",
    "StreamAcquisitionError",
    "ValidationError",
    "VoiceConnectionError",
]
