"""
Domain Layer

Contains pure playback logic:
- shared/: Cross-cutting types, exceptions and message catalogues
- music/: Song records, guild queues and the playback state machine
"""

from discord_dj_bot.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
