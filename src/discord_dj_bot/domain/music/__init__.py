"""
Music Playback Context

Domain records for songs, per-guild queues and the playback state machine.
"""

from discord_dj_bot.domain.music.entities import GuildQueue, Song, SongCandidate
from discord_dj_bot.domain.music.repository import GuildQueueStore
from discord_dj_bot.domain.music.value_objects import (
    AdvanceRequest,
    PlaybackState,
    PlayerEvent,
    PlayerEventKind,
)

__all__ = [
    # Entities
    "Song",
    "SongCandidate",
    "GuildQueue",
    # Value Objects
    "PlaybackState",
    "PlayerEvent",
    "PlayerEventKind",
    "AdvanceRequest",
    # Repository
    "GuildQueueStore",
]
