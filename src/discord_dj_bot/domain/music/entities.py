"""Core domain entities for the music playback context."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from discord_dj_bot.domain.music.value_objects import PlaybackState
from discord_dj_bot.domain.shared.exceptions import InvalidOperationError
from discord_dj_bot.domain.shared.messages import LogTemplates
from discord_dj_bot.domain.shared.types import (
    DiscordSnowflake,
    DurationSeconds,
    NonEmptyStr,
    NonNegativeInt,
    SongTitleStr,
    UtcDatetimeField,
    VolumeFloat,
    utcnow,
)
from discord_dj_bot.utils.reply import format_duration

logger = logging.getLogger(__name__)

UNKNOWN_TITLE = "Unknown Title"
MAX_TITLE_LENGTH = 500


def _title_or_placeholder(v: Any) -> str:
    if not isinstance(v, str) or not v.strip():
        return UNKNOWN_TITLE
    return v.strip()[:MAX_TITLE_LENGTH]


def _duration_or_zero(v: Any) -> int:
    if v is None:
        return 0
    try:
        val = int(v)
    except (TypeError, ValueError):
        return 0
    return max(val, 0)


class SongCandidate(BaseModel):
    """Resolver output: metadata for one playable song, not yet requested by anyone."""

    model_config = ConfigDict(frozen=True)

    title: SongTitleStr = UNKNOWN_TITLE
    source_reference: NonEmptyStr
    duration_seconds: DurationSeconds = 0
    thumbnail_url: str | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        return _title_or_placeholder(v)

    @field_validator("duration_seconds", mode="before")
    @classmethod
    def _coerce_duration(cls, v: Any) -> int:
        return _duration_or_zero(v)

    @property
    def duration_formatted(self) -> str:
        return format_duration(self.duration_seconds)


class Song(BaseModel):
    """Immutable record of one queued song."""

    model_config = ConfigDict(frozen=True, strict=True)

    title: SongTitleStr
    source_reference: NonEmptyStr
    duration_seconds: DurationSeconds = 0
    thumbnail_url: str | None = None

    requester_id: DiscordSnowflake
    requester_name: NonEmptyStr
    added_at: UtcDatetimeField = Field(default_factory=utcnow)

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        return _title_or_placeholder(v)

    @field_validator("duration_seconds", mode="before")
    @classmethod
    def _coerce_duration(cls, v: Any) -> int:
        return _duration_or_zero(v)

    @classmethod
    def from_candidate(
        cls,
        candidate: SongCandidate,
        *,
        requester_id: int,
        requester_name: str,
        added_at: datetime | None = None,
    ) -> Song:
        return cls(
            title=candidate.title,
            source_reference=candidate.source_reference,
            duration_seconds=candidate.duration_seconds,
            thumbnail_url=candidate.thumbnail_url,
            requester_id=requester_id,
            requester_name=requester_name,
            added_at=added_at or utcnow(),
        )

    @property
    def duration_formatted(self) -> str:
        """Format duration as M:SS or H:MM:SS; unknown renders as 0:00."""
        return format_duration(self.duration_seconds)


class GuildQueue(BaseModel):
    """Playback state for a single guild: the song FIFO plus the voice handles it owns.

    ``connection`` and ``player`` are owned exclusively by this queue and never
    shared across guilds. ``notify_target`` is only used to send messages.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    guild_id: DiscordSnowflake
    songs: list[Song] = Field(default_factory=list)
    connection: Any = None
    player: Any = None
    notify_target: Any = None
    summoner_id: DiscordSnowflake | None = None
    state: PlaybackState = PlaybackState.IDLE
    volume: VolumeFloat = 0.5
    playback_token: NonNegativeInt = 0
    created_at: UtcDatetimeField = Field(default_factory=utcnow)

    @property
    def head(self) -> Song | None:
        return self.songs[0] if self.songs else None

    @property
    def upcoming(self) -> list[Song]:
        return self.songs[1:]

    @property
    def queue_length(self) -> int:
        return len(self.songs)

    @property
    def is_empty(self) -> bool:
        return not self.songs

    @property
    def is_playing(self) -> bool:
        return self.state.is_playing

    @property
    def total_duration_seconds(self) -> int:
        return sum(song.duration_seconds for song in self.songs)

    def add(self, song: Song) -> int:
        """Append a song and return its 1-based position."""
        self.songs.append(song)
        return len(self.songs)

    def pop_head(self) -> Song | None:
        if not self.songs:
            return None
        return self.songs.pop(0)

    def clear_upcoming(self) -> int:
        """Drop queued songs; the head survives while a track is in flight."""
        if self.state.has_track_in_flight and self.songs:
            count = len(self.songs) - 1
            del self.songs[1:]
            return count
        return self.clear_all()

    def clear_all(self) -> int:
        count = len(self.songs)
        self.songs.clear()
        return count

    def next_token(self) -> int:
        """Start a new playback attempt; events tagged with older tokens become stale."""
        self.playback_token += 1
        return self.playback_token

    def transition_to(self, new_state: PlaybackState) -> None:
        if not self.state.can_transition_to(new_state):
            raise InvalidOperationError(
                operation=f"transition to {new_state.value}",
                current_state=self.state.value,
                message=f"Cannot transition from {self.state.value} to {new_state.value}",
            )
        if new_state is not self.state:
            logger.debug(LogTemplates.QUEUE_STATE, self.guild_id, self.state.value, new_state.value)
        self.state = new_state

    def release_voice(self) -> None:
        """Forget the connection and player handles; callers destroy them first."""
        self.connection = None
        self.player = None
