"""Immutable value objects for the music playback context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PlaybackState(Enum):
    """Playback state of a guild queue with enforced transitions.

    State transitions:
    - IDLE -> CONNECTING (advance with songs queued)
    - CONNECTING -> ACTIVE (player reported it started)
    - CONNECTING -> CONNECTING (stream failed, next song attempted)
    - CONNECTING -> DRAINING (player finished before it ever started)
    - ACTIVE <-> PAUSED
    - ACTIVE/PAUSED -> DRAINING (track ended, failed or was skipped)
    - DRAINING -> CONNECTING (next song) or IDLE (queue empty)
    - Any -> IDLE (stop, leave, disconnect, connect failure)
    """

    IDLE = "idle"
    CONNECTING = "connecting"
    ACTIVE = "active"
    PAUSED = "paused"
    DRAINING = "draining"

    def can_transition_to(self, target: PlaybackState) -> bool:
        """Check if transition to target state is valid."""
        if target is PlaybackState.IDLE:
            return True
        valid_transitions = {
            PlaybackState.IDLE: {PlaybackState.CONNECTING},
            PlaybackState.CONNECTING: {
                PlaybackState.ACTIVE,
                PlaybackState.CONNECTING,
                PlaybackState.DRAINING,
            },
            PlaybackState.ACTIVE: {PlaybackState.PAUSED, PlaybackState.DRAINING},
            PlaybackState.PAUSED: {PlaybackState.ACTIVE, PlaybackState.DRAINING},
            PlaybackState.DRAINING: {PlaybackState.CONNECTING},
        }
        return target in valid_transitions.get(self, set())

    @property
    def is_playing(self) -> bool:
        """Player bound and consuming the head; pause does not clear it."""
        return self in {PlaybackState.ACTIVE, PlaybackState.PAUSED}

    @property
    def has_track_in_flight(self) -> bool:
        return self is not PlaybackState.IDLE


class PlayerEventKind(Enum):
    """Signals an audio player reports back about the resource it was given."""

    STARTED = "started"
    FINISHED = "finished"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self is not PlayerEventKind.STARTED


@dataclass(frozen=True, slots=True)
class PlayerEvent:
    """A player signal tagged with the playback token it belongs to.

    Tokens let the engine discard signals from attempts that were stopped or
    superseded.
    """

    kind: PlayerEventKind
    token: int
    error: BaseException | None = None


@dataclass(frozen=True, slots=True)
class AdvanceRequest:
    """Ask the guild's coordinator to start the head song if it is idle."""

    reason: str = "enqueue"
