"""Port interface for user-facing playback notifications."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.entities import GuildQueue, Song


class Notifier(ABC):
    """Sends status messages to a queue's notify target.

    Implementations swallow and log delivery failures; notifications never
    affect queue state.
    """

    @abstractmethod
    async def added_to_queue(self, queue: GuildQueue, song: Song, position: int) -> None:
        ...

    @abstractmethod
    async def now_playing(self, queue: GuildQueue, song: Song) -> None:
        ...

    @abstractmethod
    async def queue_empty(self, queue: GuildQueue) -> None:
        ...

    @abstractmethod
    async def track_failed(self, queue: GuildQueue, song: Song | None) -> None:
        """The player reported an error while playing ``song``."""
        ...

    @abstractmethod
    async def stream_failed(self, queue: GuildQueue, song: Song) -> None:
        """The audio stream for ``song`` could not be started; it is being skipped."""
        ...

    @abstractmethod
    async def voice_channel_left(self, queue: GuildQueue) -> None:
        """Nobody to follow into voice; the queue was cleared."""
        ...

    @abstractmethod
    async def connection_failed(self, queue: GuildQueue) -> None:
        ...
