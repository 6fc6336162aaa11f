"""
Music Domain Repository Interfaces

Abstract base classes defining the contract for guild queue storage.
Implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from discord_dj_bot.domain.music.entities import GuildQueue


class GuildQueueStore(ABC):
    """Process-wide mapping from guild ID to its queue.

    Queues are created on first access and live until the process exits.
    Lookups are synchronous so that get-or-create cannot interleave with
    other coroutines on the event loop.
    """

    @abstractmethod
    def get(self, guild_id: int) -> GuildQueue:
        """Return the queue for a guild, creating an empty one if needed.

        Args:
            guild_id: The Discord guild ID.

        Returns:
            The existing or newly created queue.
        """
        ...

    @abstractmethod
    def peek(self, guild_id: int) -> GuildQueue | None:
        """Return the queue for a guild without creating it."""
        ...

    @abstractmethod
    def guild_ids(self) -> list[int]:
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...

    def __iter__(self) -> Iterator[GuildQueue]:
        for guild_id in self.guild_ids():
            queue = self.peek(guild_id)
            if queue is not None:
                yield queue
