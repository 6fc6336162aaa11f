"""In-memory implementation of GuildQueueStore."""

from __future__ import annotations

import logging

from discord_dj_bot.domain.music.entities import GuildQueue
from discord_dj_bot.domain.music.repository import GuildQueueStore
from discord_dj_bot.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class InMemoryGuildQueueStore(GuildQueueStore):
    """Dictionary-backed queue store; state is lost on restart."""

    def __init__(self, default_volume: float = 0.5) -> None:
        self._default_volume = default_volume
        self._queues: dict[int, GuildQueue] = {}

    def get(self, guild_id: int) -> GuildQueue:
        queue = self._queues.get(guild_id)
        if queue is None:
            queue = GuildQueue(guild_id=guild_id, volume=self._default_volume)
            self._queues[guild_id] = queue
            logger.debug(LogTemplates.QUEUE_CREATED, guild_id)
        return queue

    def peek(self, guild_id: int) -> GuildQueue | None:
        return self._queues.get(guild_id)

    def guild_ids(self) -> list[int]:
        return list(self._queues)

    def __len__(self) -> int:
        return len(self._queues)
