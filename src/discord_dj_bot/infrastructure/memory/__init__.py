"""In-process storage adapters."""

from discord_dj_bot.infrastructure.memory.queue_store import InMemoryGuildQueueStore

__all__ = ["InMemoryGuildQueueStore"]
