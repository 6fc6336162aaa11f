"""Port interface for resolving queries and URLs to song candidates."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.entities import SongCandidate


class AudioResolver(ABC):
    """Interface for turning user queries into playable song metadata."""

    @abstractmethod
    def is_direct_reference(self, query: str) -> bool:
        """Return True when the query already addresses a single playable media item."""
        ...

    @abstractmethod
    async def resolve(self, query: str) -> SongCandidate:
        """Resolve a URL or search term to its top candidate.

        Raises:
            NoResultsError: The search returned nothing.
            ResolutionError: The provider failed; ``cause`` holds the original error.
        """
        ...

    @abstractmethod
    async def search(self, query: str, limit: int = 5) -> list[SongCandidate]:
        """Return up to ``limit`` candidates without enqueueing anything."""
        ...
