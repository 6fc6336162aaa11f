"""Port interface for acquiring raw audio byte streams."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import IO


class AudioStream(ABC):
    """A live audio byte stream backed by an external resource.

    ``close()`` must be idempotent and release the backing resource.
    """

    source_reference: str

    @property
    @abstractmethod
    def stdout(self) -> IO[bytes]:
        ...

    @property
    @abstractmethod
    def closed(self) -> bool:
        ...

    @abstractmethod
    def close(self) -> None:
        ...

    def __enter__(self) -> AudioStream:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class StreamProvider(ABC):
    @abstractmethod
    async def open(self, source_reference: str) -> AudioStream:
        """Start streaming the referenced media.

        Raises:
            StreamAcquisitionError: The stream could not be started.
        """
        ...
