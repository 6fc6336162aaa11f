"""Port interfaces for voice connections and audio players."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.value_objects import PlayerEvent
    from .stream_provider import AudioStream

PlayerListener = Callable[["PlayerEvent"], None]


class AudioPlayer(ABC):
    """Streams one resource at a time over the connection it is bound to.

    Implementations deliver every ``PlayerEvent`` to the registered listener
    on the event loop thread, echoing the token given to ``play``.
    """

    @abstractmethod
    def set_listener(self, listener: PlayerListener) -> None:
        """Register the event listener, replacing any previous one."""
        ...

    @abstractmethod
    def play(self, stream: AudioStream, token: int) -> None:
        """Start playing ``stream``; the player owns and closes it from now on.

        Raises:
            StreamAcquisitionError: The resource could not be started.
        """
        ...

    @abstractmethod
    def stop(self) -> None:
        """Stop the current resource; a FINISHED event follows."""
        ...

    @abstractmethod
    def pause(self) -> bool:
        ...

    @abstractmethod
    def resume(self) -> bool:
        ...


class VoiceConnection(ABC):
    """A live voice transport session in one guild."""

    guild_id: int

    @property
    @abstractmethod
    def channel_id(self) -> int | None:
        ...

    @abstractmethod
    def is_connected(self) -> bool:
        ...

    @abstractmethod
    async def move_to(self, channel_id: int) -> None:
        """Move the live session to another channel in the same guild."""
        ...

    @abstractmethod
    async def reconnect(self) -> None:
        """Try once to re-establish the session.

        Raises:
            VoiceConnectionError: The session could not be re-established.
        """
        ...

    @abstractmethod
    async def destroy(self) -> None:
        ...

    @abstractmethod
    def create_player(self, volume: float) -> AudioPlayer:
        """Create an audio player bound to this connection."""
        ...


class VoiceGateway(ABC):
    """Entry point to the voice transport."""

    @abstractmethod
    async def connect(self, guild_id: int, channel_id: int) -> VoiceConnection:
        """Join a voice channel.

        Raises:
            VoiceConnectionError: Joining failed or timed out.
        """
        ...

    @abstractmethod
    def member_channel_id(self, guild_id: int, member_id: int) -> int | None:
        """Return the voice channel a member is currently in, if any."""
        ...
