"""Port interfaces for the voice transport (connections and their track queues)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.session.entities import AudioRequest

TrackEndHandler = Callable[[Sequence["AudioRequest"]], Awaitable[None]]
"""Called with the requests whose tracks just finished playing."""


class VoiceConnection(ABC):
    """A live voice connection in one guild, owning a FIFO track queue.

    The head of the queue is the track currently playing. Finishing or
    skipping it fires every track-end subscription; stopping the queue
    does not.
    """

    @abstractmethod
    def current_channel_id(self) -> int | None:
        """The voice channel currently joined, or None once disconnected."""
        ...

    @abstractmethod
    async def enqueue(self, request: AudioRequest) -> None:
        """Append *request* to the queue, starting it if nothing is playing."""
        ...

    @abstractmethod
    def queue_len(self) -> int:
        ...

    @abstractmethod
    def queue_skip(self) -> None:
        """Stop the head of the queue and advance. No-op on an empty queue."""
        ...

    @abstractmethod
    def queue_stop(self) -> None:
        """Drop every queued track and stop playback without firing track-end events."""
        ...

    @abstractmethod
    def remove_event_subscriptions(self) -> None:
        ...

    @abstractmethod
    def add_track_end_subscription(self, handler: TrackEndHandler) -> None:
        ...

    @abstractmethod
    async def leave(self) -> None:
        """Disconnect from the voice channel.

        Raises:
            VoiceLeaveError: If the disconnect fails.
        """
        ...


class VoiceTransport(ABC):
    """Registry of voice connections, one per guild."""

    @abstractmethod
    async def join(self, guild_id: int, channel_id: int) -> VoiceConnection:
        """Join (or move to) *channel_id*, returning the guild's connection.

        Raises:
            VoiceJoinError: On permission errors, timeouts, or client errors.
        """
        ...

    @abstractmethod
    def get(self, guild_id: int) -> VoiceConnection | None:
        ...

    @abstractmethod
    async def remove(self, guild_id: int) -> None:
        """Drop the guild's connection from the transport entirely.

        Raises:
            VoiceTransportError: If the underlying client could not be released.
        """
        ...
