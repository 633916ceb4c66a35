"""Port interface for the chat gateway (messaging and voice-state cache)."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Gateway(ABC):
    """Messaging and presence lookups provided by the chat platform."""

    @abstractmethod
    async def post(self, channel_id: int, text: str) -> None:
        """Send *text* to a text channel.

        Raises:
            MessageSendError: If the message could not be delivered.
        """
        ...

    @abstractmethod
    def channel_occupants(self, guild_id: int, channel_id: int) -> list[int]:
        """User ids of the non-bot members currently in a voice channel."""
        ...
