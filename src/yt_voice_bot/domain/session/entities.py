"""Core domain entities for the voice-session bounded context."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from yt_voice_bot.domain.shared.types import DiscordSnowflake, HttpUrlStr

if TYPE_CHECKING:
    from yt_voice_bot.application.interfaces.voice_transport import VoiceConnection


class AudioRequest(BaseModel):
    """Immutable value object for a source a user asked to play."""

    model_config = ConfigDict(frozen=True, strict=True)

    url: HttpUrlStr
    requested_by_id: DiscordSnowflake | None = None

    def __str__(self) -> str:
        return self.url


class VoiceSession(BaseModel):
    """The bot's live voice presence in one guild.

    The playback queue itself lives on the transport ``connection``; the
    session forwards queue operations so callers never reach past it.
    ``channel_id`` is fixed for the lifetime of the session: switching
    channels replaces the session instead of mutating it.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    guild_id: DiscordSnowflake = Field(frozen=True)
    channel_id: DiscordSnowflake = Field(frozen=True)
    notify_channel_id: DiscordSnowflake
    connection: Any = Field(exclude=True, repr=False)

    @property
    def voice(self) -> VoiceConnection:
        return self.connection

    @property
    def queue_len(self) -> int:
        return self.voice.queue_len()

    @property
    def is_connected(self) -> bool:
        return self.voice.current_channel_id() is not None

    async def enqueue(self, request: AudioRequest) -> int:
        """Append to the queue and return the new queue length."""
        await self.voice.enqueue(request)
        return self.voice.queue_len()

    def skip(self) -> int:
        """Drop the head of the queue and return how many tracks remain."""
        self.voice.queue_skip()
        return self.voice.queue_len()

    def clear(self) -> None:
        self.voice.queue_stop()
