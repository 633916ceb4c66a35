"""Command and result models for playing a URL in the requester's voice channel."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from yt_voice_bot.domain.session.entities import AudioRequest
from yt_voice_bot.domain.shared.types import DiscordSnowflake, NonNegativeInt


class PlayStatus(Enum):
    """Status codes for play results."""

    JOINED = "joined"
    ENQUEUED = "enqueued"
    NO_VOICE_CHANNEL = "no_voice_channel"
    JOIN_FAILED = "join_failed"


class PlayTrackCommand(BaseModel):
    """Request to play *request* for a member of *guild_id*.

    ``requester_channel_id`` is the voice channel the requester is sitting in,
    or None when they are not in one.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    guild_id: DiscordSnowflake
    requester_channel_id: DiscordSnowflake | None
    request: AudioRequest
    notify_channel_id: DiscordSnowflake


class PlayResult(BaseModel):
    """Outcome of a play command.

    ``queue_len`` counts the tracks waiting behind the one currently playing
    once the new request has been added.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    status: PlayStatus
    channel_id: DiscordSnowflake | None = None
    queue_len: NonNegativeInt = 0
    cause: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status in {PlayStatus.JOINED, PlayStatus.ENQUEUED}

    @classmethod
    def joined(cls, channel_id: int) -> PlayResult:
        return cls(status=PlayStatus.JOINED, channel_id=channel_id)

    @classmethod
    def enqueued(cls, channel_id: int, queue_len: int) -> PlayResult:
        return cls(status=PlayStatus.ENQUEUED, channel_id=channel_id, queue_len=queue_len)

    @classmethod
    def no_voice_channel(cls) -> PlayResult:
        return cls(status=PlayStatus.NO_VOICE_CHANNEL)

    @classmethod
    def join_failed(cls, channel_id: int, cause: str) -> PlayResult:
        return cls(status=PlayStatus.JOIN_FAILED, channel_id=channel_id, cause=cause)
