"""Result model for skipping the track at the head of the queue."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from yt_voice_bot.domain.shared.types import NonNegativeInt


class SkipStatus(Enum):
    """Status codes for skip results."""

    SKIPPED = "skipped"
    NOT_ACTIVE = "not_active"


class SkipResult(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    status: SkipStatus
    remaining: NonNegativeInt = 0

    @property
    def is_success(self) -> bool:
        return self.status == SkipStatus.SKIPPED

    @classmethod
    def skipped(cls, remaining: int) -> SkipResult:
        return cls(status=SkipStatus.SKIPPED, remaining=remaining)

    @classmethod
    def not_active(cls) -> SkipResult:
        return cls(status=SkipStatus.NOT_ACTIVE)
