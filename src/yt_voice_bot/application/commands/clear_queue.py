"""Result model for clearing the queue."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ClearStatus(Enum):
    """Status codes for clear queue results."""

    CLEARED = "cleared"
    NOT_ACTIVE = "not_active"


class ClearResult(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    status: ClearStatus

    @property
    def is_success(self) -> bool:
        return self.status == ClearStatus.CLEARED

    @classmethod
    def cleared(cls) -> ClearResult:
        return cls(status=ClearStatus.CLEARED)

    @classmethod
    def not_active(cls) -> ClearResult:
        return cls(status=ClearStatus.NOT_ACTIVE)
