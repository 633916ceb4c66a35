"""Reusable Pydantic Annotated types for domain-wide validation.

Constrained types are defined here once so models can simply annotate
their fields::

    from yt_voice_bot.domain.shared.types import DiscordSnowflake, HttpUrlStr

    class MyModel(BaseModel):
        guild_id: DiscordSnowflake
        url: HttpUrlStr
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

# ── Numeric constraints ─────────────────────────────────────────────

DiscordSnowflake = Annotated[int, Field(gt=0, lt=2**64)]
"""Positive integer that fits a Discord snowflake (1 … 2^64-1)."""

PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

HttpUrlStr = Annotated[str, Field(pattern=r"^https?://")]
"""String that starts with http:// or https://."""
