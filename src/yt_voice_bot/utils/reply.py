"""Utility functions for formatting Discord messages."""

from __future__ import annotations

from functools import cache
from typing import Final

DISCORD_MESSAGE_LIMIT: Final[int] = 2000


def channel_mention(channel_id: int) -> str:
    return f"<#{channel_id}>"


@cache
def truncate(text: str, max_length: int = 90) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"
