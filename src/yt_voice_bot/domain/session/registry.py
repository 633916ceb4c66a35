"""Process-wide registry of active voice sessions, keyed by guild."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Iterator

from yt_voice_bot.domain.session.entities import VoiceSession

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Map of guild id to :class:`VoiceSession` plus one lock per guild.

    The registry does no locking of its own. Callers that read an entry and
    then act on it must hold ``lock(guild_id)`` across both steps.
    """

    def __init__(self) -> None:
        self._sessions: dict[int, VoiceSession] = {}
        self._locks: dict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    def lock(self, guild_id: int) -> asyncio.Lock:
        return self._locks[guild_id]

    def get(self, guild_id: int) -> VoiceSession | None:
        return self._sessions.get(guild_id)

    def put(self, session: VoiceSession) -> VoiceSession | None:
        """Store *session*, returning the entry it replaced (if any)."""
        previous = self._sessions.get(session.guild_id)
        self._sessions[session.guild_id] = session
        logger.debug("Registered session for guild %s", session.guild_id)
        return previous

    def pop(self, guild_id: int) -> VoiceSession | None:
        session = self._sessions.pop(guild_id, None)
        if session is not None:
            logger.debug("Removed session for guild %s", guild_id)
        return session

    def guild_ids(self) -> list[int]:
        return list(self._sessions)

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[VoiceSession]:
        return iter(list(self._sessions.values()))
