"""Track-end subscription that posts a status line and asks for a teardown check."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ...domain.shared.exceptions import MessageSendError
from ...domain.shared.messages import DiscordUIMessages, LogTemplates

if TYPE_CHECKING:
    from ...domain.session.entities import AudioRequest
    from ..interfaces.gateway import Gateway
    from .session_orchestrator import SessionOrchestrator

logger = logging.getLogger(__name__)


class TrackCompletionWatcher:
    """Attached to a connection on every join; one live instance per session.

    The status message goes out before the guild lock is taken so a slow
    send never holds up commands for that guild.
    """

    def __init__(
        self,
        *,
        guild_id: int,
        notify_channel_id: int,
        gateway: Gateway,
        orchestrator: SessionOrchestrator,
    ) -> None:
        self.guild_id = guild_id
        self.notify_channel_id = notify_channel_id
        self._gateway = gateway
        self._orchestrator = orchestrator

    async def __call__(self, ended: Sequence[AudioRequest]) -> None:
        logger.info(LogTemplates.SESSION_TRACKS_ENDED, self.guild_id)

        try:
            await self._gateway.post(
                self.notify_channel_id,
                DiscordUIMessages.TRACKS_ENDED.format(count=len(ended)),
            )
        except MessageSendError as e:
            logger.error(LogTemplates.MESSAGE_SEND_FAILED, e.cause)

        await self._orchestrator.handle_tracks_ended(self.guild_id)
