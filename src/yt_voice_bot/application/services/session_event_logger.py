"""Log session lifecycle events published by the orchestrator."""

from __future__ import annotations

import logging

from ...domain.shared.events import SessionCreated, SessionDestroyed, get_event_bus
from ...domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class SessionEventLogger:
    """Event-bus subscriber for SessionCreated and SessionDestroyed."""

    def __init__(self) -> None:
        self._bus = get_event_bus()
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> None:
        if self._started:
            return
        self._bus.subscribe(SessionCreated, self._on_created)
        self._bus.subscribe(SessionDestroyed, self._on_destroyed)
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._bus.unsubscribe(SessionCreated, self._on_created)
        self._bus.unsubscribe(SessionDestroyed, self._on_destroyed)
        self._started = False

    async def _on_created(self, event: SessionCreated) -> None:
        logger.info(
            LogTemplates.SESSION_STARTED_EVENT,
            event.guild_id,
            event.channel_id,
            event.occurred_at.isoformat(),
        )

    async def _on_destroyed(self, event: SessionDestroyed) -> None:
        logger.info(
            LogTemplates.SESSION_ENDED_EVENT,
            event.guild_id,
            event.reason or "unspecified",
            event.occurred_at.isoformat(),
        )
