"""Leave voice channels that no human is listening in anymore."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...domain.shared.events import VoiceStateChanged, get_event_bus

if TYPE_CHECKING:
    from .session_orchestrator import SessionOrchestrator

logger = logging.getLogger(__name__)


class PresenceWatcher:
    """Event-bus subscriber for every voice-state change in every guild."""

    def __init__(self, *, orchestrator: SessionOrchestrator) -> None:
        self._orchestrator = orchestrator
        self._bus = get_event_bus()
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> None:
        if self._started:
            return
        self._bus.subscribe(VoiceStateChanged, self._on_voice_state_changed)
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._bus.unsubscribe(VoiceStateChanged, self._on_voice_state_changed)
        self._started = False

    async def _on_voice_state_changed(self, event: VoiceStateChanged) -> None:
        logger.debug(
            "Voice state changed in guild %s: user %s %s -> %s",
            event.guild_id,
            event.user_id,
            event.before_channel_id,
            event.after_channel_id,
        )
        await self._orchestrator.handle_presence_change(event.guild_id)
