from __future__ import annotations

from collections.abc import Sequence

import pytest

from yt_voice_bot.application.interfaces.gateway import Gateway
from yt_voice_bot.application.interfaces.voice_transport import (
    TrackEndHandler,
    VoiceConnection,
    VoiceTransport,
)
from yt_voice_bot.domain.session.entities import AudioRequest
from yt_voice_bot.domain.shared.events import reset_event_bus
from yt_voice_bot.domain.shared.exceptions import (
    MessageSendError,
    VoiceJoinError,
    VoiceLeaveError,
    VoiceTransportError,
)

GUILD_ID = 111111111111111111
CHANNEL_A = 222222222222222222
CHANNEL_B = 333333333333333333
TEXT_CHANNEL = 444444444444444444
USER_ID = 555555555555555555


# ============================================================================
# In-memory collaborators
# ============================================================================


class FakeConnection(VoiceConnection):
    """Voice connection whose queue is a plain list and whose tracks end on demand."""

    def __init__(self, channel_id: int | None) -> None:
        self.channel_id = channel_id
        self.queue: list[AudioRequest] = []
        self.subscriptions: list[TrackEndHandler] = []
        self.stop_calls = 0
        self.leave_calls = 0
        self.leave_error: str | None = None
        self.calls: list[str] = []

    def current_channel_id(self) -> int | None:
        return self.channel_id

    async def enqueue(self, request: AudioRequest) -> None:
        self.queue.append(request)

    def queue_len(self) -> int:
        return len(self.queue)

    def queue_skip(self) -> None:
        if self.queue:
            self.queue.pop(0)

    def queue_stop(self) -> None:
        self.calls.append("queue_stop")
        self.stop_calls += 1
        self.queue.clear()

    def remove_event_subscriptions(self) -> None:
        self.calls.append("remove_event_subscriptions")
        self.subscriptions.clear()

    def add_track_end_subscription(self, handler: TrackEndHandler) -> None:
        self.subscriptions.append(handler)

    async def leave(self) -> None:
        self.calls.append("leave")
        self.leave_calls += 1
        if self.leave_error is not None:
            raise VoiceLeaveError(0, self.leave_error)
        self.channel_id = None

    async def finish_head(self) -> None:
        """Simulate the playing track running out and fire the subscriptions."""
        ended: Sequence[AudioRequest] = [self.queue.pop(0)] if self.queue else []
        for handler in list(self.subscriptions):
            await handler(ended)


class FakeTransport(VoiceTransport):
    def __init__(self) -> None:
        self.connections: dict[int, FakeConnection] = {}
        self.join_calls: list[tuple[int, int]] = []
        self.join_error: str | None = None
        self.remove_error: str | None = None
        self.removed: list[int] = []

    async def join(self, guild_id: int, channel_id: int) -> VoiceConnection:
        self.join_calls.append((guild_id, channel_id))
        if self.join_error is not None:
            raise VoiceJoinError(guild_id, channel_id, self.join_error)
        connection = self.connections.get(guild_id)
        if connection is None:
            connection = FakeConnection(channel_id)
            self.connections[guild_id] = connection
        else:
            connection.channel_id = channel_id
        return connection

    def get(self, guild_id: int) -> VoiceConnection | None:
        return self.connections.get(guild_id)

    async def remove(self, guild_id: int) -> None:
        connection = self.connections.pop(guild_id, None)
        if connection is not None:
            connection.calls.append("remove")
        self.removed.append(guild_id)
        if self.remove_error is not None:
            raise VoiceTransportError(guild_id, self.remove_error)


class FakeGateway(Gateway):
    def __init__(self) -> None:
        self.posts: list[tuple[int, str]] = []
        self.occupants: dict[int, list[int]] = {}
        self.fail_posts = False

    async def post(self, channel_id: int, text: str) -> None:
        if self.fail_posts:
            raise MessageSendError(channel_id, "Missing Access")
        self.posts.append((channel_id, text))

    def channel_occupants(self, guild_id: int, channel_id: int) -> list[int]:
        return list(self.occupants.get(channel_id, []))


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _fresh_event_bus():
    """Every test gets its own global event bus."""
    reset_event_bus()
    yield
    reset_event_bus()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def registry():
    from yt_voice_bot.domain.session.registry import SessionRegistry

    return SessionRegistry()


@pytest.fixture
def orchestrator(registry, transport, gateway):
    from yt_voice_bot.application.services.session_orchestrator import SessionOrchestrator

    return SessionOrchestrator(registry=registry, transport=transport, gateway=gateway)


@pytest.fixture
def make_play():
    """Factory for play commands in the default guild."""
    from yt_voice_bot.application.commands.play_track import PlayTrackCommand

    def _make(url: str = "https://youtu.be/a", channel_id: int | None = CHANNEL_A) -> PlayTrackCommand:
        return PlayTrackCommand(
            guild_id=GUILD_ID,
            requester_channel_id=channel_id,
            request=AudioRequest(url=url, requested_by_id=USER_ID),
            notify_channel_id=TEXT_CHANNEL,
        )

    return _make
