"""
Unit Tests for the discord.py voice transport

Tests for:
- DiscordVoiceTransport.join: connect, move, no-op, and every failure mapping
- DiscordVoiceTransport.remove: dropping the connection and leftover voice clients
- DiscordVoiceConnection queue: lazy source creation, advancing on track end,
  skip, stop without events, resolve failures, and subscriber isolation
- DiscordVoiceConnection.leave error mapping

discord.py objects are MagicMocks with specs so isinstance checks hold.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from conftest import CHANNEL_A, CHANNEL_B, GUILD_ID
from yt_voice_bot.config.settings import AudioSettings
from yt_voice_bot.domain.session.entities import AudioRequest
from yt_voice_bot.domain.shared.exceptions import (
    AudioResolveError,
    VoiceJoinError,
    VoiceLeaveError,
    VoiceTransportError,
)
from yt_voice_bot.infrastructure.discord.adapters.voice_transport import (
    DiscordVoiceConnection,
    DiscordVoiceTransport,
)

URL_A = "https://youtu.be/a"
URL_B = "https://youtu.be/b"


async def _wait_for(predicate, timeout: float = 1.0) -> None:
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0)


def _voice_client(channel_id: int | None = CHANNEL_A, connected: bool = True) -> MagicMock:
    vc = MagicMock(spec=discord.VoiceClient)
    vc.is_connected.return_value = connected
    vc.is_playing.return_value = False
    vc.is_paused.return_value = False
    vc.disconnect = AsyncMock()
    vc.move_to = AsyncMock()
    if channel_id is None:
        vc.channel = None
    else:
        vc.channel = MagicMock()
        vc.channel.id = channel_id
    return vc


def _voice_channel(channel_id: int) -> MagicMock:
    channel = MagicMock(spec=discord.VoiceChannel)
    channel.id = channel_id
    channel.connect = AsyncMock()
    return channel


@pytest.fixture
def factory():
    factory = MagicMock()
    factory.create = AsyncMock(side_effect=lambda request: MagicMock(name=f"source:{request.url}"))
    return factory


@pytest.fixture
def vc():
    return _voice_client()


@pytest.fixture
async def connection(vc, factory):
    # Built inside the test's event loop; the connection captures it for FFmpeg callbacks.
    return DiscordVoiceConnection(GUILD_ID, vc, factory)


@pytest.fixture
def ended():
    """Record every track-end notification delivered to a subscriber."""
    return []


@pytest.fixture
def subscribed(connection, ended):
    async def _handler(requests):
        ended.append([r.url for r in requests])

    connection.add_track_end_subscription(_handler)
    return connection


def _finish_current(vc: MagicMock, error: Exception | None = None) -> None:
    """Invoke the after-callback of the most recent vc.play call, like FFmpeg's thread would."""
    after = vc.play.call_args.kwargs["after"]
    after(error)


# =============================================================================
# Connection queue
# =============================================================================


class TestDiscordVoiceConnection:
    async def test_current_channel_id(self, connection, vc):
        assert connection.current_channel_id() == CHANNEL_A

        vc.is_connected.return_value = False
        assert connection.current_channel_id() is None

    async def test_enqueue_starts_first_track(self, connection, vc, factory):
        await connection.enqueue(AudioRequest(url=URL_A))
        await _wait_for(lambda: vc.play.called)

        factory.create.assert_awaited_once_with(AudioRequest(url=URL_A))
        assert connection.queue_len() == 1

    async def test_second_track_waits(self, connection, vc, factory):
        await connection.enqueue(AudioRequest(url=URL_A))
        await _wait_for(lambda: vc.play.called)
        await connection.enqueue(AudioRequest(url=URL_B))
        await asyncio.sleep(0)

        assert vc.play.call_count == 1
        assert factory.create.await_count == 1
        assert connection.queue_len() == 2

    async def test_track_end_advances_and_notifies(self, subscribed, vc, ended):
        await subscribed.enqueue(AudioRequest(url=URL_A))
        await subscribed.enqueue(AudioRequest(url=URL_B))
        await _wait_for(lambda: vc.play.call_count == 1)

        _finish_current(vc)
        await _wait_for(lambda: ended and vc.play.call_count == 2)

        assert ended == [[URL_A]]
        assert subscribed.queue_len() == 1

    async def test_last_track_end_empties_queue(self, subscribed, vc, ended):
        await subscribed.enqueue(AudioRequest(url=URL_A))
        await _wait_for(lambda: vc.play.called)

        _finish_current(vc)
        await _wait_for(lambda: bool(ended))

        assert subscribed.queue_len() == 0

    async def test_skip_stops_playing_head(self, subscribed, vc, ended):
        """Skipping pops the head now; the stopped source's callback starts the next one."""
        await subscribed.enqueue(AudioRequest(url=URL_A))
        await subscribed.enqueue(AudioRequest(url=URL_B))
        await _wait_for(lambda: vc.play.called)

        subscribed.queue_skip()

        assert subscribed.queue_len() == 1
        vc.stop.assert_called_once()

        _finish_current(vc)
        await _wait_for(lambda: ended and vc.play.call_count == 2)
        assert ended == [[URL_A]]

    async def test_skip_on_empty_queue_is_noop(self, connection, vc):
        connection.queue_skip()

        vc.stop.assert_not_called()

    async def test_stop_drops_everything_without_events(self, subscribed, vc, ended):
        await subscribed.enqueue(AudioRequest(url=URL_A))
        await subscribed.enqueue(AudioRequest(url=URL_B))
        await _wait_for(lambda: vc.play.called)
        vc.is_playing.return_value = True

        subscribed.queue_stop()
        _finish_current(vc)
        for _ in range(5):
            await asyncio.sleep(0)

        assert subscribed.queue_len() == 0
        vc.stop.assert_called_once()
        assert ended == []
        assert vc.play.call_count == 1

    async def test_resolve_failure_skips_to_next(self, subscribed, vc, factory, ended):
        async def _create(request):
            if request.url == URL_A:
                raise AudioResolveError(request.url, "Video unavailable")
            return MagicMock()

        factory.create.side_effect = _create

        await subscribed.enqueue(AudioRequest(url=URL_A))
        await subscribed.enqueue(AudioRequest(url=URL_B))
        await _wait_for(lambda: vc.play.called and bool(ended))

        assert ended == [[URL_A]]
        assert subscribed.queue_len() == 1

    async def test_failing_subscriber_does_not_block_others(self, connection, vc, ended, caplog):
        async def _broken(requests):
            raise RuntimeError("handler exploded")

        async def _ok(requests):
            ended.append([r.url for r in requests])

        connection.add_track_end_subscription(_broken)
        connection.add_track_end_subscription(_ok)
        await connection.enqueue(AudioRequest(url=URL_A))
        await _wait_for(lambda: vc.play.called)

        _finish_current(vc)
        await _wait_for(lambda: bool(ended))

        assert "handler exploded" in caplog.text

    async def test_remove_event_subscriptions(self, subscribed, vc, ended):
        subscribed.remove_event_subscriptions()
        await subscribed.enqueue(AudioRequest(url=URL_A))
        await _wait_for(lambda: vc.play.called)

        _finish_current(vc)
        await _wait_for(lambda: subscribed.queue_len() == 0)

        assert ended == []

    async def test_leave_disconnects(self, connection, vc):
        await connection.leave()

        vc.disconnect.assert_awaited_once_with(force=True)

    async def test_leave_failure_raises(self, connection, vc):
        vc.disconnect.side_effect = discord.ClientException("not connected")

        with pytest.raises(VoiceLeaveError) as exc_info:
            await connection.leave()

        assert exc_info.value.cause == "not connected"


# =============================================================================
# Transport
# =============================================================================


@pytest.fixture
def guild():
    guild = MagicMock(spec=discord.Guild)
    guild.id = GUILD_ID
    guild.voice_client = None
    guild.change_voice_state = AsyncMock()
    channels = {CHANNEL_A: _voice_channel(CHANNEL_A), CHANNEL_B: _voice_channel(CHANNEL_B)}
    guild.get_channel.side_effect = channels.get
    return guild


@pytest.fixture
def bot(guild):
    bot = MagicMock()
    bot.get_guild.side_effect = lambda gid: guild if gid == GUILD_ID else None
    return bot


@pytest.fixture
def transport(bot, factory):
    return DiscordVoiceTransport(bot, source_factory=factory, settings=AudioSettings())


class TestDiscordVoiceTransport:
    async def test_join_connects_self_deafened(self, transport, guild):
        channel = guild.get_channel(CHANNEL_A)
        channel.connect.return_value = _voice_client(CHANNEL_A)

        connection = await transport.join(GUILD_ID, CHANNEL_A)

        channel.connect.assert_awaited_once_with(self_deaf=True)
        assert transport.get(GUILD_ID) is connection
        assert connection.current_channel_id() == CHANNEL_A

    async def test_join_moves_existing_client(self, transport, guild):
        vc = _voice_client(CHANNEL_A)
        guild.voice_client = vc

        await transport.join(GUILD_ID, CHANNEL_B)

        vc.move_to.assert_awaited_once_with(guild.get_channel(CHANNEL_B))
        guild.change_voice_state.assert_awaited_once()
        guild.get_channel(CHANNEL_B).connect.assert_not_awaited()

    async def test_join_same_channel_reuses_connection(self, transport, guild):
        channel = guild.get_channel(CHANNEL_A)
        vc = _voice_client(CHANNEL_A)
        channel.connect.return_value = vc

        first = await transport.join(GUILD_ID, CHANNEL_A)
        guild.voice_client = vc
        second = await transport.join(GUILD_ID, CHANNEL_A)

        assert first is second
        channel.connect.assert_awaited_once()
        vc.move_to.assert_not_awaited()

    async def test_join_replaces_stale_client(self, transport, guild):
        stale = _voice_client(CHANNEL_A, connected=False)
        guild.voice_client = stale
        channel = guild.get_channel(CHANNEL_A)
        channel.connect.return_value = _voice_client(CHANNEL_A)

        await transport.join(GUILD_ID, CHANNEL_A)

        stale.disconnect.assert_awaited_once_with(force=True)
        channel.connect.assert_awaited_once()

    async def test_rejoin_after_drop_retires_old_queue(self, transport, guild, factory):
        """A connection replaced after its client dropped neither notifies nor keeps playing."""
        channel = guild.get_channel(CHANNEL_A)
        dropped = _voice_client(CHANNEL_A)
        channel.connect.return_value = dropped
        old = await transport.join(GUILD_ID, CHANNEL_A)

        fired = []

        async def _handler(requests):
            fired.append([r.url for r in requests])

        old.add_track_end_subscription(_handler)
        await old.enqueue(AudioRequest(url=URL_A))
        await old.enqueue(AudioRequest(url=URL_B))
        await _wait_for(lambda: dropped.play.called)

        guild.voice_client = dropped
        dropped.is_connected.return_value = False
        channel.connect.return_value = _voice_client(CHANNEL_A)

        new = await transport.join(GUILD_ID, CHANNEL_A)
        _finish_current(dropped)
        for _ in range(10):
            await asyncio.sleep(0)

        assert new is not old
        assert transport.get(GUILD_ID) is new
        assert fired == []
        assert old.queue_len() == 0
        assert factory.create.await_count == 1

    async def test_join_unknown_guild(self, transport):
        with pytest.raises(VoiceJoinError, match="not found"):
            await transport.join(999, CHANNEL_A)

    async def test_join_non_voice_channel(self, transport, guild):
        guild.get_channel.side_effect = lambda cid: MagicMock(spec=discord.TextChannel)

        with pytest.raises(VoiceJoinError, match="not a voice channel"):
            await transport.join(GUILD_ID, CHANNEL_A)

    async def test_join_timeout(self, transport, guild):
        guild.get_channel(CHANNEL_A).connect.side_effect = TimeoutError()

        with pytest.raises(VoiceJoinError) as exc_info:
            await transport.join(GUILD_ID, CHANNEL_A)

        assert "Timed out" in exc_info.value.cause
        assert transport.get(GUILD_ID) is None

    async def test_join_forbidden(self, transport, guild):
        response = MagicMock(status=403, reason="Forbidden")
        guild.get_channel(CHANNEL_A).connect.side_effect = discord.Forbidden(response, "Missing Access")

        with pytest.raises(VoiceJoinError, match="Missing permission"):
            await transport.join(GUILD_ID, CHANNEL_A)

    async def test_join_client_exception(self, transport, guild):
        guild.get_channel(CHANNEL_A).connect.side_effect = discord.ClientException(
            "Already connected to a voice channel."
        )

        with pytest.raises(VoiceJoinError) as exc_info:
            await transport.join(GUILD_ID, CHANNEL_A)

        assert exc_info.value.cause == "Already connected to a voice channel."
        assert exc_info.value.channel_id == CHANNEL_A

    async def test_remove_drops_connection(self, transport, guild):
        vc = _voice_client(CHANNEL_A)
        guild.get_channel(CHANNEL_A).connect.return_value = vc
        await transport.join(GUILD_ID, CHANNEL_A)
        vc.is_connected.return_value = False
        guild.voice_client = vc

        await transport.remove(GUILD_ID)

        assert transport.get(GUILD_ID) is None
        vc.disconnect.assert_not_awaited()

    async def test_remove_disconnects_leftover_client(self, transport, guild):
        vc = _voice_client(CHANNEL_A)
        guild.voice_client = vc

        await transport.remove(GUILD_ID)

        vc.disconnect.assert_awaited_once_with(force=True)

    async def test_remove_failure_raises(self, transport, guild):
        vc = _voice_client(CHANNEL_A)
        vc.disconnect.side_effect = discord.ClientException("still speaking")
        guild.voice_client = vc

        with pytest.raises(VoiceTransportError, match="still speaking"):
            await transport.remove(GUILD_ID)

    async def test_remove_unknown_guild_is_noop(self, transport):
        await transport.remove(999)

        assert transport.get(999) is None
