"""Discord event listeners for lifecycle, voice, and command-error events."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from yt_voice_bot.domain.shared.events import VoiceStateChanged, get_event_bus
from yt_voice_bot.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class EventCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container
        self._event_bus = get_event_bus()

    # ─────────────────────────────────────────────────────────────────
    # Lifecycle Events
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_ready(self) -> None:
        logger.info(LogTemplates.BOT_READY, self.bot.user)

    @commands.Cog.listener()
    async def on_disconnect(self) -> None:
        logger.warning("WebSocket disconnected")

    # ─────────────────────────────────────────────────────────────────
    # Voice Events
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_voice_state_update(
        self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState
    ) -> None:
        before_id = before.channel.id if before.channel is not None else None
        after_id = after.channel.id if after.channel is not None else None

        await self._event_bus.publish(
            VoiceStateChanged(
                guild_id=member.guild.id,
                user_id=member.id,
                before_channel_id=before_id,
                after_channel_id=after_id,
            )
        )

    # ─────────────────────────────────────────────────────────────────
    # Command Error Handler
    # ─────────────────────────────────────────────────────────────────

    async def _reply(self, ctx: commands.Context, text: str) -> None:
        try:
            await ctx.send(text)
        except discord.HTTPException as e:
            logger.error(LogTemplates.MESSAGE_SEND_FAILED, e)

    @commands.Cog.listener()
    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError) -> None:
        if isinstance(error, commands.CommandNotFound):
            return

        if isinstance(error, commands.NoPrivateMessage):
            await self._reply(ctx, DiscordUIMessages.GUILD_ONLY)
            return

        if isinstance(error, commands.NotOwner):
            await self._reply(ctx, DiscordUIMessages.OWNER_ONLY)
            return

        if isinstance(error, commands.UserInputError):
            await self._reply(ctx, str(error))
            return

        original = getattr(error, "original", error)
        logger.error(
            LogTemplates.BOT_COMMAND_ERROR,
            getattr(ctx.command, "qualified_name", "<unknown>"),
            exc_info=original,
        )


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(EventCog(bot, container))
