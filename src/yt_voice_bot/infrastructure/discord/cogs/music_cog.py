"""Hybrid (prefix and slash) music commands delegating to the session orchestrator."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
import pydantic
from discord.ext import commands

from yt_voice_bot.application.commands.clear_queue import ClearStatus
from yt_voice_bot.application.commands.play_track import PlayStatus, PlayTrackCommand
from yt_voice_bot.application.commands.skip_track import SkipStatus
from yt_voice_bot.domain.session.entities import AudioRequest
from yt_voice_bot.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from yt_voice_bot.utils.reply import DISCORD_MESSAGE_LIMIT, channel_mention, truncate

if TYPE_CHECKING:
    from ....application.commands.play_track import PlayResult
    from ....config.container import Container

logger = logging.getLogger(__name__)


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    async def _reply(self, ctx: commands.Context, text: str) -> None:
        try:
            await ctx.send(truncate(text, DISCORD_MESSAGE_LIMIT))
        except discord.HTTPException as e:
            logger.error(LogTemplates.MESSAGE_SEND_FAILED, e)

    @staticmethod
    def _author_voice_channel_id(ctx: commands.Context) -> int | None:
        """The voice channel the author is in, according to the guild's voice-state cache."""
        if ctx.guild is None:
            return None
        member = ctx.author if isinstance(ctx.author, discord.Member) else None
        if member is None:
            member = ctx.guild.get_member(ctx.author.id)
        if member is None or member.voice is None or member.voice.channel is None:
            return None
        return member.voice.channel.id

    @staticmethod
    def _format_play_result(result: PlayResult) -> str:
        if result.status is PlayStatus.JOINED:
            return DiscordUIMessages.PLAY_JOINED.format(channel=channel_mention(result.channel_id))
        if result.status is PlayStatus.ENQUEUED:
            return DiscordUIMessages.PLAY_ENQUEUED.format(channel=channel_mention(result.channel_id))
        if result.status is PlayStatus.NO_VOICE_CHANNEL:
            return DiscordUIMessages.PLAY_NO_VOICE_CHANNEL
        return DiscordUIMessages.PLAY_JOIN_FAILED.format(cause=result.cause)

    @commands.hybrid_command(name="play", description="Play a song from a URL in your voice channel.")
    @commands.guild_only()
    async def play(self, ctx: commands.Context, url: str) -> None:
        # Joining voice can exceed the 3-second interaction deadline
        await ctx.defer()
        assert ctx.guild is not None

        try:
            request = AudioRequest(url=url.strip(), requested_by_id=ctx.author.id)
        except pydantic.ValidationError:
            await self._reply(ctx, DiscordUIMessages.PLAY_INVALID_URL)
            return

        command = PlayTrackCommand(
            guild_id=ctx.guild.id,
            requester_channel_id=self._author_voice_channel_id(ctx),
            request=request,
            notify_channel_id=ctx.channel.id,
        )
        result = await self.container.session_orchestrator.join_or_enqueue(command)
        await self._reply(ctx, self._format_play_result(result))

    @commands.hybrid_command(name="skip", description="Skip the song that is playing.")
    @commands.guild_only()
    async def skip(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        await ctx.defer()
        result = await self.container.session_orchestrator.skip(ctx.guild.id)
        if result.status is SkipStatus.SKIPPED:
            await self._reply(ctx, DiscordUIMessages.SKIP_DONE.format(remaining=result.remaining))
        else:
            await self._reply(ctx, DiscordUIMessages.SKIP_NOT_ACTIVE)

    @commands.hybrid_command(name="clear", description="Stop playback and clear the queue.")
    @commands.guild_only()
    async def clear(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        await ctx.defer()
        result = await self.container.session_orchestrator.clear(ctx.guild.id)
        if result.status is ClearStatus.CLEARED:
            await self._reply(ctx, DiscordUIMessages.CLEAR_DONE)
        else:
            await self._reply(ctx, DiscordUIMessages.CLEAR_NOT_ACTIVE)

    @commands.hybrid_command(name="help", description="List the commands or describe one.")
    async def help(self, ctx: commands.Context, command: str | None = None) -> None:
        if command is not None:
            found = self.bot.get_command(command.strip().lstrip(ctx.clean_prefix or ""))
            if found is None or found.hidden:
                await self._reply(ctx, DiscordUIMessages.HELP_UNKNOWN.format(name=command))
                return
            await self._reply(
                ctx,
                DiscordUIMessages.HELP_LINE.format(
                    name=found.qualified_name, description=found.description or found.short_doc
                ),
            )
            return

        lines = [DiscordUIMessages.HELP_HEADER.format(prefix=self.container.settings.discord.command_prefix)]
        for cmd in sorted(self.bot.commands, key=lambda c: c.qualified_name):
            if cmd.hidden:
                continue
            lines.append(
                DiscordUIMessages.HELP_LINE.format(
                    name=cmd.qualified_name, description=cmd.description or cmd.short_doc
                )
            )
        await self._reply(ctx, "\n".join(lines))

    @commands.hybrid_command(
        name="register", description="Sync application commands with Discord.", hidden=True
    )
    @commands.is_owner()
    async def register(self, ctx: commands.Context) -> None:
        await ctx.defer()
        synced = await self.bot.tree.sync()
        logger.info(LogTemplates.BOT_SYNCED_GLOBAL, len(synced))
        await self._reply(ctx, DiscordUIMessages.REGISTER_DONE.format(count=len(synced)))


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
