"""One command invocation, whether it came from a text message or an interaction.

Handlers only talk to ``Invocation``: they read the author, guild and channel,
pull options by name (slash commands) or by position (text commands), and
reply. Option values are either the typed objects Discord resolved for a slash
command or the raw strings typed after a text command; the ``resolve_*``
helpers accept both.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

import discord
from discord.ext import commands

from helpdesk_bot.common import parse_snowflake, send_message
from helpdesk_bot.errors import TransientApiFailure


ChannelT = TypeVar("ChannelT", bound=discord.abc.GuildChannel)


class Invocation:
    def __init__(
        self,
        bot: commands.Bot,
        guild: discord.Guild,
        author: discord.Member,
        channel: Any,
        created_at: datetime,
    ) -> None:
        self.bot = bot
        self.guild = guild
        self.author = author
        self.channel = channel
        self.created_at = created_at

    @property
    def author_id(self) -> int:
        return self.author.id

    @property
    def guild_id(self) -> int:
        return self.guild.id

    @property
    def channel_id(self) -> int:
        return self.channel.id

    async def reply(
        self,
        content: Optional[str] = None,
        *,
        embed: Optional[discord.Embed] = None,
        view: Optional[discord.ui.View] = None,
        ephemeral: bool = False,
        delete_after: Optional[float] = None,
    ) -> Optional[discord.Message]:
        raise NotImplementedError

    async def edit_reply(
        self,
        sent: Optional[discord.Message],
        *,
        content: Optional[str] = None,
        embed: Optional[discord.Embed] = None,
    ) -> None:
        raise NotImplementedError

    async def discard_trigger(self) -> None:
        """Delete the message that triggered the command, if there is one."""

    async def defer(self) -> None:
        """Acknowledge a slow command before its first reply, if the source needs it."""

    def option(self, name: str, position: int, *, rest: bool = False) -> Any:
        raise NotImplementedError

    def resolve_member(self, name: str, position: int) -> Optional[discord.Member]:
        value = self.option(name, position)
        if value is None or isinstance(value, discord.Member):
            return value
        member_id = parse_snowflake(str(value))
        if member_id is None:
            return None
        return self.guild.get_member(member_id)

    async def resolve_user(self, name: str, position: int) -> Optional[discord.abc.User]:
        value = self.option(name, position)
        if value is None or isinstance(value, (discord.Member, discord.User)):
            return value
        user_id = parse_snowflake(str(value))
        if user_id is None:
            return None

        user = self.bot.get_user(user_id)
        if user is not None:
            return user
        try:
            return await self.bot.fetch_user(user_id)
        except discord.NotFound:
            return None
        except discord.HTTPException as error:
            raise TransientApiFailure("Failed to look up that user.") from error

    def resolve_channel(self, name: str, position: int, kind: Type[ChannelT]) -> Optional[ChannelT]:
        value = self.option(name, position)
        if value is None:
            return None
        if not isinstance(value, str):
            return value if isinstance(value, kind) else None
        channel_id = parse_snowflake(value)
        if channel_id is None:
            return None
        channel = self.guild.get_channel(channel_id)
        return channel if isinstance(channel, kind) else None

    def resolve_role(self, name: str, position: int) -> Optional[discord.Role]:
        value = self.option(name, position)
        if value is None or isinstance(value, discord.Role):
            return value
        role_id = parse_snowflake(str(value))
        if role_id is None:
            return None
        return self.guild.get_role(role_id)


class TextInvocation(Invocation):
    """A prefix command typed into a guild text channel."""

    def __init__(self, bot: commands.Bot, message: discord.Message, args: Sequence[str]) -> None:
        super().__init__(bot, message.guild, message.author, message.channel, message.created_at)
        self.message = message
        self.args: List[str] = list(args)
        self.trigger_deleted = False

    async def reply(
        self,
        content: Optional[str] = None,
        *,
        embed: Optional[discord.Embed] = None,
        view: Optional[discord.ui.View] = None,
        ephemeral: bool = False,
        delete_after: Optional[float] = None,
    ) -> Optional[discord.Message]:
        del ephemeral
        if self.trigger_deleted:
            return await self.channel.send(content=content, embed=embed, view=view, delete_after=delete_after)
        return await self.message.reply(content=content, embed=embed, view=view, delete_after=delete_after)

    async def edit_reply(
        self,
        sent: Optional[discord.Message],
        *,
        content: Optional[str] = None,
        embed: Optional[discord.Embed] = None,
    ) -> None:
        if sent is None:
            return
        await sent.edit(content=content, embed=embed)

    async def discard_trigger(self) -> None:
        try:
            await self.message.delete()
        except discord.NotFound:
            pass
        self.trigger_deleted = True

    def option(self, name: str, position: int, *, rest: bool = False) -> Any:
        del name
        if position >= len(self.args):
            return None
        if rest:
            return " ".join(self.args[position:])
        return self.args[position]


class SlashInvocation(Invocation):
    """A slash command or a button press."""

    def __init__(
        self,
        bot: commands.Bot,
        interaction: discord.Interaction,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(bot, interaction.guild, interaction.user, interaction.channel, interaction.created_at)
        self.interaction = interaction
        self.options: Dict[str, Any] = dict(options or {})

    async def reply(
        self,
        content: Optional[str] = None,
        *,
        embed: Optional[discord.Embed] = None,
        view: Optional[discord.ui.View] = None,
        ephemeral: bool = False,
        delete_after: Optional[float] = None,
    ) -> Optional[discord.Message]:
        del delete_after
        await send_message(self.interaction, content, embed=embed, view=view, ephemeral=ephemeral)
        return None

    async def edit_reply(
        self,
        sent: Optional[discord.Message],
        *,
        content: Optional[str] = None,
        embed: Optional[discord.Embed] = None,
    ) -> None:
        del sent
        await self.interaction.edit_original_response(content=content, embed=embed)

    async def defer(self) -> None:
        if self.interaction.response.is_done():
            return
        await self.interaction.response.defer(ephemeral=True, thinking=True)

    def option(self, name: str, position: int, *, rest: bool = False) -> Any:
        del position, rest
        return self.options.get(name)


async def run_slash_command(bot: commands.Bot, name: str, interaction: discord.Interaction, **options: Any) -> None:
    await bot.router.dispatch(name, SlashInvocation(bot, interaction, options))
