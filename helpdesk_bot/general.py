import logging

import discord
from discord.ext import commands

from helpdesk_bot.config import PREFIX
from helpdesk_bot.errors import InvalidTarget
from helpdesk_bot.invocation import Invocation
from helpdesk_bot.settings import SettingsStore


def relative_timestamp(moment) -> str:
    return f"<t:{int(moment.timestamp())}:R>"


def build_help_embed() -> discord.Embed:
    embed = discord.Embed(
        title="Bot Commands",
        description=f"Prefix: `{PREFIX}` (slash commands work too)",
        color=discord.Color.blurple(),
    )
    embed.add_field(
        name="Ticket System",
        value=(
            f"`{PREFIX}ticket` - Create a support ticket\n"
            f"`{PREFIX}close` - Close current ticket\n"
            f"`{PREFIX}ticket-panel` - Post a ticket button panel\n"
            f"`{PREFIX}setup-tickets <category> @role` - Setup ticket system"
        ),
        inline=False,
    )
    embed.add_field(
        name="Welcome System",
        value=f"`{PREFIX}setup-welcome #channel` - Setup welcome messages",
        inline=False,
    )
    embed.add_field(
        name="Moderation",
        value=(
            f"`{PREFIX}kick @user [reason]` - Kick a user\n"
            f"`{PREFIX}ban @user [reason]` - Ban a user\n"
            f"`{PREFIX}purge <amount>` - Delete messages"
        ),
        inline=False,
    )
    embed.add_field(
        name="Utility",
        value=(
            f"`{PREFIX}userinfo [@user]` - User information\n"
            f"`{PREFIX}serverinfo` - Server information\n"
            f"`{PREFIX}ping` - Bot latency"
        ),
        inline=False,
    )
    embed.set_footer(text="Use the commands without <> or []")
    return embed


def build_welcome_embed(member: discord.Member) -> discord.Embed:
    embed = discord.Embed(
        title="Welcome to the server!",
        description=f"Welcome {member.mention}, we're glad to have you here!",
        color=discord.Color.green(),
        timestamp=discord.utils.utcnow(),
    )
    embed.set_thumbnail(url=member.display_avatar.url)
    embed.add_field(name="Server Rules", value="Please read the rules channel", inline=True)
    embed.add_field(name="Have Fun", value="Enjoy your stay!", inline=True)
    embed.set_footer(text=f"Member #{member.guild.member_count or 0}")
    return embed


async def send_welcome(settings: SettingsStore, member: discord.Member) -> bool:
    guild_settings = settings.get(member.guild.id)
    if guild_settings is None or guild_settings.welcome_channel_id is None:
        return False

    channel = member.guild.get_channel(guild_settings.welcome_channel_id)
    if not isinstance(channel, discord.TextChannel):
        return False

    try:
        await channel.send(embed=build_welcome_embed(member))
    except discord.HTTPException:
        logging.exception("Failed to send welcome message in guild %s", member.guild.id)
        return False
    return True


class GeneralCommands:
    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    async def help(self, invocation: Invocation) -> None:
        await invocation.reply(embed=build_help_embed(), ephemeral=True)

    async def ping(self, invocation: Invocation) -> None:
        sent = await invocation.reply("Pinging...", ephemeral=True)
        latency_ms = round((discord.utils.utcnow() - invocation.created_at).total_seconds() * 1000)

        embed = discord.Embed(title="Pong!", color=discord.Color.blurple())
        embed.add_field(name="Latency", value=f"{latency_ms}ms", inline=True)
        embed.add_field(name="API Latency", value=f"{round(self.bot.latency * 1000)}ms", inline=True)
        await invocation.edit_reply(sent, content=None, embed=embed)

    async def userinfo(self, invocation: Invocation) -> None:
        if invocation.option("user", 0) is None:
            user = invocation.author
        else:
            user = await invocation.resolve_user("user", 0)
            if user is None:
                raise InvalidTarget("User not found.")

        member = invocation.guild.get_member(user.id)
        joined_value = "N/A"
        if member is not None and member.joined_at is not None:
            joined_value = relative_timestamp(member.joined_at)

        embed = discord.Embed(
            title=f"User info: {user}",
            color=discord.Color.blurple(),
        )
        embed.set_thumbnail(url=user.display_avatar.url)
        embed.add_field(name="ID", value=str(user.id), inline=True)
        embed.add_field(name="Created", value=relative_timestamp(user.created_at), inline=True)
        embed.add_field(name="Joined", value=joined_value, inline=True)
        await invocation.reply(embed=embed)

    async def serverinfo(self, invocation: Invocation) -> None:
        guild = invocation.guild
        embed = discord.Embed(
            title=f"Server info: {guild.name}",
            color=discord.Color.green(),
        )
        if guild.icon:
            embed.set_thumbnail(url=guild.icon.url)
        embed.add_field(name="Members", value=str(guild.member_count or 0), inline=True)
        embed.add_field(name="Channels", value=str(len(guild.channels)), inline=True)
        embed.add_field(name="Roles", value=str(len(guild.roles)), inline=True)
        embed.add_field(name="Created", value=relative_timestamp(guild.created_at), inline=True)
        embed.add_field(name="Owner", value=f"<@{guild.owner_id}>", inline=True)
        embed.add_field(name="Boost tier", value=str(guild.premium_tier), inline=True)
        await invocation.reply(embed=embed)
