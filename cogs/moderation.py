from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from helpdesk_bot.config import PURGE_MAX_AMOUNT, PURGE_MIN_AMOUNT
from helpdesk_bot.invocation import run_slash_command


class ModerationCog(commands.Cog):
    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    @app_commands.command(name="kick", description="Kick a member from the server")
    @app_commands.describe(
        user="Member to kick",
        reason="Why this member is being kicked",
    )
    @app_commands.guild_only()
    async def kick(
        self,
        interaction: discord.Interaction,
        user: discord.Member,
        reason: Optional[str] = None,
    ) -> None:
        await run_slash_command(self.bot, "kick", interaction, user=user, reason=reason)

    @app_commands.command(name="ban", description="Ban a user from the server")
    @app_commands.describe(
        user="User to ban",
        reason="Why this user is being banned",
    )
    @app_commands.guild_only()
    async def ban(
        self,
        interaction: discord.Interaction,
        user: discord.User,
        reason: Optional[str] = None,
    ) -> None:
        await run_slash_command(self.bot, "ban", interaction, user=user, reason=reason)

    @app_commands.command(name="purge", description="Delete recent messages in the current channel")
    @app_commands.describe(amount=f"How many messages to delete ({PURGE_MIN_AMOUNT}-{PURGE_MAX_AMOUNT})")
    @app_commands.guild_only()
    async def purge(
        self,
        interaction: discord.Interaction,
        amount: app_commands.Range[int, PURGE_MIN_AMOUNT, PURGE_MAX_AMOUNT],
    ) -> None:
        await run_slash_command(self.bot, "purge", interaction, amount=amount)


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(ModerationCog(bot))
