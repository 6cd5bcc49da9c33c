from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from helpdesk_bot.invocation import run_slash_command


class GeneralCog(commands.Cog):
    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    @app_commands.command(name="help", description="Show available bot commands")
    async def help_command(self, interaction: discord.Interaction) -> None:
        await run_slash_command(self.bot, "help", interaction)

    @app_commands.command(name="ping", description="Show bot latency")
    async def ping(self, interaction: discord.Interaction) -> None:
        await run_slash_command(self.bot, "ping", interaction)

    @app_commands.command(name="userinfo", description="Show information about a user")
    @app_commands.describe(user="User to inspect")
    @app_commands.guild_only()
    async def userinfo(self, interaction: discord.Interaction, user: Optional[discord.User] = None) -> None:
        await run_slash_command(self.bot, "userinfo", interaction, user=user)

    @app_commands.command(name="serverinfo", description="Show information about the current server")
    @app_commands.guild_only()
    async def serverinfo(self, interaction: discord.Interaction) -> None:
        await run_slash_command(self.bot, "serverinfo", interaction)


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(GeneralCog(bot))
