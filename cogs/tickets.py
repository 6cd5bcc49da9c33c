import discord
from discord import app_commands
from discord.ext import commands

from helpdesk_bot.invocation import run_slash_command


class TicketCog(commands.Cog):
    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    @app_commands.command(name="ticket", description="Open a support ticket")
    @app_commands.guild_only()
    async def ticket(self, interaction: discord.Interaction) -> None:
        await run_slash_command(self.bot, "ticket", interaction)

    @app_commands.command(name="close-ticket", description="Close the current ticket")
    @app_commands.guild_only()
    async def close_ticket(self, interaction: discord.Interaction) -> None:
        await run_slash_command(self.bot, "close-ticket", interaction)

    @app_commands.command(name="ticket-panel", description="Post a panel with an Open Ticket button")
    @app_commands.guild_only()
    async def ticket_panel(self, interaction: discord.Interaction) -> None:
        await run_slash_command(self.bot, "ticket-panel", interaction)

    @app_commands.command(name="setup-welcome", description="Set the channel for welcome messages")
    @app_commands.describe(channel="Channel where new members are welcomed")
    @app_commands.guild_only()
    async def setup_welcome(self, interaction: discord.Interaction, channel: discord.TextChannel) -> None:
        await run_slash_command(self.bot, "setup-welcome", interaction, channel=channel)

    @app_commands.command(name="setup-tickets", description="Configure the ticket system for this server")
    @app_commands.describe(
        category="Category where ticket channels are created",
        support_role="Role that can access all tickets",
    )
    @app_commands.rename(support_role="support-role")
    @app_commands.guild_only()
    async def setup_tickets(
        self,
        interaction: discord.Interaction,
        category: discord.CategoryChannel,
        support_role: discord.Role,
    ) -> None:
        await run_slash_command(self.bot, "setup-tickets", interaction, category=category, support_role=support_role)


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(TicketCog(bot))
