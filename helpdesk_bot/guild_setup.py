import logging

import discord

from helpdesk_bot.config import PREFIX
from helpdesk_bot.errors import InvalidTarget, UsageError
from helpdesk_bot.invocation import Invocation
from helpdesk_bot.permissions import require_permission
from helpdesk_bot.settings import SettingsStore


class SetupCommands:
    def __init__(self, settings: SettingsStore) -> None:
        self.settings = settings

    async def setup_welcome(self, invocation: Invocation) -> None:
        require_permission(invocation, permission_name="administrator", require_bot_permission=False)

        if invocation.option("channel", 0) is None:
            raise UsageError(f"Please mention a channel: `{PREFIX}setup-welcome #welcome`")
        channel = invocation.resolve_channel("channel", 0, discord.TextChannel)
        if channel is None:
            raise InvalidTarget("Invalid channel. Please mention a valid text channel.")

        self.settings.upsert(invocation.guild_id, welcome_channel_id=channel.id)
        logging.info("Welcome channel for guild %s set to %s", invocation.guild_id, channel.id)
        await invocation.reply(f"Welcome system set up! New members will be welcomed in {channel.mention}")

    async def setup_tickets(self, invocation: Invocation) -> None:
        require_permission(invocation, permission_name="administrator", require_bot_permission=False)

        if invocation.option("category", 0) is None or invocation.option("support_role", 1) is None:
            raise UsageError(f"Usage: `{PREFIX}setup-tickets <category> <@support-role>`")

        category = invocation.resolve_channel("category", 0, discord.CategoryChannel)
        if category is None:
            raise InvalidTarget("Invalid category. Please give a valid category id.")
        support_role = invocation.resolve_role("support_role", 1)
        if support_role is None:
            raise InvalidTarget("Invalid role. Please mention a valid role.")

        self.settings.upsert(
            invocation.guild_id,
            ticket_category_id=category.id,
            support_role_id=support_role.id,
        )
        logging.info(
            "Ticket system for guild %s set to category %s and role %s",
            invocation.guild_id,
            category.id,
            support_role.id,
        )

        embed = discord.Embed(
            title="Ticket System Set Up",
            color=discord.Color.green(),
        )
        embed.add_field(name="Category", value=category.mention, inline=False)
        embed.add_field(name="Support role", value=support_role.mention, inline=False)
        await invocation.reply(embed=embed)
