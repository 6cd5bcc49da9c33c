import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Dict, Optional, Set, Tuple

import discord
from discord.ext import commands

from helpdesk_bot.config import (
    PREFIX,
    TICKET_CHANNEL_PREFIX,
    TICKET_CLOSE_DELAY_SECONDS,
    TICKET_NUMBER_MAX,
    TICKET_NUMBER_MIN,
    TICKET_STATE_CLOSE_PENDING,
    TICKET_STATE_DELETED,
    TICKET_STATE_OPEN,
)
from helpdesk_bot.common import create_background_task
from helpdesk_bot.errors import (
    ActionRejected,
    DuplicateTicket,
    NotATicket,
    NotConfigured,
    TicketClosing,
    TransientApiFailure,
)
from helpdesk_bot.invocation import Invocation, SlashInvocation
from helpdesk_bot.permissions import require_permission
from helpdesk_bot.settings import SettingsStore


NOT_CONFIGURED_MESSAGE = f"Ticket system is not set up. Use `{PREFIX}setup-tickets <category> <@role>` first."


@dataclass
class Ticket:
    channel_id: int
    guild_id: int
    creator_id: int
    ticket_number: int
    created_at: datetime
    state: str = TICKET_STATE_OPEN

    @property
    def is_open(self) -> bool:
        return self.state == TICKET_STATE_OPEN


def generate_ticket_number() -> int:
    # Display only; two open tickets may share a number.
    return random.randint(TICKET_NUMBER_MIN, TICKET_NUMBER_MAX)


def build_ticket_channel_name(ticket_number: int) -> str:
    return f"{TICKET_CHANNEL_PREFIX}-{ticket_number}"


def build_ticket_overwrites(
    guild: discord.Guild,
    creator: discord.Member,
    support_role: discord.Role,
) -> Dict[object, discord.PermissionOverwrite]:
    return {
        guild.default_role: discord.PermissionOverwrite(view_channel=False),
        creator: discord.PermissionOverwrite(view_channel=True, send_messages=True),
        support_role: discord.PermissionOverwrite(view_channel=True, send_messages=True),
    }


class TicketRegistry:
    """Ticket records keyed by ticket channel id."""

    def __init__(self) -> None:
        self._tickets: Dict[int, Ticket] = {}

    def __len__(self) -> int:
        return len(self._tickets)

    def __contains__(self, channel_id: object) -> bool:
        return channel_id in self._tickets

    def get(self, channel_id: int) -> Optional[Ticket]:
        return self._tickets.get(channel_id)

    def find_open_ticket(self, guild: discord.Guild, user_id: int) -> Optional[Ticket]:
        for ticket in self._tickets.values():
            if ticket.guild_id != guild.id or ticket.creator_id != user_id or not ticket.is_open:
                continue
            # Skip entries whose channel was deleted outside the close flow.
            if guild.get_channel(ticket.channel_id) is None:
                continue
            return ticket
        return None

    def create(
        self,
        channel: discord.abc.GuildChannel,
        creator_id: int,
        ticket_number: Optional[int] = None,
    ) -> Ticket:
        ticket = Ticket(
            channel_id=channel.id,
            guild_id=channel.guild.id,
            creator_id=creator_id,
            ticket_number=ticket_number if ticket_number is not None else generate_ticket_number(),
            created_at=discord.utils.utcnow(),
        )
        self._tickets[channel.id] = ticket
        return ticket

    def remove(self, channel_id: int) -> None:
        self._tickets.pop(channel_id, None)


class TicketController:
    """Opens ticket channels and deletes them a fixed delay after they are closed."""

    def __init__(
        self,
        bot: commands.Bot,
        settings: SettingsStore,
        registry: TicketRegistry,
        *,
        close_delay: float = TICKET_CLOSE_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.bot = bot
        self.settings = settings
        self.registry = registry
        self.close_delay = close_delay
        self._sleep = sleep
        self._pending: Dict[int, asyncio.Task] = {}
        self._deleting: Set[int] = set()

    def resolve_ticket_assets(
        self,
        guild: discord.Guild,
    ) -> Tuple[discord.CategoryChannel, discord.Role]:
        settings = self.settings.get(guild.id)
        if settings is None or not settings.tickets_configured:
            raise NotConfigured(NOT_CONFIGURED_MESSAGE)

        category = guild.get_channel(settings.ticket_category_id)
        if not isinstance(category, discord.CategoryChannel):
            raise NotConfigured("Configured ticket category no longer exists.")
        support_role = guild.get_role(settings.support_role_id)
        if support_role is None:
            raise NotConfigured("Configured support role no longer exists.")
        return category, support_role

    async def open(
        self,
        guild: discord.Guild,
        creator: discord.Member,
    ) -> Tuple[discord.TextChannel, Ticket]:
        category, support_role = self.resolve_ticket_assets(guild)
        existing = self.registry.find_open_ticket(guild, creator.id)
        if existing is not None:
            raise DuplicateTicket(existing.channel_id)

        ticket_number = generate_ticket_number()
        try:
            channel = await guild.create_text_channel(
                name=build_ticket_channel_name(ticket_number),
                category=category,
                overwrites=build_ticket_overwrites(guild, creator, support_role),
                reason=f"Ticket #{ticket_number} created by {creator} ({creator.id})",
            )
        except discord.Forbidden as error:
            raise ActionRejected("I do not have permission to create ticket channels.") from error
        except discord.HTTPException as error:
            raise TransientApiFailure("Failed to create ticket channel.") from error

        ticket = self.registry.create(channel, creator.id, ticket_number)
        logging.info("Opened ticket #%s (%s) for user %s in guild %s", ticket_number, channel.id, creator.id, guild.id)

        embed = discord.Embed(
            title=f"Ticket #{ticket_number}",
            description="Support team will be with you shortly!",
            color=discord.Color.blue(),
            timestamp=ticket.created_at,
        )
        embed.add_field(name="Created by", value=creator.mention, inline=True)
        embed.add_field(name="Status", value="Open", inline=True)
        try:
            await channel.send(
                content=f"{creator.mention} {support_role.mention}",
                embed=embed,
                view=TicketCloseView(self.bot),
            )
        except discord.HTTPException:
            logging.exception("Failed to send initial message in ticket channel %s", channel.id)

        return channel, ticket

    def close(self, channel: discord.abc.GuildChannel) -> Ticket:
        ticket = self.registry.get(channel.id)
        if ticket is None or ticket.state == TICKET_STATE_DELETED:
            raise NotATicket()
        if ticket.state == TICKET_STATE_CLOSE_PENDING:
            raise TicketClosing()

        ticket.state = TICKET_STATE_CLOSE_PENDING
        task = create_background_task(self._delete_after_delay(ticket, channel))
        self._pending[channel.id] = task
        task.add_done_callback(
            lambda finished, key=channel.id: self._pending.pop(key, None)
            if self._pending.get(key) is finished
            else None
        )
        logging.info("Ticket #%s (%s) will be deleted in %s seconds", ticket.ticket_number, channel.id, self.close_delay)
        return ticket

    def cancel_close(self, channel_id: int) -> bool:
        # Past the grace period the channel delete is already in flight.
        if channel_id in self._deleting:
            return False
        task = self._pending.pop(channel_id, None)
        if task is None or task.done():
            return False
        task.cancel()
        ticket = self.registry.get(channel_id)
        if ticket is not None and ticket.state == TICKET_STATE_CLOSE_PENDING:
            ticket.state = TICKET_STATE_OPEN
        return True

    def pending_closes(self) -> int:
        return len(self._pending)

    async def shutdown(self) -> None:
        tasks = list(self._pending.values())
        self._pending.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logging.info("Cancelled %s pending ticket deletion(s).", len(tasks))

    async def _delete_after_delay(self, ticket: Ticket, channel: discord.abc.GuildChannel) -> None:
        await self._sleep(self.close_delay)
        self._deleting.add(channel.id)
        try:
            await channel.delete(reason=f"Ticket #{ticket.ticket_number} closed")
        except discord.NotFound:
            logging.warning("Ticket channel %s was already deleted", channel.id)
        except discord.Forbidden:
            logging.warning("Missing permission to delete ticket channel %s", channel.id)
        except discord.HTTPException:
            logging.exception("Failed to delete ticket channel %s", channel.id)
        finally:
            self._deleting.discard(channel.id)
        ticket.state = TICKET_STATE_DELETED
        self.registry.remove(channel.id)


class TicketCommands:
    def __init__(self, controller: TicketController) -> None:
        self.controller = controller

    async def open_ticket(self, invocation: Invocation) -> None:
        channel, _ = await self.controller.open(invocation.guild, invocation.author)
        await invocation.reply(f"Ticket created! {channel.mention}", ephemeral=True)

    async def close_ticket(self, invocation: Invocation) -> None:
        self.controller.close(invocation.channel)
        embed = discord.Embed(
            title="Ticket Closing",
            description=f"This ticket will be deleted in {self.controller.close_delay:g} seconds...",
            color=discord.Color.red(),
            timestamp=discord.utils.utcnow(),
        )
        await invocation.reply(embed=embed)

    async def send_panel(self, invocation: Invocation) -> None:
        require_permission(invocation, permission_name="administrator", require_bot_permission=False)
        self.controller.resolve_ticket_assets(invocation.guild)

        embed = discord.Embed(
            title="Support Tickets",
            description="Press the button below to open a ticket.",
            color=discord.Color.blue(),
        )
        embed.add_field(
            name="How it works",
            value="A private channel will be created for you and the support team.",
            inline=False,
        )
        try:
            await invocation.channel.send(embed=embed, view=TicketPanelView(self.controller.bot))
        except discord.Forbidden as error:
            raise ActionRejected("I do not have permission to send messages in this channel.") from error
        except discord.HTTPException as error:
            raise TransientApiFailure("Failed to send ticket panel.") from error
        await invocation.reply("Ticket panel sent.", ephemeral=True)


class TicketPanelView(discord.ui.View):
    def __init__(self, bot: commands.Bot) -> None:
        super().__init__(timeout=None)
        self.bot = bot

    @discord.ui.button(
        label="Open Ticket",
        style=discord.ButtonStyle.green,
        custom_id="open_ticket",
    )
    async def open_ticket_button(  # type: ignore[override]
        self,
        interaction: discord.Interaction,
        button: discord.ui.Button,
    ) -> None:
        del button
        await self.bot.router.dispatch("ticket", SlashInvocation(self.bot, interaction))


class TicketCloseView(discord.ui.View):
    def __init__(self, bot: commands.Bot) -> None:
        super().__init__(timeout=None)
        self.bot = bot

    @discord.ui.button(
        label="Close Ticket",
        style=discord.ButtonStyle.red,
        custom_id="close_ticket",
    )
    async def close_ticket_button(  # type: ignore[override]
        self,
        interaction: discord.Interaction,
        button: discord.ui.Button,
    ) -> None:
        del button
        await self.bot.router.dispatch("close", SlashInvocation(self.bot, interaction))
