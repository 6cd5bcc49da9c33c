import logging
from typing import Optional

import discord
from discord.ext import commands

from helpdesk_bot.common import load_health_port
from helpdesk_bot.config import INTENTS, PREFIX
from helpdesk_bot.health import HealthServer
from helpdesk_bot.invocation import TextInvocation
from helpdesk_bot.router import create_router, parse_text_command
from helpdesk_bot.settings import SettingsStore
from helpdesk_bot.tickets import TicketCloseView, TicketController, TicketPanelView, TicketRegistry


EXTENSIONS = (
    "cogs.events",
    "cogs.general",
    "cogs.moderation",
    "cogs.tickets",
)


class HelpdeskBot(commands.Bot):
    def __init__(self, *, application_id: Optional[int] = None, health_port: Optional[int] = None) -> None:
        super().__init__(
            command_prefix=PREFIX,
            intents=INTENTS,
            application_id=application_id,
            help_command=None,
        )
        self.settings = SettingsStore()
        self.tickets = TicketRegistry()
        self.ticket_controller = TicketController(self, self.settings, self.tickets)
        self.router = create_router(self, self.settings, self.ticket_controller)
        self.health = HealthServer()
        self.health_port = health_port if health_port is not None else load_health_port()

    async def setup_hook(self) -> None:
        for extension in EXTENSIONS:
            await self.load_extension(extension)
        self.add_view(TicketPanelView(self))
        self.add_view(TicketCloseView(self))
        await self.health.start(port=self.health_port)
        # Registers slash commands globally.
        await self.tree.sync()

    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot or message.guild is None:
            return
        parsed = parse_text_command(message.content, PREFIX)
        if parsed is None:
            return
        name, args = parsed
        await self.router.dispatch(name, TextInvocation(self, message, args))

    async def close(self) -> None:
        await self.ticket_controller.shutdown()
        await self.health.stop()
        logging.info("Bot shutting down.")
        await super().close()
