import logging
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

import discord
from discord.ext import commands

from helpdesk_bot.config import GENERIC_FAILURE_MESSAGE
from helpdesk_bot.errors import HelpdeskError, TransientApiFailure
from helpdesk_bot.general import GeneralCommands
from helpdesk_bot.guild_setup import SetupCommands
from helpdesk_bot.invocation import Invocation
from helpdesk_bot.moderation import ModerationCommands
from helpdesk_bot.settings import SettingsStore
from helpdesk_bot.tickets import TicketCommands, TicketController


Handler = Callable[[Invocation], Awaitable[None]]


def parse_text_command(content: str, prefix: str) -> Optional[Tuple[str, List[str]]]:
    if not content.startswith(prefix):
        return None
    parts = content[len(prefix):].split()
    if not parts:
        return None
    return parts[0].lower(), parts[1:]


class CommandRouter:
    """Maps command names to handlers and keeps handler failures away from the event loop."""

    def __init__(self) -> None:
        self._handlers: Dict[str, Handler] = {}

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._handlers

    @property
    def names(self) -> List[str]:
        return sorted(self._handlers)

    def register(self, name: str, handler: Handler, *aliases: str) -> None:
        for key in (name, *aliases):
            self._handlers[key.lower()] = handler

    async def dispatch(self, name: str, invocation: Invocation) -> bool:
        handler = self._handlers.get(name.lower())
        if handler is None:
            return False

        try:
            await handler(invocation)
        except TransientApiFailure:
            logging.exception("Command %s failed in guild %s", name, invocation.guild_id)
            await self._notify(invocation, GENERIC_FAILURE_MESSAGE)
        except HelpdeskError as error:
            logging.info(
                "Command %s rejected for user %s in guild %s: %s",
                name,
                invocation.author_id,
                invocation.guild_id,
                error.message,
            )
            await self._notify(invocation, error.message)
        except Exception:
            logging.exception("Command %s failed in guild %s", name, invocation.guild_id)
            await self._notify(invocation, GENERIC_FAILURE_MESSAGE)
        return True

    async def _notify(self, invocation: Invocation, content: str) -> None:
        try:
            await invocation.reply(content, ephemeral=True)
        except discord.HTTPException:
            logging.exception("Failed to report command failure in channel %s", invocation.channel_id)


def create_router(
    bot: commands.Bot,
    settings: SettingsStore,
    controller: TicketController,
) -> CommandRouter:
    general = GeneralCommands(bot)
    setup = SetupCommands(settings)
    moderation = ModerationCommands()
    tickets = TicketCommands(controller)

    router = CommandRouter()
    router.register("help", general.help)
    router.register("ping", general.ping)
    router.register("userinfo", general.userinfo)
    router.register("serverinfo", general.serverinfo)
    router.register("setup-welcome", setup.setup_welcome)
    router.register("setup-tickets", setup.setup_tickets)
    router.register("ticket", tickets.open_ticket)
    router.register("ticket-panel", tickets.send_panel)
    router.register("close", tickets.close_ticket, "close-ticket")
    router.register("kick", moderation.kick)
    router.register("ban", moderation.ban)
    router.register("purge", moderation.purge, "clear")
    return router
