import logging

import discord
from discord.ext import commands, tasks

from helpdesk_bot.config import HEARTBEAT_INTERVAL_MINUTES, PREFIX
from helpdesk_bot.general import send_welcome


class EventsCog(commands.Cog):
    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    async def cog_load(self) -> None:
        self.heartbeat.start()

    async def cog_unload(self) -> None:
        self.heartbeat.cancel()

    @tasks.loop(minutes=HEARTBEAT_INTERVAL_MINUTES)
    async def heartbeat(self) -> None:
        logging.info("Bot heartbeat - %s", discord.utils.utcnow().isoformat())

    @commands.Cog.listener()
    async def on_ready(self) -> None:
        logging.info("%s is online!", self.bot.user)
        await self.bot.change_presence(
            activity=discord.Activity(type=discord.ActivityType.watching, name=f"{PREFIX}help | Helping users")
        )

    @commands.Cog.listener()
    async def on_member_join(self, member: discord.Member) -> None:
        await send_welcome(self.bot.settings, member)


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(EventsCog(bot))
