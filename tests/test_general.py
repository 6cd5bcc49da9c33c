import asyncio
from unittest.mock import MagicMock

import discord

from helpdesk_bot.general import build_help_embed, send_welcome
from helpdesk_bot.router import create_router
from helpdesk_bot.settings import SettingsStore
from helpdesk_bot.tickets import TicketController


def test_userinfo_defaults_to_invoker_without_touching_stores(fake_discord, fake_invocation):
    async def runner():
        guild = fake_discord.guild()
        bot = fake_discord.bot(guild)
        settings = MagicMock(spec=SettingsStore)
        controller = MagicMock(spec=TicketController)
        router = create_router(bot, settings, controller)
        invoker = fake_discord.member(guild)
        invocation = fake_invocation(bot, guild, invoker, fake_discord.text_channel(guild))

        assert await router.dispatch("userinfo", invocation)

        fields = {field.name: field.value for field in invocation.last_reply.embed.fields}
        assert fields["ID"] == str(invoker.id)
        assert fields["Created"] == f"<t:{int(invoker.created_at.timestamp())}:R>"
        assert fields["Joined"] == f"<t:{int(invoker.joined_at.timestamp())}:R>"
        assert settings.mock_calls == []
        assert controller.mock_calls == []

    asyncio.run(runner())


def test_userinfo_for_user_outside_guild(fake_discord, fake_invocation):
    async def runner():
        guild = fake_discord.guild()
        bot = fake_discord.bot(guild)
        settings = SettingsStore()
        router = create_router(bot, settings, MagicMock(spec=TicketController))
        stranger = MagicMock(spec=discord.User)
        stranger.id = 777
        stranger.created_at = discord.utils.utcnow()
        stranger.display_avatar = MagicMock(url="https://cdn.example/other.png")
        bot.fetch_user.return_value = stranger
        invocation = fake_invocation(bot, guild, fake_discord.member(guild), fake_discord.text_channel(guild), user="<@777>")

        await router.dispatch("userinfo", invocation)

        fields = {field.name: field.value for field in invocation.last_reply.embed.fields}
        assert fields["ID"] == "777"
        assert fields["Joined"] == "N/A"

    asyncio.run(runner())


def test_ping_edits_placeholder_into_latency_embed(fake_discord, fake_invocation):
    async def runner():
        guild = fake_discord.guild()
        bot = fake_discord.bot(guild)
        router = create_router(bot, SettingsStore(), MagicMock(spec=TicketController))
        invocation = fake_invocation(bot, guild, fake_discord.member(guild), fake_discord.text_channel(guild))

        await router.dispatch("ping", invocation)

        assert invocation.last_reply.content == "Pinging..."
        embed = invocation.edits[-1].embed
        assert embed.title == "Pong!"
        assert embed.fields[1].value == "42ms"

    asyncio.run(runner())


def test_help_lists_every_text_command():
    text = "\n".join(field.value for field in build_help_embed().fields)
    for name in ("ticket", "close", "ticket-panel", "setup-tickets", "setup-welcome", "kick", "ban", "purge",
                 "userinfo", "serverinfo", "ping"):
        assert f"`+{name}" in text


def test_welcome_sent_only_when_configured(fake_discord):
    async def runner():
        guild = fake_discord.guild()
        member = fake_discord.member(guild)
        settings = SettingsStore()

        assert await send_welcome(settings, member) is False

        channel = fake_discord.text_channel(guild, name="welcome")
        settings.upsert(guild.id, welcome_channel_id=channel.id)
        assert await send_welcome(settings, member) is True
        embed = channel.send.await_args.kwargs["embed"]
        assert member.mention in embed.description
        assert embed.footer.text == "Member #3"

        del guild.test_channels[channel.id]
        assert await send_welcome(settings, member) is False
        assert channel.send.await_count == 1

    asyncio.run(runner())
