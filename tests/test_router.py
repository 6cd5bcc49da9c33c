import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord

from helpdesk_bot.config import GENERIC_FAILURE_MESSAGE, PREFIX
from helpdesk_bot.errors import NotATicket, TransientApiFailure
from helpdesk_bot.invocation import SlashInvocation, TextInvocation
from helpdesk_bot.router import CommandRouter, create_router, parse_text_command
from helpdesk_bot.settings import SettingsStore
from helpdesk_bot.tickets import TicketController, TicketRegistry


def test_parse_text_command():
    assert parse_text_command("+Kick <@1> being   rude", PREFIX) == ("kick", ["<@1>", "being", "rude"])
    assert parse_text_command("+  ping", PREFIX) == ("ping", [])
    assert parse_text_command("+", PREFIX) is None
    assert parse_text_command("hello +ping", PREFIX) is None


def test_create_router_registers_every_command(fake_discord):
    bot = fake_discord.bot()
    settings = SettingsStore()
    router = create_router(bot, settings, TicketController(bot, settings, TicketRegistry()))

    assert router.names == sorted(
        [
            "ban", "clear", "close", "close-ticket", "help", "kick", "ping", "purge", "serverinfo",
            "setup-tickets", "setup-welcome", "ticket", "ticket-panel", "userinfo",
        ]
    )
    assert "CLOSE-TICKET" in router


def test_unknown_command_is_ignored(fake_discord, fake_invocation):
    async def runner():
        guild = fake_discord.guild()
        invocation = fake_invocation(fake_discord.bot(guild), guild, fake_discord.member(guild), fake_discord.text_channel(guild))

        assert await CommandRouter().dispatch("dance", invocation) is False
        assert invocation.replies == []

    asyncio.run(runner())


def test_dispatch_contains_handler_failures(fake_discord, fake_invocation):
    async def runner():
        guild = fake_discord.guild()
        bot = fake_discord.bot(guild)
        router = CommandRouter()

        async def broken(_invocation):
            raise RuntimeError("boom")

        async def flaky(_invocation):
            raise TransientApiFailure()

        async def misplaced(_invocation):
            raise NotATicket()

        router.register("broken", broken)
        router.register("flaky", flaky)
        router.register("misplaced", misplaced, "elsewhere")

        results = {}
        for name in ("broken", "flaky", "elsewhere"):
            invocation = fake_invocation(bot, guild, fake_discord.member(guild), fake_discord.text_channel(guild))
            assert await router.dispatch(name, invocation) is True
            results[name] = invocation.last_reply

        assert results["broken"].content == GENERIC_FAILURE_MESSAGE
        assert results["flaky"].content == GENERIC_FAILURE_MESSAGE
        assert results["elsewhere"].content == "This is not a ticket channel."
        assert all(reply.ephemeral for reply in results.values())

    asyncio.run(runner())


def test_dispatch_survives_failed_failure_notice(fake_discord, fake_invocation):
    async def runner():
        guild = fake_discord.guild()
        bot = fake_discord.bot(guild)
        router = CommandRouter()

        async def broken(_invocation):
            raise RuntimeError("boom")

        router.register("broken", broken)
        invocation = fake_invocation(bot, guild, fake_discord.member(guild), fake_discord.text_channel(guild))
        invocation.reply = AsyncMock(side_effect=discord.HTTPException(MagicMock(status=500, reason="error"), "error"))

        assert await router.dispatch("broken", invocation) is True
        invocation.reply.assert_awaited_once()

    asyncio.run(runner())


def test_text_invocation_options_and_trigger_cleanup(fake_discord):
    async def runner():
        guild = fake_discord.guild()
        bot = fake_discord.bot(guild)
        author = fake_discord.member(guild)
        target = fake_discord.member(guild)
        channel = fake_discord.text_channel(guild)
        message = MagicMock(spec=discord.Message)
        message.guild = guild
        message.author = author
        message.channel = channel
        message.created_at = discord.utils.utcnow()
        message.reply = AsyncMock()
        message.delete = AsyncMock()

        invocation = TextInvocation(bot, message, [f"<@!{target.id}>", "too", "loud"])

        assert invocation.author_id == author.id
        assert invocation.guild_id == guild.id
        assert invocation.channel_id == channel.id
        assert invocation.resolve_member("user", 0) is target
        assert invocation.option("reason", 1, rest=True) == "too loud"
        assert invocation.option("missing", 5) is None

        await invocation.reply("first")
        message.reply.assert_awaited_once()

        await invocation.discard_trigger()
        await invocation.reply("second", delete_after=5)
        message.delete.assert_awaited_once()
        channel.send.assert_awaited_once()
        assert channel.send.await_args.kwargs["delete_after"] == 5

    asyncio.run(runner())


def test_slash_invocation_replies_and_follows_up(fake_discord):
    async def runner():
        guild = fake_discord.guild()
        bot = fake_discord.bot(guild)
        author = fake_discord.member(guild)
        role = fake_discord.role(guild)
        interaction = SimpleNamespace(
            guild=guild,
            user=author,
            channel=fake_discord.text_channel(guild),
            created_at=discord.utils.utcnow(),
            response=SimpleNamespace(is_done=MagicMock(return_value=False), send_message=AsyncMock()),
            followup=SimpleNamespace(send=AsyncMock()),
        )

        invocation = SlashInvocation(bot, interaction, {"support_role": role})
        assert invocation.resolve_role("support_role", 1) is role
        assert invocation.option("category", 0) is None

        await invocation.reply("hello", ephemeral=True)
        interaction.response.send_message.assert_awaited_once_with(content="hello", embed=None, ephemeral=True)

        interaction.response.is_done.return_value = True
        await invocation.reply("again")
        interaction.followup.send.assert_awaited_once_with(content="again", embed=None, ephemeral=False)

    asyncio.run(runner())
