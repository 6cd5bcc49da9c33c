import itertools
import os
import sys
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if root not in sys.path:
    sys.path.insert(0, root)

from helpdesk_bot.invocation import Invocation  # noqa: E402


BOT_USER_ID = 900
OWNER_ID = 1


class FakeInvocation(Invocation):
    """Invocation that records replies instead of talking to Discord."""

    def __init__(self, bot, guild, author, channel, /, **options) -> None:
        super().__init__(bot, guild, author, channel, discord.utils.utcnow())
        self.options = options
        self.replies = []
        self.edits = []
        self.trigger_discarded = False

    async def reply(self, content=None, *, embed=None, view=None, ephemeral=False, delete_after=None):
        self.replies.append(
            SimpleNamespace(content=content, embed=embed, view=view, ephemeral=ephemeral, delete_after=delete_after)
        )
        return None

    async def edit_reply(self, sent, *, content=None, embed=None) -> None:
        self.edits.append(SimpleNamespace(sent=sent, content=content, embed=embed))

    async def discard_trigger(self) -> None:
        self.trigger_discarded = True

    def option(self, name, position, *, rest=False):
        return self.options.get(name)

    @property
    def last_reply(self):
        return self.replies[-1]


class FakeDiscord:
    """Factory for guild, member, role and channel doubles sharing one id sequence."""

    def __init__(self) -> None:
        self._ids = itertools.count(100)

    def next_id(self) -> int:
        return next(self._ids)

    def guild(self, guild_id=None):
        guild = MagicMock(spec=discord.Guild)
        guild.id = guild_id if guild_id is not None else self.next_id()
        guild.name = "Test Guild"
        guild.owner_id = OWNER_ID
        guild.member_count = 3
        guild.premium_tier = 0
        guild.icon = None
        guild.created_at = datetime(2020, 1, 1, tzinfo=timezone.utc)
        guild.default_role = self.role(guild, position=0, name="@everyone")
        guild.test_channels = {}
        guild.test_roles = {}
        guild.test_members = {}
        guild.get_channel.side_effect = guild.test_channels.get
        guild.get_role.side_effect = guild.test_roles.get
        guild.get_member.side_effect = guild.test_members.get
        guild.channels = []
        guild.roles = []
        guild.kick = AsyncMock()
        guild.ban = AsyncMock()

        async def create_text_channel(name, **kwargs):
            return self.text_channel(guild, name=name)

        guild.create_text_channel = AsyncMock(side_effect=create_text_channel)
        return guild

    def role(self, guild, *, position=1, name="Support"):
        role = MagicMock(spec=discord.Role)
        role.id = self.next_id()
        role.name = name
        role.position = position
        role.mention = f"<@&{role.id}>"
        if hasattr(guild, "test_roles"):
            guild.test_roles[role.id] = role
        return role

    def member(self, guild, *, permissions=None, top_role=1, member_id=None):
        member = MagicMock(spec=discord.Member)
        member.id = member_id if member_id is not None else self.next_id()
        member.guild = guild
        member.bot = False
        member.mention = f"<@{member.id}>"
        member.guild_permissions = permissions if permissions is not None else discord.Permissions.none()
        member.top_role = top_role
        member.created_at = datetime(2021, 5, 4, tzinfo=timezone.utc)
        member.joined_at = datetime(2022, 6, 7, tzinfo=timezone.utc)
        member.display_avatar = SimpleNamespace(url="https://cdn.example/avatar.png")
        guild.test_members[member.id] = member
        return member

    def text_channel(self, guild, *, name="general"):
        channel = MagicMock(spec=discord.TextChannel)
        channel.id = self.next_id()
        channel.name = name
        channel.guild = guild
        channel.mention = f"<#{channel.id}>"
        channel.send = AsyncMock()
        channel.delete = AsyncMock()
        channel.purge = AsyncMock(return_value=[])
        guild.test_channels[channel.id] = channel
        return channel

    def category(self, guild, *, name="Tickets"):
        category = MagicMock(spec=discord.CategoryChannel)
        category.id = self.next_id()
        category.name = name
        category.guild = guild
        category.mention = f"<#{category.id}>"
        guild.test_channels[category.id] = category
        return category

    def bot(self, guild=None, *, bot_permissions=None):
        bot = SimpleNamespace(
            user=SimpleNamespace(id=BOT_USER_ID),
            latency=0.042,
            get_user=lambda _user_id: None,
            fetch_user=AsyncMock(),
            router=None,
        )
        if guild is not None:
            self.member(
                guild,
                permissions=bot_permissions if bot_permissions is not None else discord.Permissions.all(),
                top_role=50,
                member_id=BOT_USER_ID,
            )
        return bot


@pytest.fixture
def fake_discord():
    return FakeDiscord()


@pytest.fixture
def fake_invocation():
    return FakeInvocation
