from typing import Optional, Tuple

import discord
from discord.ext import commands

from helpdesk_bot.errors import ActionRejected, InsufficientPermission
from helpdesk_bot.invocation import Invocation


def get_bot_member(bot: commands.Bot, guild: discord.Guild) -> Optional[discord.Member]:
    if bot.user is None:
        return None
    return guild.get_member(bot.user.id)


def permission_label(permission_name: str) -> str:
    return permission_name.replace("_", " ").title()


def require_permission(
    invocation: Invocation,
    *,
    permission_name: str,
    require_bot_permission: bool = True,
) -> Tuple[discord.Guild, discord.Member, Optional[discord.Member]]:
    guild = invocation.guild
    actor = invocation.author
    if not getattr(actor.guild_permissions, permission_name):
        raise InsufficientPermission(
            f"You need {permission_label(permission_name)} permission to use this command."
        )

    bot_member = get_bot_member(invocation.bot, guild)
    if require_bot_permission:
        if bot_member is None:
            raise ActionRejected("I cannot resolve my member data in this guild.")
        if not getattr(bot_member.guild_permissions, permission_name):
            raise ActionRejected("I do not have the required permission for this command.")

    return guild, actor, bot_member


def require_moderation(
    invocation: Invocation,
    target: discord.Member,
    *,
    permission_name: str,
) -> Tuple[discord.Guild, discord.Member, discord.Member]:
    guild, actor, bot_member = require_permission(invocation, permission_name=permission_name)

    if target.id == actor.id:
        raise ActionRejected("You cannot use this command on yourself.")
    if target.id == bot_member.id:
        raise ActionRejected("You cannot target the bot.")
    if target.id == guild.owner_id:
        raise ActionRejected("You cannot target the server owner.")

    if actor.id != guild.owner_id and target.top_role >= actor.top_role:
        raise ActionRejected("You can only target members below your top role.")
    if target.top_role >= bot_member.top_role:
        raise ActionRejected("I can only target members below my top role.")

    return guild, actor, bot_member
