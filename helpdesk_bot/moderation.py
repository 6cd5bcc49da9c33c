from typing import Any, Optional

import discord

from helpdesk_bot.config import (
    DEFAULT_REASON,
    PREFIX,
    PURGE_CONFIRMATION_SECONDS,
    PURGE_MAX_AMOUNT,
    PURGE_MIN_AMOUNT,
)
from helpdesk_bot.errors import ActionRejected, InvalidTarget, TransientApiFailure, UsageError
from helpdesk_bot.invocation import Invocation
from helpdesk_bot.permissions import require_moderation, require_permission


def parse_purge_amount(raw: Any) -> Optional[int]:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        amount = raw
    else:
        try:
            amount = int(str(raw).strip())
        except ValueError:
            return None
    if amount < PURGE_MIN_AMOUNT or amount > PURGE_MAX_AMOUNT:
        return None
    return amount


def resolve_reason(invocation: Invocation) -> str:
    reason = invocation.option("reason", 1, rest=True)
    if reason is None or not str(reason).strip():
        return DEFAULT_REASON
    return str(reason).strip()


class ModerationCommands:
    async def kick(self, invocation: Invocation) -> None:
        require_permission(invocation, permission_name="kick_members")
        if invocation.option("user", 0) is None:
            raise UsageError(f"Usage: `{PREFIX}kick @user [reason]`")

        target = invocation.resolve_member("user", 0)
        if target is None:
            raise InvalidTarget("User not found in this server.")

        guild, actor, _ = require_moderation(invocation, target, permission_name="kick_members")
        reason = resolve_reason(invocation)
        try:
            await guild.kick(target, reason=f"Kick by {actor} ({actor.id}). Reason: {reason}")
        except discord.Forbidden as error:
            raise ActionRejected("Cannot kick this user.") from error
        except discord.HTTPException as error:
            raise TransientApiFailure("Failed to kick user.") from error

        await invocation.reply(f"Kicked {target} for: {reason}")

    async def ban(self, invocation: Invocation) -> None:
        require_permission(invocation, permission_name="ban_members")
        if invocation.option("user", 0) is None:
            raise UsageError(f"Usage: `{PREFIX}ban @user [reason]`")

        member = invocation.resolve_member("user", 0)
        if member is not None:
            guild, actor, _ = require_moderation(invocation, member, permission_name="ban_members")
            target: discord.abc.User = member
        else:
            # Users who already left the server can still be banned by id.
            user = await invocation.resolve_user("user", 0)
            if user is None:
                raise InvalidTarget("User not found.")
            guild, actor = invocation.guild, invocation.author
            target = user

        reason = resolve_reason(invocation)
        try:
            await guild.ban(
                target,
                reason=f"Ban by {actor} ({actor.id}). Reason: {reason}",
                delete_message_seconds=0,
            )
        except discord.Forbidden as error:
            raise ActionRejected("Cannot ban this user.") from error
        except discord.HTTPException as error:
            raise TransientApiFailure("Failed to ban user.") from error

        await invocation.reply(f"Banned {target} for: {reason}")

    async def purge(self, invocation: Invocation) -> None:
        _, actor, _ = require_permission(invocation, permission_name="manage_messages")

        amount = parse_purge_amount(invocation.option("amount", 0))
        if amount is None:
            raise UsageError(f"Usage: `{PREFIX}purge <{PURGE_MIN_AMOUNT}-{PURGE_MAX_AMOUNT}>`")

        channel = invocation.channel
        if not isinstance(channel, (discord.TextChannel, discord.Thread)):
            raise UsageError("This command can only be used in text channels or threads.")

        await invocation.defer()
        await invocation.discard_trigger()
        try:
            deleted = await channel.purge(limit=amount, reason=f"Purge by {actor} ({actor.id})")
        except discord.Forbidden as error:
            raise ActionRejected("I do not have permission to delete messages here.") from error
        except discord.HTTPException as error:
            raise TransientApiFailure("Failed to delete messages.") from error

        await invocation.reply(
            f"Deleted `{len(deleted)}` message(s).",
            ephemeral=True,
            delete_after=PURGE_CONFIRMATION_SECONDS,
        )
