import asyncio
import logging
import os
import re
from typing import Any, Coroutine, Optional

import discord

from helpdesk_bot.config import DEFAULT_HEALTH_PORT


SNOWFLAKE_PATTERN = re.compile(r"<(?:@[!&]?|#)(\d+)>|(\d+)")


async def send_message(
    interaction: discord.Interaction,
    content: Optional[str] = None,
    *,
    embed: Optional[discord.Embed] = None,
    view: Optional[discord.ui.View] = None,
    ephemeral: bool = False,
) -> None:
    extra = {}
    if view is not None:
        extra["view"] = view
    if interaction.response.is_done():
        await interaction.followup.send(content=content, embed=embed, ephemeral=ephemeral, **extra)
        return
    await interaction.response.send_message(content=content, embed=embed, ephemeral=ephemeral, **extra)


def current_timestamp() -> int:
    return int(discord.utils.utcnow().timestamp())


def parse_snowflake(raw: str) -> Optional[int]:
    """Extract an id from a user, role or channel mention, or from a bare id."""
    match = SNOWFLAKE_PATTERN.fullmatch(raw.strip())
    if match is None:
        return None
    return int(match.group(1) or match.group(2))


def create_background_task(coroutine: Coroutine[Any, Any, None]) -> asyncio.Task:
    task = asyncio.create_task(coroutine)
    task.add_done_callback(log_background_error)
    return task


def log_background_error(task: asyncio.Task) -> None:
    try:
        task.result()
    except asyncio.CancelledError:
        return
    except Exception:
        logging.exception("Background task failed")


def load_token() -> str:
    token = os.getenv("DISCORD_TOKEN", "").strip()
    if not token:
        raise ValueError("Environment variable DISCORD_TOKEN is not set.")
    return token


def load_application_id() -> Optional[int]:
    raw = os.getenv("APPLICATION_ID", "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as error:
        raise ValueError("APPLICATION_ID must be a number") from error


def load_health_port() -> int:
    raw = os.getenv("PORT", "").strip()
    if not raw:
        return DEFAULT_HEALTH_PORT
    try:
        return int(raw)
    except ValueError as error:
        raise ValueError("PORT must be a number") from error
