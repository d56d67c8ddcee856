from __future__ import annotations

import inspect
from typing import Any

import discord


async def maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def snowflake(obj: Any) -> int:
    """Id of a discord object, or 0 when the object is missing."""
    if obj is None:
        return 0
    return int(getattr(obj, "id", 0) or 0)


async def get_bot_member(client: discord.Client | None, guild: discord.Guild | None) -> discord.Member | None:
    """
    Member object for the bot in `guild`, or None when it cannot be resolved.

    Prefers `guild.me`, then the member cache, then a REST fetch; a forbidden or
    failed fetch resolves to None so permission checks can report it.
    """

    if guild is None:
        return None
    me = getattr(guild, "me", None)
    if me is not None:
        return me
    if client is None or client.user is None:
        return None
    cached = guild.get_member(client.user.id)
    if cached is not None:
        return cached
    try:
        return await guild.fetch_member(client.user.id)
    except (discord.Forbidden, discord.HTTPException):
        return None
