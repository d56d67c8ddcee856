from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Awaitable, Callable

import discord

if TYPE_CHECKING:
    from cmdrouter.context import Context


class PermissionCheck(enum.IntFlag):
    MEMBER_USER = 1
    MEMBER_CHANNEL = 2
    BOT_USER = 4
    BOT_CHANNEL = 8


def display_name(permission: str) -> str:
    return permission.replace("_", " ").title()


def _missing(perms: discord.Permissions, names: tuple[str, ...]) -> str | None:
    if perms.administrator:
        return None
    for name in names:
        if not getattr(perms, name):
            return name
    return None


def require_permissions(
    *names: str,
    checks: PermissionCheck = PermissionCheck.MEMBER_USER,
) -> Callable[["Context"], Awaitable[tuple[str, bool]]]:
    """
    Build a validator that requires discord permissions, e.g.
    `require_permissions("embed_links", checks=PermissionCheck.BOT_CHANNEL)`.

    Member checks pass for the guild owner; administrator passes everything.
    """

    for name in names:
        if name not in discord.Permissions.VALID_FLAGS:
            raise ValueError(f"unknown permission: {name}")
    if not checks:
        checks = PermissionCheck.MEMBER_USER
    check_member = bool(checks & (PermissionCheck.MEMBER_USER | PermissionCheck.MEMBER_CHANNEL))
    check_bot = bool(checks & (PermissionCheck.BOT_USER | PermissionCheck.BOT_CHANNEL))

    async def validator(ctx: "Context") -> tuple[str, bool]:
        guild = ctx.guild
        if guild is None:
            return "This command can only be used in a server.", False
        if check_member:
            member = ctx.author
            if guild.owner_id != member.id:
                if checks & PermissionCheck.MEMBER_CHANNEL:
                    perms = ctx.channel.permissions_for(member)
                else:
                    perms = member.guild_permissions
                missing = _missing(perms, names)
                if missing is not None:
                    return f'You must have the "{display_name(missing)}" permission to run this command.', False
        if check_bot:
            me = await ctx.bot_member()
            if me is None:
                return "Could not resolve the bot member for this server.", False
            if checks & PermissionCheck.BOT_CHANNEL:
                perms = ctx.channel.permissions_for(me)
            else:
                perms = me.guild_permissions
            missing = _missing(perms, names)
            if missing is not None:
                return f'The bot must have the "{display_name(missing)}" permission to run this command.', False
        return "", True

    return validator


def guild_owner_only(ctx: "Context") -> tuple[str, bool]:
    guild = ctx.guild
    if guild is not None and guild.owner_id == ctx.author.id:
        return "", True
    return "Only the server owner can run this command.", False
