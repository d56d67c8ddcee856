from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

import discord

from cmdrouter.arguments import Transformer
from cmdrouter.errors import InvalidTransformation
from cmdrouter.utils.discord_utils import maybe_await

if TYPE_CHECKING:
    from cmdrouter.context import Context


USER_MENTION_RE = re.compile(r"^<@!?(\d+)>$")
CHANNEL_MENTION_RE = re.compile(r"^<#(\d+)>$")
ROLE_MENTION_RE = re.compile(r"^<@&(\d+)>$")

TRUE_WORDS = {"true", "yes", "y", "on", "1", "enable", "enabled"}
FALSE_WORDS = {"false", "no", "n", "off", "0", "disable", "disabled"}


def string_transformer(_ctx: "Context", arg: str) -> str:
    return arg


def int_transformer(_ctx: "Context", arg: str) -> int:
    try:
        return int(arg, 10)
    except ValueError:
        raise InvalidTransformation("Could not transform the argument to an integer.") from None


def uint_transformer(_ctx: "Context", arg: str) -> int:
    # str.isdigit() also accepts superscripts and circled digits that int() rejects.
    if not (arg.isascii() and arg.isdigit()):
        raise InvalidTransformation("Could not transform the argument to an unsigned integer.")
    return int(arg)


def float_transformer(_ctx: "Context", arg: str) -> float:
    try:
        return float(arg)
    except ValueError:
        raise InvalidTransformation("Could not transform the argument to a number.") from None


def bool_transformer(_ctx: "Context", arg: str) -> bool:
    lowered = arg.lower()
    if lowered in TRUE_WORDS:
        return True
    if lowered in FALSE_WORDS:
        return False
    raise InvalidTransformation("Could not transform the argument to a boolean.")


def any_transformer(*functions: Transformer) -> Transformer:
    """Try each conversion function in order; the first one to succeed wins."""

    async def transform(ctx: "Context", arg: str) -> Any:
        last_error: InvalidTransformation | None = None
        for function in functions:
            try:
                return await maybe_await(function(ctx, arg))
            except InvalidTransformation as exc:
                last_error = exc
        raise last_error or InvalidTransformation("No transformers were given.")

    return transform


def parse_mention(arg: str, pattern: re.Pattern[str]) -> int | None:
    match = pattern.match(arg)
    if match:
        return int(match.group(1))
    if arg.isdigit():
        return int(arg)
    return None


async def user_transformer(ctx: "Context", arg: str) -> discord.User:
    user_id = parse_mention(arg, USER_MENTION_RE)
    if user_id is None or ctx.client is None:
        raise InvalidTransformation("Could not find the user specified.")
    user = ctx.client.get_user(user_id)
    if user is not None:
        return user
    try:
        return await ctx.client.fetch_user(user_id)
    except (discord.NotFound, discord.HTTPException):
        raise InvalidTransformation("Could not find the user specified.") from None


async def member_transformer(ctx: "Context", arg: str) -> discord.Member:
    user_id = parse_mention(arg, USER_MENTION_RE)
    guild = ctx.guild
    if user_id is None or guild is None:
        raise InvalidTransformation("Could not find the member specified.")
    member = guild.get_member(user_id)
    if member is not None:
        return member
    try:
        return await guild.fetch_member(user_id)
    except (discord.NotFound, discord.HTTPException):
        raise InvalidTransformation("Could not find the member specified.") from None


async def channel_transformer(ctx: "Context", arg: str) -> discord.abc.GuildChannel:
    channel_id = parse_mention(arg.lstrip("#"), CHANNEL_MENTION_RE)
    guild = ctx.guild
    if channel_id is None or guild is None:
        raise InvalidTransformation("Could not find the channel specified.")
    channel = guild.get_channel(channel_id)
    if channel is not None:
        return channel
    try:
        return await guild.fetch_channel(channel_id)
    except (discord.NotFound, discord.HTTPException):
        raise InvalidTransformation("Could not find the channel specified.") from None


def role_transformer(ctx: "Context", arg: str) -> discord.Role:
    role_id = parse_mention(arg, ROLE_MENTION_RE)
    guild = ctx.guild
    if role_id is None or guild is None:
        raise InvalidTransformation("Could not find the role specified.")
    role = guild.get_role(role_id)
    if role is None:
        raise InvalidTransformation("Could not find the role specified.")
    return role
