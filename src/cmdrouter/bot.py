from __future__ import annotations

from datetime import datetime, timezone

import discord

from cmdrouter.arguments import ArgumentRule
from cmdrouter.command import Category, Command, CommandGroup
from cmdrouter.config import Settings
from cmdrouter.context import Context
from cmdrouter.cooldown import ChannelCooldown, UserCooldown
from cmdrouter.errors import (
    CommandBlank,
    CommandNotFound,
    CommandOnCooldown,
    IncorrectPermissions,
    InvalidArgCount,
    InvalidTransformation,
)
from cmdrouter.permissions import require_permissions
from cmdrouter.prefix import PrefixCheck, mention_prefix, multiple_prefix_checkers, static_prefix
from cmdrouter.router import Router
from cmdrouter.services.logger_service import LoggerService
from cmdrouter.transformers import float_transformer, int_transformer, string_transformer, user_transformer

ECHO_WAIT_TIMEOUT_SEC = 5.0


def build_prefix_check(settings: Settings) -> PrefixCheck:
    checkers: list[PrefixCheck] = []
    if settings.command_prefix:
        checkers.append(static_prefix(settings.command_prefix))
    if settings.mention_prefix:
        checkers.append(mention_prefix)
    if len(checkers) == 1:
        return checkers[0]
    return multiple_prefix_checkers(*checkers)


async def reply_to_user_errors(ctx: Context, error: Exception) -> bool:
    if isinstance(error, (CommandNotFound, CommandBlank)):
        return True
    if isinstance(error, InvalidTransformation):
        await ctx.reply(f"Invalid argument: {error}")
        return True
    if isinstance(error, IncorrectPermissions):
        await ctx.reply(f"Invalid permissions: {error}")
        return True
    if isinstance(error, InvalidArgCount):
        await ctx.reply("Invalid argument count.")
        return True
    if isinstance(error, CommandOnCooldown):
        await ctx.reply(str(error))
        return True
    return False


class CommandBot(discord.Client):
    def __init__(self, settings: Settings) -> None:
        intents = discord.Intents.default()
        intents.guilds = True
        intents.members = True
        intents.messages = True
        intents.message_content = True
        super().__init__(intents=intents)
        self.settings = settings
        self.logger = LoggerService(settings.log_max_rows)
        self.router = Router(
            prefix_check=build_prefix_check(settings),
            error_handlers=[reply_to_user_errors],
            logger=self.logger,
            help_command=settings.help_command,
        )
        self.started_at = datetime.now(tz=timezone.utc)
        self.router.hook(self)
        self._register_commands()

    async def on_ready(self) -> None:
        self.logger.log("bot.ready", user_id=self.user.id if self.user else 0, guilds=len(self.guilds))

    def _register_commands(self) -> None:
        async def ping(ctx: Context) -> None:
            await ctx.reply("Pong!")

        self.router.set_command(Command(name="ping", description="Responds with pong.", handler=ping))

        async def uptime(ctx: Context) -> None:
            await ctx.reply(f"Uptime: `{datetime.now(tz=timezone.utc) - self.started_at}`")

        self.router.set_command(Command(name="uptime", aliases=["up"], description="Shows how long the bot has run.", handler=uptime))

        async def tag(ctx: Context) -> None:
            await ctx.reply(ctx.args[0].mention)

        self.router.set_command(
            Command(
                name="tag",
                description="Tags the user specified.",
                usage="<user>",
                cooldown=UserCooldown(max_runs=2, usage_expires=60),
                arg_rules=[ArgumentRule(function=user_transformer)],
                handler=tag,
            )
        )

        async def echo(ctx: Context) -> None:
            await ctx.reply(ctx.args[0])
            if ctx.args[1] is not None:
                await ctx.reply(f"Optional arg: {ctx.args[1]}")

        self.router.set_command(
            Command(
                name="echo",
                description="Echos arguments.",
                usage="<text> [text]",
                arg_rules=[
                    ArgumentRule(function=string_transformer),
                    ArgumentRule(function=string_transformer, optional=True),
                ],
                handler=echo,
            )
        )

        async def add_and_echo(ctx: Context) -> None:
            await ctx.reply(f"{ctx.args[1]}: {sum(ctx.args[0])}")

        self.router.set_command(
            Command(
                name="addandecho",
                description="Adds numbers and echos the last argument.",
                usage="<numbers...> <text>",
                arg_rules=[
                    ArgumentRule(function=int_transformer, greedy=True),
                    ArgumentRule(function=string_transformer),
                ],
                handler=add_and_echo,
            )
        )

        async def echo_wait(ctx: Context) -> None:
            await ctx.reply("say the message")
            response = await ctx.wait_for_message(
                lambda msg: msg.author.id == ctx.author.id and msg.channel.id == ctx.channel.id,
                timeout=ECHO_WAIT_TIMEOUT_SEC,
            )
            await ctx.reply("timed out" if response is None else response.content)

        self.router.set_command(Command(name="echowait", description="Wait for a message then echo it.", handler=echo_wait))

        self.router.set_command(self._math_group())

    def _math_group(self) -> CommandGroup:
        maths = Category(
            name="Maths",
            description="Number crunching.",
            cooldown=ChannelCooldown(max_runs=10, usage_expires=30),
        )
        numbers = [ArgumentRule(function=float_transformer, greedy=True)]

        async def add(ctx: Context) -> None:
            await ctx.reply(f"{sum(ctx.args[0]):g}")

        async def multiply(ctx: Context) -> None:
            total = 1.0
            for value in ctx.args[0]:
                total *= value
            await ctx.reply(f"{total:g}")

        async def explain(ctx: Context) -> None:
            await ctx.reply(f"Try `{ctx.prefix}math {group.get_usage()} <numbers...>`.")

        group = CommandGroup(
            name="math",
            aliases=["calc"],
            description="Runs a maths sub-command.",
            category=maths,
            permission_validators=[require_permissions("send_messages", "read_message_history")],
            fallback=Command(handler=explain),
        )
        group.add_command(Command(name="add", aliases=["sum"], arg_rules=numbers, handler=add))
        group.add_command(Command(name="multiply", arg_rules=numbers, handler=multiply))
        return group


def main() -> None:
    settings = Settings.load()
    bot = CommandBot(settings)
    bot.run(settings.discord_token)
