from __future__ import annotations

import threading
from typing import Awaitable, Callable, Iterable, Union

import discord

from cmdrouter.command import Category, Command, Middleware, PermissionValidator
from cmdrouter.context import Context
from cmdrouter.cooldown import Cooldown
from cmdrouter.errors import CommandBlank, CommandError, CommandNotFound, MiddlewareFailed
from cmdrouter.help_command import default_help_command
from cmdrouter.pipeline import run_command
from cmdrouter.prefix import PrefixCheck, no_prefix
from cmdrouter.services.logger_service import LoggerService
from cmdrouter.state import State
from cmdrouter.tokenizer import Tokenizer
from cmdrouter.utils.discord_utils import maybe_await, snowflake


ErrorHandler = Callable[[Context, Exception], Union[bool, Awaitable[bool]]]
CustomCommandsHandler = Callable[[Context, str, Tokenizer], Union[bool, Awaitable[bool]]]


class Router:
    """
    Owns the command registry and turns inbound messages into command runs.

    Lookups and registration share one lock; it is released before a command
    runs so slow handlers never block registration.
    """

    def __init__(
        self,
        *,
        prefix_check: PrefixCheck | None = None,
        error_handlers: Iterable[ErrorHandler] = (),
        permission_validators: Iterable[PermissionValidator] = (),
        middleware: Iterable[Middleware] = (),
        cooldown: Cooldown | None = None,
        custom_commands_handler: CustomCommandsHandler | None = None,
        logger: LoggerService | None = None,
        help_command: bool = True,
    ) -> None:
        self.prefix_check = prefix_check or no_prefix
        self.error_handlers: list[ErrorHandler] = list(error_handlers)
        self.permission_validators: list[PermissionValidator] = list(permission_validators)
        self.middleware: list[Middleware] = list(middleware)
        self.cooldown = cooldown
        self.custom_commands_handler = custom_commands_handler
        self.logger = logger or LoggerService()
        self._commands: dict[str, Command] = {}
        self._lock = threading.Lock()
        self._states: dict[int, State] = {}
        self._states_lock = threading.Lock()
        if self.cooldown is not None:
            self.cooldown.init()
        if help_command:
            self.set_command(default_help_command())

    def add_error_handler(self, handler: ErrorHandler) -> None:
        with self._lock:
            self.error_handlers.append(handler)

    def get_command(self, name: str) -> Command | None:
        with self._lock:
            return self._commands.get(name.lower())

    def set_command(self, command: Command) -> None:
        command.init()
        keys = [command.name.lower()] + [alias.lower() for alias in command.aliases]
        with self._lock:
            for key in keys:
                self._commands[key] = command
        self.logger.log("router.command_set", name=command.name, aliases=list(command.aliases))

    def remove_command(self, command: Command) -> None:
        keys = [command.name.lower()] + [alias.lower() for alias in command.aliases]
        with self._lock:
            for key in keys:
                self._commands.pop(key, None)
        self.logger.log("router.command_removed", name=command.name)

    def get_all_commands(self) -> list[Command]:
        with self._lock:
            return [command for key, command in self._commands.items() if key == command.name.lower()]

    def get_commands_ordered_by_category(self) -> dict[Category | None, list[Command]]:
        ordered: dict[Category | None, list[Command]] = {}
        for command in self.get_all_commands():
            ordered.setdefault(command.category, []).append(command)
        return ordered

    def state_for(self, guild_id: int) -> State:
        with self._states_lock:
            state = self._states.get(guild_id)
            if state is None:
                state = State()
                self._states[guild_id] = state
            return state

    def hook(self, client: discord.Client) -> None:
        async def on_message(message: discord.Message) -> None:
            await self.process_message(message, client)

        client.event(on_message)

    async def process_message(self, message: discord.Message, client: discord.Client | None = None) -> None:
        if message.author.bot or message.guild is None:
            return
        ctx = Context(message=message, router=self, client=client)
        reader = Tokenizer(message.content or "")
        if not self.prefix_check(ctx, reader):
            return
        ctx.state = self.state_for(snowflake(message.guild))

        name = reader.read_word()
        if name == "":
            await self._run_custom_command(ctx, "", reader, CommandBlank("The command is blank."))
            return
        ctx.raw_args = reader.remainder()
        command = self.get_command(name)
        if command is None:
            await self._run_custom_command(
                ctx, name, reader, CommandNotFound(f'The command "{name}" does not exist.')
            )
            return
        try:
            await run_command(ctx, reader, command)
        except MiddlewareFailed as exc:
            await self.dispatch_error(ctx, exc.error)
        except CommandError as exc:
            await self.dispatch_error(ctx, exc)

    async def _run_custom_command(self, ctx: Context, name: str, reader: Tokenizer, missing: CommandError) -> None:
        handled = False
        if self.custom_commands_handler is not None:
            try:
                handled = await maybe_await(self.custom_commands_handler(ctx, name, reader))
            except Exception as exc:  # noqa: BLE001
                await self.dispatch_error(ctx, exc)
                return
        if not handled:
            await self.dispatch_error(ctx, missing)

    async def dispatch_error(self, ctx: Context, error: Exception) -> None:
        with self._lock:
            handlers = list(self.error_handlers)
        for handler in handlers:
            if await maybe_await(handler(ctx, error)):
                return
        self.logger.log(
            "router.unhandled_error",
            kind=type(error).__name__,
            error=str(error),
            command=ctx.command.name if ctx.command is not None else "",
            message_id=snowflake(ctx.message),
        )
