from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Union

from cmdrouter.arguments import ArgumentRule
from cmdrouter.cooldown import Cooldown
from cmdrouter.errors import CommandBlank, CommandNotFound
from cmdrouter.pipeline import run_command
from cmdrouter.tokenizer import Tokenizer
from cmdrouter.transformers import string_transformer
from cmdrouter.utils.discord_utils import maybe_await

if TYPE_CHECKING:
    from cmdrouter.context import Context


PermissionValidator = Callable[["Context"], Union[tuple[str, bool], Awaitable[tuple[str, bool]]]]
Middleware = Callable[["Context"], Union[Exception, None, Awaitable[Union[Exception, None]]]]
Handler = Callable[["Context"], Union[Any, Awaitable[Any]]]


@dataclass(eq=False)
class Category:
    name: str
    description: str = ""
    permission_validators: list[PermissionValidator] = field(default_factory=list)
    middleware: list[Middleware] = field(default_factory=list)
    cooldown: Cooldown | None = None


@dataclass(eq=False)
class Command:
    """
    A runnable command. Equality is identity, so the same instance registered
    under several aliases is still one command.
    """

    name: str = ""
    handler: Handler | None = None
    aliases: list[str] = field(default_factory=list)
    description: str = ""
    usage: str = ""
    category: Category | None = None
    cooldown: Cooldown | None = None
    permission_validators: list[PermissionValidator] = field(default_factory=list)
    arg_rules: list[ArgumentRule] = field(default_factory=list)
    middleware: list[Middleware] = field(default_factory=list)

    def init(self) -> None:
        if self.cooldown is not None:
            self.cooldown.init()

    def get_usage(self) -> str:
        return self.usage

    async def invoke(self, ctx: "Context") -> Any:
        if self.handler is None:
            return None
        return await maybe_await(self.handler(ctx))


GROUP_ARG_RULES = [
    ArgumentRule(function=string_transformer, optional=True),
    ArgumentRule(function=string_transformer, optional=True, remainder=True),
]


@dataclass(eq=False)
class CommandGroup(Command):
    """A command whose first argument picks a sub-command that handles the rest of the text."""

    fallback: Command | None = None
    _subcommands: dict[str, Command] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.arg_rules = list(GROUP_ARG_RULES)

    def add_command(self, command: Command) -> None:
        self._subcommands[command.name.lower()] = command
        for alias in command.aliases:
            self._subcommands[alias.lower()] = command

    def get_command(self, name: str) -> Command | None:
        return self._subcommands.get(name.lower())

    def get_commands(self) -> dict[str, Command]:
        return dict(self._subcommands)

    def init(self) -> None:
        super().init()
        if self.fallback is not None:
            self.fallback.init()
        seen: list[Command] = []
        for command in self._subcommands.values():
            if any(command is other for other in seen):
                continue
            seen.append(command)
            command.init()

    def get_usage(self) -> str:
        names = sorted(self._subcommands)
        if not names:
            if self.fallback is not None:
                return self.fallback.get_usage()
            return ""
        return "<" + "/".join(names) + ">"

    async def invoke(self, ctx: "Context") -> Any:
        name = ctx.args[0]
        if name is None:
            if self.fallback is not None:
                return await run_command(ctx, Tokenizer(""), self.fallback)
            raise CommandBlank("This group expects a command but none was given.")
        subcommand = self.get_command(name)
        if subcommand is None:
            raise CommandNotFound("The command specified for the group was not found.")
        return await run_command(ctx, Tokenizer(ctx.args[1] or ""), subcommand)
