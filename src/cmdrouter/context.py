from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

import discord

from cmdrouter.pipeline import run_command
from cmdrouter.tokenizer import Tokenizer
from cmdrouter.utils.discord_utils import get_bot_member

if TYPE_CHECKING:
    from cmdrouter.command import Command
    from cmdrouter.router import Router
    from cmdrouter.state import State


@dataclass
class Context:
    """Everything one dispatch knows about the message it is handling. Never shared between tasks."""

    message: discord.Message
    router: "Router"
    client: discord.Client | None = None
    prefix: str = ""
    command: "Command | None" = None
    raw_args: str = ""
    args: list[Any] = field(default_factory=list)
    middleware_params: dict[str, Any] = field(default_factory=dict)
    state: "State | None" = None

    @property
    def author(self) -> discord.abc.User:
        return self.message.author

    @property
    def channel(self) -> discord.abc.Messageable:
        return self.message.channel

    @property
    def guild(self) -> discord.Guild | None:
        return self.message.guild

    @property
    def bot_user(self) -> discord.ClientUser | None:
        if self.client is None:
            return None
        return self.client.user

    async def reply(self, content: Any = None, **kwargs: Any) -> discord.Message:
        return await self.channel.send(content, **kwargs)

    async def bot_member(self) -> discord.Member | None:
        return await get_bot_member(self.client, self.guild)

    async def replay(self) -> Any:
        if self.command is None:
            return None
        self.args = []
        return await run_command(self, Tokenizer(self.raw_args), self.command)

    async def wait_for_message(
        self,
        check: Callable[[discord.Message], bool],
        *,
        timeout: float | None = None,
    ) -> discord.Message | None:
        if self.client is None:
            return None
        try:
            return await self.client.wait_for("message", check=check, timeout=timeout)
        except asyncio.TimeoutError:
            return None
