from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Union

from cmdrouter.errors import CommandError, InvalidArgCount
from cmdrouter.tokenizer import Tokenizer
from cmdrouter.utils.discord_utils import maybe_await

if TYPE_CHECKING:
    from cmdrouter.context import Context


Transformer = Callable[["Context", str], Union[Any, Awaitable[Any]]]


@dataclass(frozen=True)
class ArgumentRule:
    """
    How one positional argument is read and converted.

    `default=None` means the rule has no default. Remainder rules must come last.
    """

    function: Transformer
    greedy: bool = False
    optional: bool = False
    remainder: bool = False
    default: Any = None


async def resolve_arguments(ctx: "Context", rules: list[ArgumentRule], reader: Tokenizer) -> list[Any]:
    args: list[Any] = [None] * len(rules)
    for index, rule in enumerate(rules):
        if rule.remainder:
            await _resolve_remainder(ctx, rule, reader, args, index)
            break
        if rule.greedy:
            await _resolve_greedy(ctx, rule, reader, args, index)
            continue
        token, _ = reader.next_token()
        if token == "":
            if rule.default is not None:
                args[index] = rule.default
                continue
            if rule.optional:
                # An unmet optional argument ends parsing for every later rule too.
                break
            raise InvalidArgCount("A required argument is missing.")
        args[index] = await maybe_await(rule.function(ctx, token))
    return args


async def _resolve_remainder(ctx: "Context", rule: ArgumentRule, reader: Tokenizer, args: list[Any], index: int) -> None:
    text = reader.remainder(fill=True).strip(" ")
    if text == "":
        if rule.default is not None:
            args[index] = rule.default
            return
        if rule.optional:
            return
        raise InvalidArgCount("The remainder of the command is missing.")
    args[index] = await maybe_await(rule.function(ctx, text))


async def _resolve_greedy(ctx: "Context", rule: ArgumentRule, reader: Tokenizer, args: list[Any], index: int) -> None:
    collected: list[Any] = []
    first = True
    while True:
        token, consumed = reader.next_token()
        if token == "":
            if first:
                if rule.default is not None:
                    args[index] = rule.default
                    return
                if rule.optional:
                    return
                raise InvalidArgCount("Expected at least one argument for the greedy converter.")
            break
        try:
            value = await maybe_await(rule.function(ctx, token))
        except CommandError:
            if first:
                raise
            reader.rewind(consumed)
            break
        collected.append(value)
        first = False
    args[index] = collected
