from __future__ import annotations

import re
from typing import TYPE_CHECKING, Callable

from cmdrouter.tokenizer import Tokenizer

if TYPE_CHECKING:
    from cmdrouter.context import Context


PrefixCheck = Callable[["Context", Tokenizer], bool]

MENTION_PREFIX_RE = re.compile(r"<@!?(\d+)> ?")


def no_prefix(_ctx: "Context", _reader: Tokenizer) -> bool:
    return True


def static_prefix(prefix: str) -> PrefixCheck:
    def check(ctx: "Context", reader: Tokenizer) -> bool:
        for expected in prefix:
            if reader.exhausted or reader.read_char() != expected:
                return False
        ctx.prefix = prefix
        return True

    return check


def mention_prefix(ctx: "Context", reader: Tokenizer) -> bool:
    bot_user = ctx.bot_user
    if bot_user is None:
        return False
    match = MENTION_PREFIX_RE.match(reader.text, reader.pos)
    if not match or int(match.group(1)) != bot_user.id:
        return False
    reader.pos = match.end()
    ctx.prefix = match.group(0)
    return True


def multiple_prefix_checkers(*checkers: PrefixCheck) -> PrefixCheck:
    def check(ctx: "Context", reader: Tokenizer) -> bool:
        start = reader.pos
        for checker in checkers:
            if checker(ctx, reader):
                return True
            reader.pos = start
        return False

    return check
