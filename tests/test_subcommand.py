from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any

from cmdrouter.arguments import ArgumentRule
from cmdrouter.command import Command, CommandGroup
from cmdrouter.cooldown import UserCooldown
from cmdrouter.errors import CommandBlank, CommandNotFound, InvalidArgCount
from cmdrouter.prefix import static_prefix
from cmdrouter.router import Router
from cmdrouter.services.logger_service import LoggerService
from cmdrouter.transformers import string_transformer


def _message(content: str) -> SimpleNamespace:
    async def send(content: Any = None, **kwargs: Any) -> None:
        return None

    return SimpleNamespace(
        id=77,
        content=content,
        author=SimpleNamespace(id=1, bot=False),
        channel=SimpleNamespace(id=2, send=send),
        guild=SimpleNamespace(id=3, owner_id=0),
    )


def _make_router(**kwargs: Any) -> tuple[Router, list[Exception]]:
    errors: list[Exception] = []
    router = Router(prefix_check=static_prefix("%"), logger=LoggerService(echo=False), help_command=False, **kwargs)

    def capture(_ctx, err: Exception) -> bool:
        errors.append(err)
        return True

    router.add_error_handler(capture)
    return router, errors


def _run(router: Router, content: str) -> None:
    asyncio.run(router.process_message(_message(content)))


def _group(seen: list[Any]) -> CommandGroup:
    group = CommandGroup(name="b")
    group.add_command(Command(name="test", handler=lambda ctx: seen.append("test")))
    group.add_command(
        Command(
            name="arg_expected",
            aliases=["ae"],
            arg_rules=[ArgumentRule(function=string_transformer)],
            handler=lambda ctx: seen.append(ctx.args[0]),
        )
    )
    return group


def test_group_dispatches_to_subcommands() -> None:
    seen: list[Any] = []
    router, errors = _make_router()
    router.set_command(_group(seen))

    _run(router, "%b test")
    _run(router, "%b arg_expected test")
    _run(router, '%B AE "quoted words"')

    assert errors == []
    assert seen == ["test", "test", "quoted words"]


def test_group_errors() -> None:
    seen: list[Any] = []
    router, errors = _make_router()
    router.set_command(_group(seen))

    _run(router, "%b")
    _run(router, "%b arg_expected")
    _run(router, "%b nothing")

    assert seen == []
    assert isinstance(errors[0], CommandBlank)
    assert isinstance(errors[1], InvalidArgCount)
    assert isinstance(errors[2], CommandNotFound)
    assert str(errors[2]) == "The command specified for the group was not found."


def test_fallback_runs_when_no_subcommand_is_given() -> None:
    seen: list[Any] = []
    group = _group(seen)
    group.fallback = Command(handler=lambda ctx: seen.append("fallback"))
    router, errors = _make_router()
    router.set_command(group)

    _run(router, "%b")
    _run(router, "%b test")

    assert errors == []
    assert seen == ["fallback", "test"]


def test_group_usage_lists_subcommand_keys() -> None:
    group = _group([])
    assert group.get_usage() == "<ae/arg_expected/test>"

    empty = CommandGroup(name="empty", fallback=Command(usage="<number>"))
    assert empty.get_usage() == "<number>"
    assert CommandGroup(name="bare").get_usage() == ""


def test_group_arg_rules_are_fixed() -> None:
    group = CommandGroup(name="g", arg_rules=[ArgumentRule(function=string_transformer, greedy=True)])
    assert len(group.arg_rules) == 2
    assert group.arg_rules[0].optional is True
    assert group.arg_rules[1].remainder is True


def test_subcommand_cooldowns_are_initialised_with_the_group() -> None:
    cooldown = UserCooldown(max_runs=1, usage_expires=60, scheduler=lambda delay, callback: None)
    group = CommandGroup(name="g")
    group.add_command(Command(name="once", cooldown=cooldown))
    router, errors = _make_router()
    router.set_command(group)

    assert cooldown._internals is not None

    _run(router, "%g once")
    _run(router, "%g once")

    assert len(errors) == 1
    assert str(errors[0]) == "This command has a 1 minute cooldown."


def test_global_middleware_runs_for_group_and_subcommand() -> None:
    calls: list[str] = []
    router, errors = _make_router(middleware=[lambda ctx: calls.append(ctx.command.name or "fallback")])
    router.set_command(_group([]))

    _run(router, "%b test")

    assert errors == []
    assert calls == ["b", "test"]


def test_nested_groups() -> None:
    seen: list[Any] = []
    inner = _group(seen)
    outer = CommandGroup(name="outer")
    outer.add_command(inner)
    router, errors = _make_router()
    router.set_command(outer)

    _run(router, "%outer b arg_expected deep")

    assert errors == []
    assert seen == ["deep"]
