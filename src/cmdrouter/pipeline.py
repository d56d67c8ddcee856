from __future__ import annotations

from typing import TYPE_CHECKING, Any

from cmdrouter.arguments import resolve_arguments
from cmdrouter.errors import CommandError, CommandOnCooldown, IncorrectPermissions, MiddlewareFailed, PanicError
from cmdrouter.tokenizer import Tokenizer
from cmdrouter.utils.discord_utils import maybe_await

if TYPE_CHECKING:
    from cmdrouter.command import Command
    from cmdrouter.context import Context


async def check_permissions(ctx: "Context", command: "Command") -> None:
    """Run global, category and command validators in order; raise on the first refusal."""

    layers = [ctx.router.permission_validators]
    if command.category is not None:
        layers.append(command.category.permission_validators)
    layers.append(command.permission_validators)
    for validators in layers:
        for validator in validators:
            message, ok = await maybe_await(validator(ctx))
            if not ok:
                raise IncorrectPermissions(message)


async def has_permission(ctx: "Context", command: "Command") -> bool:
    try:
        await check_permissions(ctx, command)
    except IncorrectPermissions:
        return False
    return True


def check_cooldowns(ctx: "Context", command: "Command") -> None:
    global_cooldown = ctx.router.cooldown
    local = command.cooldown
    if local is not None:
        _admit(local, ctx)
    if command.category is not None:
        category_cooldown = command.category.cooldown
        if category_cooldown is not None and category_cooldown is not local and category_cooldown is not global_cooldown:
            _admit(category_cooldown, ctx)
    if global_cooldown is not None and global_cooldown is not local:
        _admit(global_cooldown, ctx)


def _admit(cooldown: Any, ctx: "Context") -> None:
    message, ok = cooldown.check(ctx)
    if not ok:
        raise CommandOnCooldown(message)


async def run_middleware(ctx: "Context", command: "Command") -> None:
    """
    Run global, category and command middleware in order. A step fails by raising
    or by returning an exception; the first failure stops the chain.
    """

    layers = [ctx.router.middleware]
    if command.category is not None:
        layers.append(command.category.middleware)
    layers.append(command.middleware)
    for middleware in layers:
        for step in middleware:
            try:
                result = await maybe_await(step(ctx))
            except CommandError:
                raise
            except Exception as exc:  # noqa: BLE001
                raise MiddlewareFailed(exc) from exc
            if isinstance(result, CommandError):
                raise result
            if isinstance(result, Exception):
                raise MiddlewareFailed(result)


async def run_command(ctx: "Context", reader: Tokenizer, command: "Command") -> Any:
    """
    Gate, parse and invoke a command.

    CommandError subclasses propagate unchanged, and middleware failures arrive
    wrapped in MiddlewareFailed. Anything else raised along the way is converted
    into PanicError so a broken handler never escapes dispatch.
    """

    ctx.command = command
    ctx.raw_args = reader.remainder()
    try:
        await check_permissions(ctx, command)
        check_cooldowns(ctx, command)
        await run_middleware(ctx, command)
        ctx.args = await resolve_arguments(ctx, command.arg_rules, reader)
        return await command.invoke(ctx)
    except CommandError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise PanicError(str(exc) or type(exc).__name__, original=exc) from exc
