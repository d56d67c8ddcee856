from __future__ import annotations

import math
from typing import TYPE_CHECKING

from cmdrouter.arguments import ArgumentRule
from cmdrouter.command import Category, Command
from cmdrouter.pipeline import has_permission
from cmdrouter.transformers import any_transformer, string_transformer, uint_transformer

if TYPE_CHECKING:
    from cmdrouter.context import Context


COMMANDS_PER_PAGE = 5


def command_line(ctx: "Context", command: Command) -> str:
    usage = command.get_usage()
    head = f"{ctx.prefix}{command.name}"
    return f"{head} {usage}" if usage else head


async def category_pages(ctx: "Context", category: Category | None, commands: list[Command]) -> list[str]:
    allowed = [command for command in commands if await has_permission(ctx, command)]
    if not allowed:
        return []
    allowed.sort(key=lambda c: c.name)
    if category is None:
        title, description = "General Commands", "These commands have not been assigned a category yet."
    else:
        title, description = category.name, category.description
    total = math.ceil(len(allowed) / COMMANDS_PER_PAGE)
    pages: list[str] = []
    for index in range(total):
        chunk = allowed[index * COMMANDS_PER_PAGE : (index + 1) * COMMANDS_PER_PAGE]
        lines = [f"**{title} [{index + 1}/{total}]**"]
        if description:
            lines.append(description)
        for command in chunk:
            lines.append(f"`{command_line(ctx, command)}` - {command.description or 'No description set.'}")
        pages.append("\n".join(lines))
    return pages


async def _help(ctx: "Context") -> None:
    arg = ctx.args[0]
    if isinstance(arg, str):
        name = arg.lower()
        command = ctx.router.get_command(name)
        if command is None:
            await ctx.reply(f'Command not found: the command "{name}" was not found.')
            return
        description = command.description or "No description set."
        if not await has_permission(ctx, command):
            description += "\n\n**You do not have permission to run this.**"
        await ctx.reply(f"`{command_line(ctx, command)}`\n{description}")
        return

    pages: list[str] = []
    ordered = ctx.router.get_commands_ordered_by_category()
    for category in sorted(ordered, key=lambda c: "" if c is None else c.name.lower()):
        pages.extend(await category_pages(ctx, category, ordered[category]))
    if not pages:
        await ctx.reply("There are no commands you can run here.")
        return
    page = min(max(int(arg or 1), 1), len(pages))
    footer = f"Page {page}/{len(pages)}. Use {ctx.prefix}help <page number> to flick between pages."
    await ctx.reply(f"{pages[page - 1]}\n\n{footer}")


def default_help_command() -> Command:
    return Command(
        name="help",
        description="Used to get help for a command.",
        usage="[page/command]",
        arg_rules=[ArgumentRule(function=any_transformer(uint_transformer, string_transformer), optional=True)],
        handler=_help,
    )
