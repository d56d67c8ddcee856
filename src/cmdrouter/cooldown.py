from __future__ import annotations

import asyncio
import threading
from typing import TYPE_CHECKING, Any, Callable, Protocol

from cmdrouter.utils.discord_utils import snowflake

if TYPE_CHECKING:
    from cmdrouter.context import Context


Scheduler = Callable[[float, Callable[[], None]], Any]

DURATION_UNITS: tuple[tuple[str, float], ...] = (
    ("week", 7 * 24 * 60 * 60),
    ("day", 24 * 60 * 60),
    ("hour", 60 * 60),
    ("minute", 60),
    ("second", 1),
)


class Cooldown(Protocol):
    def init(self) -> None:
        """Prepare internal state. Must be safe to call more than once (cooldowns can be shared)."""

    def check(self, ctx: "Context") -> tuple[str, bool]:
        """Count one usage and return whether the command may run."""

    def clear(self) -> None:
        """Forget every usage."""


def format_duration(seconds: float) -> str:
    if seconds <= 0:
        return "0 seconds"
    parts: list[str] = []
    remaining = float(seconds)
    for name, size in DURATION_UNITS:
        count = int(remaining // size)
        if count:
            parts.append(f"{count} {name}{'' if count == 1 else 's'}")
            remaining -= count * size
    millis = int(round(remaining * 1000))
    if millis:
        parts.append(f"{millis} millisecond{'' if millis == 1 else 's'}")
    return " ".join(parts)


def _start_timer(delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle | threading.Timer:
    """Expire on the running event loop; outside a loop fall back to a daemon thread timer."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer
    return loop.call_later(delay, callback)


class _CooldownInternals:
    """One generation of usage counters; `clear()` replaces the whole object."""

    def __init__(self) -> None:
        self.cooling_down: dict[int, int] = {}
        self.lock = threading.Lock()

    def expire(self, key: int) -> None:
        with self.lock:
            usages = self.cooling_down.get(key)
            if usages is None:
                return
            usages -= 1
            if usages <= 0:
                self.cooling_down.pop(key, None)
            else:
                self.cooling_down[key] = usages

    def check(self, key: int, max_runs: int, expires: float, scheduler: Scheduler) -> tuple[str, bool]:
        with self.lock:
            usages = self.cooling_down.get(key, 0)
            if usages >= max_runs:
                return f"This command has a {format_duration(expires)} cooldown.", False
            self.cooling_down[key] = usages + 1
        scheduler(expires, lambda: self.expire(key))
        return "", True


class ScopedCooldown:
    """
    Counts usages per scope id. Each usage expires on its own timer, so a scope
    is admitted again as soon as its oldest usage lapses.
    """

    scope = "scope"

    def __init__(self, max_runs: int, usage_expires: float, *, scheduler: Scheduler | None = None) -> None:
        self.max_runs = int(max_runs)
        self.usage_expires = float(usage_expires)
        self.scheduler = scheduler or _start_timer
        self._internals: _CooldownInternals | None = None
        self._init_lock = threading.Lock()

    def init(self) -> None:
        with self._init_lock:
            if self._internals is None:
                self._internals = _CooldownInternals()

    def scope_id(self, ctx: "Context") -> int:
        raise NotImplementedError

    def usage(self, scope_id: int) -> int:
        internals = self._internals
        if internals is None:
            return 0
        with internals.lock:
            return internals.cooling_down.get(scope_id, 0)

    def check(self, ctx: "Context") -> tuple[str, bool]:
        if self._internals is None:
            self.init()
        internals = self._internals
        assert internals is not None
        return internals.check(self.scope_id(ctx), self.max_runs, self.usage_expires, self.scheduler)

    def clear(self) -> None:
        old = self._internals
        if old is None:
            return
        with old.lock:
            self._internals = _CooldownInternals()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(max_runs={self.max_runs}, usage_expires={self.usage_expires})"


class UserCooldown(ScopedCooldown):
    scope = "user"

    def scope_id(self, ctx: "Context") -> int:
        return snowflake(ctx.author)


class ChannelCooldown(ScopedCooldown):
    scope = "channel"

    def scope_id(self, ctx: "Context") -> int:
        return snowflake(ctx.channel)


class GuildCooldown(ScopedCooldown):
    scope = "guild"

    def scope_id(self, ctx: "Context") -> int:
        return snowflake(ctx.guild)


class MultipleCooldowns:
    """
    Runs several cooldowns in order and stops at the first rejection.

    Usages already counted by earlier cooldowns are kept when a later one rejects.
    """

    def __init__(self, *cooldowns: Cooldown) -> None:
        self.cooldowns = list(cooldowns)

    def init(self) -> None:
        for cooldown in self.cooldowns:
            cooldown.init()

    def check(self, ctx: "Context") -> tuple[str, bool]:
        message, ok = "", True
        for cooldown in self.cooldowns:
            message, ok = cooldown.check(ctx)
            if not ok:
                return message, ok
        return message, ok

    def clear(self) -> None:
        for cooldown in self.cooldowns:
            cooldown.clear()


def multiple_cooldowns(*cooldowns: Cooldown) -> MultipleCooldowns:
    return MultipleCooldowns(*cooldowns)
