from __future__ import annotations

import threading


class State:
    """A small counter kept per guild for commands that need to remember something between runs."""

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def add_one(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    def get_value(self) -> int:
        with self._lock:
            return self._value

    def reset(self) -> int:
        with self._lock:
            previous = self._value
            self._value = 0
            return previous
