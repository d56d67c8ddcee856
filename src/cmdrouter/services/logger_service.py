from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

DEFAULT_MAX_ROWS = 2000


class LoggerService:
    def __init__(self, max_rows: int = DEFAULT_MAX_ROWS, *, echo: bool = True) -> None:
        self.max_rows = max(1, int(max_rows))
        self.echo = echo
        self.rows: list[dict[str, object]] = []
        self._listeners: list[Callable[[dict[str, object]], None]] = []

    def subscribe(self, listener: Callable[[dict[str, object]], None]) -> None:
        self._listeners.append(listener)

    def log(self, event: str, **data: object) -> dict[str, object]:
        row = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "event": event,
            "data": data,
        }
        self.rows.append(row)
        if len(self.rows) > self.max_rows:
            del self.rows[: len(self.rows) - self.max_rows]
        if self.echo:
            print(f"[{row['ts']}] {event} {data}")
        for listener in self._listeners:
            try:
                listener(row)
            except Exception:  # noqa: BLE001
                continue
        return row

    def recent(self, event: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        rows = self.rows if event is None else [row for row in self.rows if row["event"] == event]
        return rows[-limit:]
