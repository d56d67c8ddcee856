from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from cmdrouter.services.logger_service import DEFAULT_MAX_ROWS


@dataclass(frozen=True)
class Settings:
    discord_token: str
    command_prefix: str
    mention_prefix: bool
    help_command: bool
    log_max_rows: int

    @staticmethod
    def load(path: Path = Path("passwords.txt")) -> "Settings":
        values = _parse_passwords_file(path)
        token = values.get("DISCORD_TOKEN", "").strip()
        command_prefix = values.get("COMMAND_PREFIX", "%")
        mention_prefix = _parse_bool(values.get("MENTION_PREFIX", "true"))
        help_command = _parse_bool(values.get("HELP_COMMAND", "true"))
        log_max_rows = int(values.get("LOG_MAX_ROWS", str(DEFAULT_MAX_ROWS)))
        if not token:
            raise RuntimeError(f"DISCORD_TOKEN is required in {path.name}.")
        if not command_prefix and not mention_prefix:
            raise RuntimeError("Set COMMAND_PREFIX or enable MENTION_PREFIX, otherwise no message can reach a command.")
        return Settings(
            discord_token=token,
            command_prefix=command_prefix,
            mention_prefix=mention_prefix,
            help_command=help_command,
            log_max_rows=log_max_rows,
        )


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _parse_passwords_file(path: Path) -> dict[str, str]:
    """Read `KEY=value` settings; blank lines, `#` comments and lines without `=` are skipped."""
    if not path.is_file():
        raise RuntimeError(f"{path.name} not found. Copy passwords.example.txt to {path.name} and fill values.")
    values: dict[str, str] = {}
    with path.open(encoding="utf-8") as handle:
        for line in handle:
            key, sep, value = line.strip().partition("=")
            if not sep or key.startswith("#"):
                continue
            values[key.strip()] = value.strip()
    return values
