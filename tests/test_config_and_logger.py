from __future__ import annotations

from pathlib import Path

import pytest

from cmdrouter.config import Settings
from cmdrouter.services.logger_service import LoggerService


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "passwords.txt"
    path.write_text(text, encoding="utf-8")
    return path


def test_settings_load_reads_passwords_file(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "# bot settings\nDISCORD_TOKEN = abc.def\nCOMMAND_PREFIX=!\nMENTION_PREFIX=no\nHELP_COMMAND=off\nLOG_MAX_ROWS=10\nnot a setting\n",
    )

    settings = Settings.load(path)

    assert settings.discord_token == "abc.def"
    assert settings.command_prefix == "!"
    assert settings.mention_prefix is False
    assert settings.help_command is False
    assert settings.log_max_rows == 10


def test_settings_defaults(tmp_path: Path) -> None:
    settings = Settings.load(_write(tmp_path, "DISCORD_TOKEN=abc\n"))

    assert settings.command_prefix == "%"
    assert settings.mention_prefix is True
    assert settings.help_command is True
    assert settings.log_max_rows == 2000


def test_settings_require_a_token(tmp_path: Path) -> None:
    with pytest.raises(RuntimeError, match="DISCORD_TOKEN"):
        Settings.load(_write(tmp_path, "DISCORD_TOKEN=\nCOMMAND_PREFIX=!\n"))


def test_settings_require_some_prefix(tmp_path: Path) -> None:
    with pytest.raises(RuntimeError, match="COMMAND_PREFIX"):
        Settings.load(_write(tmp_path, "DISCORD_TOKEN=abc\nCOMMAND_PREFIX=\nMENTION_PREFIX=false\n"))


def test_settings_missing_file(tmp_path: Path) -> None:
    with pytest.raises(RuntimeError, match="not found"):
        Settings.load(tmp_path / "passwords.txt")


def test_logger_keeps_only_recent_rows() -> None:
    logger = LoggerService(max_rows=3, echo=False)
    for index in range(5):
        logger.log("tick", index=index)

    assert [row["data"]["index"] for row in logger.rows] == [2, 3, 4]
    assert [row["data"]["index"] for row in logger.recent("tick", limit=2)] == [3, 4]
    assert logger.recent("other") == []


def test_logger_notifies_listeners_and_ignores_their_failures() -> None:
    logger = LoggerService(echo=False)
    seen: list[str] = []

    def broken(_row) -> None:
        raise ValueError("listener failed")

    logger.subscribe(broken)
    logger.subscribe(lambda row: seen.append(row["event"]))

    row = logger.log("router.command_set", name="ping")

    assert seen == ["router.command_set"]
    assert row["data"] == {"name": "ping"}


def test_logger_echo_prints_rows(capsys: pytest.CaptureFixture[str]) -> None:
    LoggerService().log("bot.ready", guilds=2)
    assert "bot.ready {'guilds': 2}" in capsys.readouterr().out


def test_settings_skip_commented_assignments(tmp_path: Path) -> None:
    path = _write(tmp_path, "#DISCORD_TOKEN=old\nDISCORD_TOKEN=new=with=equals\n\n#COMMAND_PREFIX=?\n")

    settings = Settings.load(path)

    assert settings.discord_token == "new=with=equals"
    assert settings.command_prefix == "%"
