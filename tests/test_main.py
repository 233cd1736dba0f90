from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from bt_media_control import __main__ as entry
from bt_media_control.persistence.store import DEFAULT_SETTINGS_PATH

runner = CliRunner()


@pytest.fixture
def captured(monkeypatch) -> list[tuple[Path, int | None, bool]]:
    calls: list[tuple[Path, int | None, bool]] = []

    async def fake_main(settings_file, port=None, verbose=False):
        calls.append((settings_file, port, verbose))

    monkeypatch.setattr(entry, "main", fake_main)
    monkeypatch.delenv("BT_MEDIA_SETTINGS", raising=False)
    return calls


def test_defaults(captured) -> None:
    result = runner.invoke(entry.app, [])

    assert result.exit_code == 0, result.output
    assert captured == [(Path(DEFAULT_SETTINGS_PATH), None, False)]


def test_settings_file_option(captured, tmp_path) -> None:
    path = tmp_path / "settings.json"

    result = runner.invoke(entry.app, ["--settings-file", str(path)])

    assert result.exit_code == 0, result.output
    assert captured == [(path, None, False)]


def test_settings_file_from_environment(captured, tmp_path) -> None:
    path = tmp_path / "from-env.json"

    result = runner.invoke(entry.app, [], env={"BT_MEDIA_SETTINGS": str(path)})

    assert result.exit_code == 0, result.output
    assert captured == [(path, None, False)]


def test_port_and_verbose_options(captured) -> None:
    result = runner.invoke(entry.app, ["--port", "8099", "--verbose"])

    assert result.exit_code == 0, result.output
    assert captured == [(Path(DEFAULT_SETTINGS_PATH), 8099, True)]


def test_invalid_port_is_rejected(captured) -> None:
    result = runner.invoke(entry.app, ["--port", "http"])

    assert result.exit_code != 0
    assert captured == []


def test_load_config_applies_overrides(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"CONFIG": {"HTTP_PORT": "8080", "LOG_LEVEL": "warning"}}))

    settings, config = entry.load_config(path, port=9000, verbose=True)

    assert settings.get("CONFIG", "HTTP_PORT") == "8080"
    assert config.http_port == 9000
    assert config.effective_log_level == "debug"


def test_load_config_without_overrides(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"CONFIG": {"HTTP_PORT": "8080", "LOG_LEVEL": "warning"}}))

    _, config = entry.load_config(path)

    assert config.http_port == 8080
    assert config.effective_log_level == "warning"


def test_setup_logging_keeps_library_loggers_quiet() -> None:
    names = ("dbus_next", "aiohttp")
    saved = {name: logging.getLogger(name).level for name in names}
    try:
        entry.setup_logging("debug")

        for name in names:
            assert logging.getLogger(name).level == logging.WARNING
    finally:
        for name, level in saved.items():
            logging.getLogger(name).setLevel(level)
