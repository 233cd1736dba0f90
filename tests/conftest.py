from __future__ import annotations

import json

import pytest

from bt_media_control.persistence.store import SettingsStore


@pytest.fixture
def settings_path(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"CONFIG": {"BLUETOOTH_ADDRESS": "AA:BB:CC:DD:EE:FF"}}))
    return path


@pytest.fixture
def settings(settings_path):
    store = SettingsStore(settings_path)
    store.load()
    return store
