from __future__ import annotations

import asyncio
import json
import logging

from bt_media_control.address import AddressStore, normalize_address
from bt_media_control.persistence.store import SettingsStore


def test_normalize_address() -> None:
    assert normalize_address(" AA:BB:CC ") == "AA_BB_CC"
    assert normalize_address("AA_BB_CC") == "AA_BB_CC"
    assert normalize_address("   ") == ""


def test_seeded_from_settings_in_path_form(settings) -> None:
    store = AddressStore.from_settings(settings)

    assert store.address == "AA_BB_CC_DD_EE_FF"


def test_missing_address_warns_and_stays_unbound(tmp_path, caplog) -> None:
    settings = SettingsStore(tmp_path / "settings.json")
    settings.load()

    with caplog.at_level(logging.WARNING):
        store = AddressStore.from_settings(settings)

    assert store.address == ""
    assert "No bluetooth address found in config" in caplog.text


def test_set_address_normalizes_and_persists(settings, settings_path) -> None:
    store = AddressStore(settings)

    changed = asyncio.run(store.set_address(" AA:BB:CC "))

    assert changed is True
    assert store.address == "AA_BB_CC"
    on_disk = json.loads(settings_path.read_text())
    assert on_disk["CONFIG"]["BLUETOOTH_ADDRESS"] == "AA_BB_CC"


def test_empty_address_is_ignored(settings) -> None:
    store = AddressStore(settings, "11:22:33")

    assert asyncio.run(store.set_address("")) is False
    assert asyncio.run(store.set_address("  ")) is False
    assert store.address == "11_22_33"


def test_same_address_is_not_rewritten(settings, caplog) -> None:
    store = AddressStore(settings, "11_22_33")

    with caplog.at_level(logging.INFO):
        changed = asyncio.run(store.set_address("11:22:33"))

    assert changed is False
    assert "Now routing" not in caplog.text


def test_concurrent_writes_leave_one_committed_value(settings) -> None:
    store = AddressStore(settings)

    async def write_both():
        await asyncio.gather(store.set_address("AA:AA"), store.set_address("BB:BB"))

    asyncio.run(write_both())

    assert store.address in {"AA_AA", "BB_BB"}
    assert settings.get("CONFIG", "BLUETOOTH_ADDRESS") == store.address
