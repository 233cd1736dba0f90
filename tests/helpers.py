"""Canned BlueZ replies and a recording stand-in for CommandBridge."""

from __future__ import annotations

from bt_media_control.bluez.bridge import CommandResult

STATUS_REPLY = (
    "method return time=1571.204 sender=:1.3 -> destination=:1.42 serial=87 reply_serial=2\n"
    '   variant       string "playing"\n'
)

STOPPED_REPLY = (
    "method return time=1580.011 sender=:1.3 -> destination=:1.44 serial=91 reply_serial=2\n"
    '   variant       string "stopped"\n'
)

TRACK_REPLY = (
    "method return time=1571.210 sender=:1.3 -> destination=:1.43 serial=88 reply_serial=2\n"
    "   variant       array [\n"
    "         dict entry(\n"
    '            string "Title"\n'
    '            variant                   string "Song 2"\n'
    "         )\n"
    "         dict entry(\n"
    '            string "Album"\n'
    '            variant                   string "Blur"\n'
    "         )\n"
    "         dict entry(\n"
    '            string "Artist"\n'
    '            variant                   string "Blur"\n'
    "         )\n"
    "         dict entry(\n"
    '            string "Duration"\n'
    "            variant                   uint32 121000\n"
    "         )\n"
    "      ]\n"
)


class FakeBridge:
    """Stands in for CommandBridge, recording dbus-send calls."""

    def __init__(self, address_store, replies=None, connected=""):
        self._address_store = address_store
        self.replies = replies or {}
        self.connected = connected
        self.calls: list[list[str]] = []
        self.scans = 0

    def device_path(self) -> str:
        return f"/org/bluez/hci0/dev_{self._address_store.address}"

    def player_path(self) -> str:
        return f"{self.device_path()}/player0"

    async def send_dbus_command(self, args, hide_output=False, skip_address_check=False):
        if not skip_address_check and not self._address_store.address:
            return CommandResult("No valid BT Address to run command", False)
        self.calls.append(list(args))
        key = args[-1].split(":")[-1] if args[-1].startswith("string:") else args[-1]
        return self.replies.get(key, CommandResult("", True))

    async def scan_on(self) -> None:
        self.scans += 1

    async def connected_address(self):
        if isinstance(self.connected, Exception):
            raise self.connected
        return self.connected
