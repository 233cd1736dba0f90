"""Subprocess bridge to the BlueZ command-line tools.

Every BlueZ operation is delegated to an external program: ``dbus-send``
for method calls, ``bluetoothctl`` inside a tmux session for scanning, and
``busctl tree`` for finding the device that currently owns a media
transport.  Results come back as :class:`CommandResult` values; nothing in
here raises for an expected failure.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .constants import (
    BLUEZ_SERVICE,
    DBUS_SEND_PREFIX,
    DEFAULT_ADAPTER_PATH,
    PLAYER_NODE,
    SCAN_SESSION,
    address_to_path,
)

if TYPE_CHECKING:
    from ..address import AddressStore

logger = logging.getLogger(__name__)

NO_ADDRESS_MESSAGE = "No valid BT Address to run command"


@dataclass(frozen=True)
class CommandResult:
    """Captured output of one external command."""

    output: str
    ok: bool


class CommandBridge:
    """Runs external Bluetooth tools against the active device address."""

    def __init__(self, address_store: "AddressStore", adapter_path: str = DEFAULT_ADAPTER_PATH):
        self._address_store = address_store
        self._adapter_path = adapter_path
        self._scan_session_started = False
        # busctl tree draws the hierarchy with box characters; only the
        # object path matters
        self._fd_path_re = re.compile(
            re.escape(adapter_path) + r"/dev_([^/\s]+)/\S*fd"
        )

    @property
    def adapter_path(self) -> str:
        return self._adapter_path

    def device_path(self) -> str:
        """D-Bus object path of the active device."""
        return address_to_path(self._address_store.address, self._adapter_path)

    def player_path(self) -> str:
        """D-Bus object path of the active device's AVRCP player."""
        return f"{self.device_path()}/{PLAYER_NODE}"

    async def run(self, program: str, *args: str, hide_output: bool = False) -> CommandResult:
        """Run a command to completion, capturing stdout and stderr."""
        command_line = " ".join((program, *args))
        logger.debug("Running: %s", command_line)
        try:
            proc = await asyncio.create_subprocess_exec(
                program, *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await proc.communicate()
        except (FileNotFoundError, OSError) as e:
            logger.error("Failed to start %s: %s", command_line, e)
            return CommandResult(str(e), False)

        out = stdout.decode(errors="replace")
        err = stderr.decode(errors="replace")
        if proc.returncode != 0:
            logger.error(
                "Command failed (exit %s): %s\n%s", proc.returncode, command_line, err.strip()
            )
            return CommandResult(err, False)

        if not hide_output:
            logger.debug("Output of %s:\n%s", program, out)
        return CommandResult(out, True)

    async def send_dbus_command(
        self,
        args: list[str],
        hide_output: bool = False,
        skip_address_check: bool = False,
    ) -> CommandResult:
        """Send a BlueZ method call with dbus-send.

        Unless ``skip_address_check`` is set, fails without spawning anything
        when no device address is bound.
        """
        if not skip_address_check and not self._address_store.address:
            logger.warning(NO_ADDRESS_MESSAGE)
            return CommandResult(NO_ADDRESS_MESSAGE, False)
        return await self.run("dbus-send", *DBUS_SEND_PREFIX, *args, hide_output=hide_output)

    async def scan_on(self) -> None:
        """Start discovery in a detached bluetoothctl tmux session.

        bluetoothctl only keeps scanning while its interactive shell stays
        open, so the session is left running until the next scan replaces it.
        """
        logger.info("Turning scan on...")
        if self._scan_session_started:
            await self.run("tmux", "kill-session", "-t", SCAN_SESSION)

        steps = (
            ("new-session", "-d", "-s", SCAN_SESSION, "bluetoothctl"),
            ("send-keys", "-t", SCAN_SESSION, "-l", "scan on"),
            ("send-keys", "-t", SCAN_SESSION, "Enter"),
        )
        for step in steps:
            result = await self.run("tmux", *step)
            if not result.ok:
                logger.error("Error turning scan on")
        self._scan_session_started = True

    async def connected_address(self) -> str | None:
        """Return the address of the device owning a media transport.

        Only the first ``fd`` transport node in the tree is considered.
        Returns an empty string when none is present and None when busctl
        itself failed.
        """
        result = await self.run("busctl", "tree", BLUEZ_SERVICE, hide_output=True)
        if not result.ok:
            return None

        for line in result.output.splitlines():
            if "/fd" not in line:
                continue
            match = self._fd_path_re.search(line)
            return match.group(1) if match else ""
        return ""
