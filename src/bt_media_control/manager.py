"""Top-level orchestrator for Bluetooth media control.

Owns the shared state (settings, active address) and the components that
act on it: the subprocess bridge, the optional typed property reader and
the address refresher.  The HTTP routes call into this class only.
"""

import asyncio
import logging

from slugify import slugify

from .address import AddressStore
from .bluez.bridge import CommandBridge, CommandResult
from .bluez.constants import DEVICE_INTERFACE, MEDIA_PLAYER_INTERFACE, PROPERTIES_INTERFACE
from .bluez.properties import PropertyReader
from .bluez.reply_parser import META_KEY, parse_reply
from .config import BACKEND_DBUS_NEXT, AppConfig
from .persistence.store import SettingsStore
from .refresh import AddressRefresher

logger = logging.getLogger(__name__)


def album_artwork(artist: str, album: str) -> str:
    """Relative artwork path for a track, ``<artist-slug>/<album-slug>.jpg``."""
    return f"{slugify(artist)}/{slugify(album)}.jpg"


class BluetoothMediaManager:
    """Central orchestrator behind the HTTP facade."""

    def __init__(
        self,
        config: AppConfig,
        settings: SettingsStore,
        address_store: AddressStore | None = None,
        bridge: CommandBridge | None = None,
        reader: PropertyReader | None = None,
    ):
        self.config = config
        self.settings = settings
        self.address_store = address_store or AddressStore.from_settings(settings)
        self.bridge = bridge or CommandBridge(self.address_store, config.adapter_path)
        if reader is None and config.bus_backend == BACKEND_DBUS_NEXT:
            reader = PropertyReader()
        self.reader = reader
        self.refresher = AddressRefresher(
            self.bridge, self.address_store, config.refresh_interval
        )
        self._transport_tasks: set[asyncio.Task] = set()

    async def start(self) -> None:
        """Start background work."""
        self.refresher.start()
        logger.info(
            "Bluetooth media manager started (backend=%s, address=%r)",
            self.config.bus_backend, self.address_store.address,
        )

    async def shutdown(self) -> None:
        """Stop the refresher, drop pending transport commands and close the bus."""
        logger.info("Shutting down Bluetooth media manager...")
        await self.refresher.stop()

        pending = [t for t in self._transport_tasks if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._transport_tasks.clear()

        if self.reader:
            self.reader.close()
        logger.info("Bluetooth media manager shut down")

    # -- Address --

    @property
    def address(self) -> str:
        return self.address_store.address

    async def set_address(self, raw: str) -> bool:
        """Explicitly bind a device address."""
        return await self.address_store.set_address(raw)

    def force_refresh(self) -> None:
        self.refresher.force_refresh()

    # -- Queries --

    async def _read_player_property(self, name: str) -> dict[str, str] | None:
        """Read one MediaPlayer1 property of the active device as a flat dict."""
        if self.reader is not None:
            if not self.address_store.address:
                logger.warning("No valid BT Address to read %s", name)
                return None
            return await self.reader.get(
                self.bridge.player_path(), MEDIA_PLAYER_INTERFACE, name
            )

        args = [
            self.bridge.player_path(),
            f"{PROPERTIES_INTERFACE}.Get",
            f"string:{MEDIA_PLAYER_INTERFACE}",
            f"string:{name}",
        ]
        result = await self.bridge.send_dbus_command(args, hide_output=True)
        if not result.ok:
            return None
        if not result.output:
            logger.warning(
                "Empty dbus response when querying %s, not attempting to clean. We asked:\n%s",
                name, " ".join(args),
            )
            return None
        return parse_reply(result.output)

    async def get_device_info(self) -> dict[str, str] | None:
        """Playback status of the active device, e.g. ``{"Meta": "playing"}``."""
        logger.info("Getting device info...")
        return await self._read_player_property("Status")

    async def get_media_info(self) -> dict[str, str] | None:
        """Current track metadata merged with the device status."""
        device_status = await self.get_device_info()
        if device_status is None:
            return None

        logger.info("Getting media info...")
        media = await self._read_player_property("Track")
        if media is None:
            return None

        media["Status"] = device_status.get(META_KEY, "")
        if "Album" in media and "Artist" in media:
            media["Album_Artwork"] = album_artwork(media["Artist"], media["Album"])
        return media

    # -- Connection --

    async def connect(self) -> CommandResult:
        """Scan, wait for the device to show up, then connect to it."""
        await self.bridge.scan_on()
        logger.info("Connecting to bluetooth device...")
        await asyncio.sleep(self.config.connect_delay)

        result = await self.bridge.send_dbus_command(
            [self.bridge.device_path(), f"{DEVICE_INTERFACE}.Connect"],
            skip_address_check=True,
        )
        if result.ok:
            logger.info("Connection successful.")
        else:
            logger.warning("Connection to %s failed", self.bridge.device_path())
        return result

    async def disconnect(self) -> CommandResult:
        """Disconnect the active device."""
        logger.info("Disconnecting from bluetooth device...")
        return await self.bridge.send_dbus_command(
            [self.bridge.device_path(), f"{DEVICE_INTERFACE}.Disconnect"],
            skip_address_check=True,
        )

    # -- Transport (fire-and-forget) --

    def _send_transport_command(self, command: str) -> None:
        """Issue a MediaPlayer1 method in the background and return immediately."""
        task = asyncio.create_task(
            self.bridge.send_dbus_command(
                [self.bridge.player_path(), f"{MEDIA_PLAYER_INTERFACE}.{command}"]
            )
        )
        self._transport_tasks.add(task)
        task.add_done_callback(lambda t: self._on_transport_done(command, t))

    def _on_transport_done(self, command: str, task: asyncio.Task) -> None:
        self._transport_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Media %s failed: %s", command, exc)
        elif not task.result().ok:
            logger.warning("Media %s failed: %s", command, task.result().output.strip())
        else:
            logger.debug("Media %s sent", command)

    def play(self) -> None:
        logger.info("Attempting to play media...")
        self._send_transport_command("Play")

    def pause(self) -> None:
        logger.info("Attempting to pause media...")
        self._send_transport_command("Pause")

    def next(self) -> None:
        logger.info("Going to next track...")
        self._send_transport_command("Next")

    def previous(self) -> None:
        logger.info("Going to previous track...")
        self._send_transport_command("Previous")
