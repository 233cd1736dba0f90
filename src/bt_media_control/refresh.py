"""Background refresh of the active device address.

Polls the BlueZ object tree for the device that currently carries a media
transport and rebinds the address store when it changes.  A phone that
connects on its own is picked up within one interval.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .address import AddressStore
    from .bluez.bridge import CommandBridge

logger = logging.getLogger(__name__)


class AddressRefresher:
    """Keeps the address store in sync with the connected media device."""

    DEFAULT_INTERVAL = 1.0  # seconds between ticks

    def __init__(
        self,
        bridge: "CommandBridge",
        address_store: "AddressStore",
        interval: float = DEFAULT_INTERVAL,
    ):
        self._bridge = bridge
        self._address_store = address_store
        self._interval = interval
        self._task: asyncio.Task | None = None
        self._forced: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the refresh loop (once)."""
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())
        logger.info("Auto refresh of BT address enabled (every %.1fs)", self._interval)

    async def stop(self) -> None:
        """Stop the loop and any pending forced refreshes."""
        tasks = list(self._forced)
        if self._task is not None:
            tasks.append(self._task)
        for task in tasks:
            if not task.done():
                task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._task = None
        self._forced.clear()
        logger.info("Auto refresh stopped")

    def force_refresh(self) -> None:
        """Schedule one immediate tick without waiting for it."""
        logger.info("Forcing refresh of BT address")
        task = asyncio.create_task(self.tick())
        self._forced.add(task)
        task.add_done_callback(self._forced.discard)

    async def tick(self) -> bool:
        """Run one refresh. Returns True if the active address changed."""
        try:
            candidate = await self._bridge.connected_address()
            if candidate is None:
                logger.debug("Connected address lookup failed, keeping %r",
                             self._address_store.address)
                return False

            candidate = candidate.strip()
            if not candidate or candidate == self._address_store.address:
                return False

            logger.info("Found new connected media device with address: %s", candidate)
            return await self._address_store.set_address(candidate)
        except Exception as e:
            logger.error("Address refresh failed: %s", e)
            return False

    async def _loop(self) -> None:
        while True:
            await self.tick()
            await asyncio.sleep(self._interval)
