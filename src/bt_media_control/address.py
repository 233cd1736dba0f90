"""Active device address shared by the bridge, refresher and HTTP routes."""

import asyncio
import logging

from .config import ADDRESS_KEY, CONFIG_COMPONENT
from .persistence.store import SettingsStore

logger = logging.getLogger(__name__)


def normalize_address(raw: str) -> str:
    """Convert ``AA:BB:CC:DD:EE:FF`` to the ``AA_BB_CC_DD_EE_FF`` D-Bus path form."""
    return raw.strip().replace(":", "_")


class AddressStore:
    """Holds the single active device address.

    Writes go through an asyncio lock so the compare, store and persist
    steps of one update never interleave with another.  Readers see the
    last committed value.
    """

    def __init__(self, settings: SettingsStore, address: str = ""):
        self._settings = settings
        self._address = normalize_address(address)
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: SettingsStore) -> "AddressStore":
        """Seed the active address from ``CONFIG/BLUETOOTH_ADDRESS``."""
        address = settings.get(CONFIG_COMPONENT, ADDRESS_KEY)
        if address is None:
            logger.warning("No bluetooth address found in config, using empty address")
            return cls(settings)
        store = cls(settings, address)
        if store.address:
            logger.info("Routing Bluetooth commands to %s", store.address)
        return store

    @property
    def address(self) -> str:
        """Current address in path form, empty when no device is bound."""
        return self._address

    async def set_address(self, raw: str) -> bool:
        """Normalize, store and persist a new address.

        Returns True if the stored address changed.  Empty input is ignored.
        """
        address = normalize_address(raw)
        if not address:
            return False

        async with self._lock:
            if address == self._address:
                return False
            self._address = address
            logger.info("Now routing Bluetooth commands to %s", address)
            await self._settings.set(CONFIG_COMPONENT, ADDRESS_KEY, address)
        return True
