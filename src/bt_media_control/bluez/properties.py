"""Typed D-Bus property reads via dbus_next.

Alternative to scraping ``dbus-send`` output: values arrive as Variants and
are flattened into the same ``{field: value}`` shape the reply parser
produces, so callers don't care which backend answered.
"""

import logging

from dbus_next import BusType, Message, MessageType, Variant
from dbus_next.aio import MessageBus
from dbus_next.errors import AuthError, DBusError, InvalidAddressError

from .constants import BLUEZ_SERVICE, PROPERTIES_INTERFACE
from .reply_parser import META_KEY

logger = logging.getLogger(__name__)


def flatten_variant(value) -> dict[str, str]:
    """Flatten a property value into string fields.

    Dict values (e.g. ``Track``) become one field per entry; scalars
    (e.g. ``Status``) are filed under ``Meta``.
    """
    if isinstance(value, Variant):
        value = value.value
    if isinstance(value, dict):
        return {
            str(k): str(v.value if isinstance(v, Variant) else v)
            for k, v in value.items()
        }
    return {META_KEY: str(value)}


class PropertyReader:
    """Reads BlueZ properties over a lazily connected system bus."""

    def __init__(self):
        self._bus: MessageBus | None = None

    async def _get_bus(self) -> MessageBus:
        if self._bus is None or not self._bus.connected:
            self._bus = await MessageBus(bus_type=BusType.SYSTEM).connect()
            logger.info("Connected to system D-Bus")
        return self._bus

    async def get(self, path: str, interface: str, name: str) -> dict[str, str] | None:
        """Call Properties.Get and return the flattened value, or None on failure."""
        try:
            bus = await self._get_bus()
            reply = await bus.call(
                Message(
                    destination=BLUEZ_SERVICE,
                    path=path,
                    interface=PROPERTIES_INTERFACE,
                    member="Get",
                    signature="ss",
                    body=[interface, name],
                )
            )
        except (DBusError, AuthError, InvalidAddressError, OSError) as e:
            logger.error("Properties.Get %s.%s on %s failed: %s", interface, name, path, e)
            return None

        if reply.message_type == MessageType.ERROR:
            logger.error(
                "Properties.Get %s.%s on %s returned %s: %s",
                interface, name, path, reply.error_name, reply.body,
            )
            return None
        if not reply.body:
            logger.warning("Empty reply for %s.%s on %s", interface, name, path)
            return None

        fields = flatten_variant(reply.body[0])
        logger.debug("Properties.Get %s.%s on %s -> %s", interface, name, path, fields)
        return fields

    def close(self) -> None:
        """Disconnect from the system bus."""
        if self._bus is not None:
            self._bus.disconnect()
            self._bus = None
