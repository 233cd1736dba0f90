"""Configuration loader for the Bluetooth media control service.

Runtime configuration lives in the ``CONFIG`` component of the settings
file, next to the persisted ``BLUETOOTH_ADDRESS``.  All values are stored as
strings; anything that fails to convert falls back to its default.
"""

import logging
from dataclasses import dataclass

from .bluez.constants import DEFAULT_ADAPTER_PATH
from .persistence.store import SettingsStore

logger = logging.getLogger(__name__)

CONFIG_COMPONENT = "CONFIG"
ADDRESS_KEY = "BLUETOOTH_ADDRESS"

BACKEND_DBUS_SEND = "dbus-send"
BACKEND_DBUS_NEXT = "dbus-next"
_BACKENDS = {BACKEND_DBUS_SEND, BACKEND_DBUS_NEXT}

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class AppConfig:
    """Application configuration loaded from the settings file."""

    log_level: str = "info"
    verbose: bool = False
    http_host: str = "0.0.0.0"
    http_port: int = 5353
    adapter_path: str = DEFAULT_ADAPTER_PATH
    refresh_interval: float = 1.0
    connect_delay: float = 13.0
    bus_backend: str = BACKEND_DBUS_SEND

    @property
    def effective_log_level(self) -> str:
        """Log level after applying the verbose flag."""
        return "debug" if self.verbose else self.log_level

    @classmethod
    def from_settings(cls, settings: SettingsStore) -> "AppConfig":
        """Build configuration from the CONFIG component of the settings store."""
        config = cls()
        values = settings.get_component(CONFIG_COMPONENT)
        if values is None:
            logger.warning("No config found in settings file, using defaults")
            return config

        config.log_level = values.get("LOG_LEVEL", config.log_level).lower()
        config.verbose = values.get("VERBOSE_OUTPUT", "").strip().lower() in _TRUE_VALUES
        config.http_host = values.get("HTTP_HOST", config.http_host)
        config.http_port = _as_number(values, "HTTP_PORT", config.http_port, int)
        config.adapter_path = values.get("ADAPTER_PATH", config.adapter_path).rstrip("/")
        config.refresh_interval = _as_number(
            values, "REFRESH_INTERVAL", config.refresh_interval, float
        )
        config.connect_delay = _as_number(values, "CONNECT_DELAY", config.connect_delay, float)

        backend = values.get("BUS_BACKEND", config.bus_backend).lower()
        if backend in _BACKENDS:
            config.bus_backend = backend
        else:
            logger.warning(
                "Unknown BUS_BACKEND %r, using %s", backend, BACKEND_DBUS_SEND
            )
        return config


def _as_number(values: dict[str, str], key: str, default, kind):
    raw = values.get(key)
    if raw is None:
        return default
    try:
        number = kind(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid %s value %r, using %s", key, raw, default)
        return default
    if number < 0:
        logger.warning("Negative %s value %r, using %s", key, raw, default)
        return default
    return number
