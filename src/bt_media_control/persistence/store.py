"""JSON-backed persistent settings store.

Settings are a two-level mapping of ``component -> name -> value`` with
string values, e.g.::

    {"CONFIG": {"BLUETOOTH_ADDRESS": "AA_BB_CC_DD_EE_FF", "HTTP_PORT": "5353"}}

Component and name keys are upper-cased on the way in so lookups from the
HTTP routes are case-insensitive.
"""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = "settings.json"


class SettingsStore:
    """Manages the persistent settings file shared by all components."""

    def __init__(self, path: str | Path = DEFAULT_SETTINGS_PATH):
        self._path = Path(path)
        self._data: dict[str, dict[str, str]] = {}

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> None:
        """Load settings from disk, starting empty if missing or unreadable."""
        if not self._path.exists():
            self._data = {}
            logger.warning("Settings file %s not found, starting with empty settings", self._path)
            return

        try:
            data = json.loads(self._path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.error("Failed to parse settings file %s: %s", self._path, e)
            self._data = {}
            return

        if not isinstance(data, dict):
            logger.error("Settings file %s does not hold an object, ignoring it", self._path)
            self._data = {}
            return

        self._data = {
            str(component).upper(): {
                str(name).upper(): str(value) for name, value in values.items()
            }
            for component, values in data.items()
            if isinstance(values, dict)
        }
        logger.info("Loaded %d settings component(s) from %s", len(self._data), self._path)

    async def save(self) -> None:
        """Write all settings to disk."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._data, indent=2, sort_keys=True))
        logger.debug("Settings saved to %s", self._path)

    def get_all(self) -> dict[str, dict[str, str]]:
        """Return a copy of every component."""
        return {component: dict(values) for component, values in self._data.items()}

    def get_component(self, component: str) -> dict[str, str] | None:
        """Return a copy of one component, or None if it doesn't exist."""
        values = self._data.get(component.upper())
        if values is None:
            return None
        return dict(values)

    def get(self, component: str, name: str, default: str | None = None) -> str | None:
        """Return a single setting value."""
        return self._data.get(component.upper(), {}).get(name.upper(), default)

    async def set(self, component: str, name: str, value: str) -> None:
        """Set a single value and persist the whole file."""
        component = component.upper()
        name = name.upper()
        self._data.setdefault(component, {})[name] = str(value)
        await self.save()
        logger.info("Setting %s/%s = %s", component, name, value)
