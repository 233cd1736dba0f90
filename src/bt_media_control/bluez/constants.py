"""BlueZ D-Bus names and external tool settings."""

# BlueZ D-Bus service and interface names
BLUEZ_SERVICE = "org.bluez"
DEVICE_INTERFACE = "org.bluez.Device1"
MEDIA_PLAYER_INTERFACE = "org.bluez.MediaPlayer1"
PROPERTIES_INTERFACE = "org.freedesktop.DBus.Properties"

# Default adapter path
DEFAULT_ADAPTER_PATH = "/org/bluez/hci0"

# BlueZ exposes the AVRCP player of a connected phone as the first child node
PLAYER_NODE = "player0"

# dbus-send arguments prepended to every BlueZ method call
DBUS_SEND_PREFIX = (
    "--system",
    "--type=method_call",
    f"--dest={BLUEZ_SERVICE}",
    "--print-reply",
)

# tmux session hosting the interactive bluetoothctl used for scanning
SCAN_SESSION = "bluetoothConnect"


def address_to_path(address: str, adapter_path: str = DEFAULT_ADAPTER_PATH) -> str:
    """Convert a MAC (or already normalized) address to a BlueZ D-Bus object path."""
    return f"{adapter_path}/dev_{address.replace(':', '_')}"
