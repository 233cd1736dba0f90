"""HTTP control surface for a single paired Bluetooth media device."""

__version__ = "0.3.0"
