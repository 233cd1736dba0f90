"""BlueZ access through command-line tools and, optionally, dbus_next."""

from .bridge import CommandBridge, CommandResult
from .properties import PropertyReader
from .reply_parser import parse_reply

__all__ = [
    "CommandBridge",
    "CommandResult",
    "PropertyReader",
    "parse_reply",
]
