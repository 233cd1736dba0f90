"""Parser for ``dbus-send --print-reply`` property replies.

A ``Properties.Get`` reply for ``MediaPlayer1.Track`` looks like::

    method return time=1571.2 sender=:1.3 -> destination=:1.42 serial=88 reply_serial=2
       variant       array [
             dict entry(
                string "Title"
                variant                   string "Song 2"
             )
             dict entry(
                string "Duration"
                variant                   uint32 121000
             )
          ]

After the header is stripped, the typed tokens read as alternating
key/value pairs.  A ``Status`` reply is a bare ``variant string "playing"``;
some devices (mostly iOS) also lead the track dict with a value that has no
key.  Both cases are caught by the sentinel check below and the first token
is filed under ``Meta``.
"""

import logging
import re

logger = logging.getLogger(__name__)

META_KEY = "Meta"

# First-token values that mean "value without a key" rather than a key
SENTINEL_VALUES = frozenset({"Item", "playing", "paused"})

_PREAMBLE_RE = re.compile(r".*reply_serial=\d+\n\s*variant\s*array")
# dbus-send prints one token per line and does not escape quotes
_TOKEN_RE = re.compile(r'string\s"(.*)"|uint32\s(\d+)')


def extract_tokens(output: str) -> list[str]:
    """Return the cleaned typed-string / uint32 tokens of a reply, in order."""
    body = _PREAMBLE_RE.sub("", output)
    tokens = []
    for match in _TOKEN_RE.finditer(body):
        text = match.group(1) if match.group(1) is not None else match.group(2)
        tokens.append(text.strip())
    return tokens


def parse_reply(output: str) -> dict[str, str] | None:
    """Parse a property reply into a flat ``{field: value}`` dict.

    Returns None when no tokens could be extracted.  Tokens that pair up to
    nothing (e.g. a bare ``"stopped"`` status) give an empty dict, which is a
    valid reply.
    """
    tokens = extract_tokens(output)
    if not tokens:
        logger.error("Error parsing dbus output. Full output:\n%s", output)
        return None

    parsed: dict[str, str] = {}
    key = ""
    invert = 0
    if tokens[0] in SENTINEL_VALUES:
        invert = 1
        key = META_KEY

    for i, value in enumerate(tokens):
        if i % 2 == invert:
            key = value
        else:
            parsed[key] = value
    return parsed
