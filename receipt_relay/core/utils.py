"""
core/utils.py - Pure helpers for address and identifier normalization.

Kept free of Qt and hardware imports so models and tests can use them directly.
"""

import re
from typing import Union

_UNC_RE = re.compile(r'^[\\/]{2}[^\\/]+[\\/]+[^\\/]+')
_HEX_ID_RE = re.compile(r'^[0-9a-f]{1,4}$')


def is_share_path(address: str) -> bool:
    """
    True if *address* is a UNC share path (\\\\server\\share or //server/share).

    Share-path printers are written to as files instead of through a socket.
    The check is syntactic so it behaves the same on every platform.
    """
    if not address:
        return False
    return bool(_UNC_RE.match(address.strip()))


def normalize_hex_id(value: Union[int, str]) -> str:
    """
    Normalize a USB vendor/product id to 4 lower-case hex digits.

    Accepts ints (0x04B8), "0x04b8", "04B8" and short forms such as "4b8".
    Strings are always read as hex, matching how the ids are stored on disk.

    Raises ValueError for anything that is not a 16-bit id.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid USB id: {value!r}")
    if isinstance(value, int):
        if not 0 <= value <= 0xFFFF:
            raise ValueError(f"USB id out of range: {value}")
        return f"{value:04x}"
    if not isinstance(value, str):
        raise ValueError(f"Invalid USB id: {value!r}")

    text = value.strip().lower()
    if text.startswith("0x"):
        text = text[2:]
    if not _HEX_ID_RE.match(text):
        raise ValueError(f"Invalid USB id: {value!r}")
    return text.zfill(4)
