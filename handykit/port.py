"""Platform helpers: byte order, host lookup and thread ids."""

from __future__ import annotations

import ipaddress
import socket
import sys
import threading
from typing import Optional

_WIDTHS = (2, 4, 8)


def htobe(value: int, width: int = 4, signed: bool = False) -> int:
    """Reinterpret a native-order integer of `width` bytes in big-endian order."""
    if width not in _WIDTHS:
        raise ValueError(f"width must be one of {_WIDTHS}")
    raw = value.to_bytes(width, sys.byteorder, signed=signed)
    return int.from_bytes(raw, "big", signed=signed)


def get_host_by_name(host: str) -> Optional[ipaddress.IPv4Address]:
    """Resolve a host name to an IPv4 address, or None when it cannot be resolved."""
    try:
        return ipaddress.IPv4Address(socket.gethostbyname(host))
    except (OSError, UnicodeError, ValueError):
        return None


def gettid() -> int:
    """Native id of the calling thread."""
    return threading.get_native_id()