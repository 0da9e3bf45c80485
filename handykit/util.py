"""Small helpers: printf-style formatting, clocks, integer parsing, fd flags."""

from __future__ import annotations

import fcntl
import re
import time
from typing import Callable, Union

_FORMAT_LIMIT = 30000

# printf conversions with an optional C length modifier that Python's % does not take
_CONVERSION = re.compile(
    r"%([-+ #0]*(?:\*|\d+)?(?:\.(?:\*|\d+)?)?)(?:hh|ll|h|l|L|q|j|z|t)?([diouxXeEfFgGcs%])"
)
_INTEGER = re.compile(r"[ \t\n\r\f\v]*([+-]?[0-9]+)")
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


def cformat(fmt: str, *args) -> str:
    """Format like C's printf, dropping length modifiers; output is capped at 29999 characters."""
    python_fmt = _CONVERSION.sub(lambda m: "%" + m.group(1) + m.group(2), fmt)
    text = python_fmt % args
    return text[: _FORMAT_LIMIT - 1]


def time_micro() -> int:
    """Wall-clock time in microseconds since the epoch."""
    return time.time_ns() // 1000


def time_milli() -> int:
    """Wall-clock time in milliseconds since the epoch."""
    return time_micro() // 1000


def steady_micro() -> int:
    """Monotonic clock in microseconds."""
    return time.monotonic_ns() // 1000


def steady_milli() -> int:
    """Monotonic clock in milliseconds."""
    return steady_micro() // 1000


def readable_time(t: float) -> str:
    """Local time as 'YYYY-MM-DD HH:MM:SS'."""
    return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(t))


def _as_text(text: Union[str, bytes, bytearray, memoryview]) -> str:
    if isinstance(text, str):
        return text
    return bytes(text).decode("latin-1")


def _clamp64(value: int) -> int:
    return max(_INT64_MIN, min(_INT64_MAX, value))


def atoi(text: Union[str, bytes]) -> int:
    """Parse a leading decimal integer like strtol; 0 when there is none."""
    match = _INTEGER.match(_as_text(text))
    return _clamp64(int(match.group(1))) if match else 0


def atoi2(text: Union[str, bytes]) -> int:
    """Parse a decimal integer that must span the whole text; -1 otherwise."""
    s = _as_text(text)
    match = _INTEGER.match(s)
    if not match or match.end() != len(s):
        return -1
    return _clamp64(int(match.group(1)))


def add_fd_flag(fd: int, flag: int) -> None:
    """Add a descriptor flag such as FD_CLOEXEC; raises OSError on failure."""
    current = fcntl.fcntl(fd, fcntl.F_GETFD)
    fcntl.fcntl(fd, fcntl.F_SETFD, current | flag)


class ExitCaller:
    """Context manager that runs a callable when the block is left."""

    def __init__(self, functor: Callable[[], object]) -> None:
        self._functor = functor

    def __enter__(self) -> "ExitCaller":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._functor()
        return False