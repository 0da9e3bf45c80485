"""Network helpers: byte order, socket options, IPv4 addresses and a byte buffer."""

from __future__ import annotations

import ipaddress
import os
import socket
import struct
from typing import Tuple, Union

from handykit.logger import error, fatalif
from handykit.port import get_host_by_name, htobe
from handykit.slice import Slice

SocketLike = Union[socket.socket, int]

_INADDR_ANY = ipaddress.IPv4Address("0.0.0.0")
_INADDR_NONE = ipaddress.IPv4Address("255.255.255.255")
_DEFAULT_SUGGEST_SIZE = 512


def hton(value: int, width: int = 4, signed: bool = False) -> int:
    """Convert a host-order integer of `width` bytes to network order."""
    return htobe(value, width, signed)


def ntoh(value: int, width: int = 4, signed: bool = False) -> int:
    """Convert a network-order integer of `width` bytes to host order."""
    return htobe(value, width, signed)


def _setsockopt(sock: SocketLike, level: int, option: int, value: bool) -> None:
    if isinstance(sock, socket.socket):
        sock.setsockopt(level, option, int(value))
        return
    with socket.socket(fileno=os.dup(sock)) as dup:
        dup.setsockopt(level, option, int(value))


def set_non_block(sock: SocketLike, value: bool = True) -> None:
    """Switch O_NONBLOCK on or off; raises OSError on failure."""
    if isinstance(sock, socket.socket):
        sock.setblocking(not value)
    else:
        os.set_blocking(sock, not value)


def set_reuse_addr(sock: SocketLike, value: bool = True) -> None:
    _setsockopt(sock, socket.SOL_SOCKET, socket.SO_REUSEADDR, value)


def set_reuse_port(sock: SocketLike, value: bool = True) -> None:
    """Set SO_REUSEPORT; asking for it where it does not exist is fatal."""
    option = getattr(socket, "SO_REUSEPORT", None)
    if option is None:
        fatalif(value, "SO_REUSEPORT not supported")
        return
    _setsockopt(sock, socket.SOL_SOCKET, option, value)


def set_no_delay(sock: SocketLike, value: bool = True) -> None:
    _setsockopt(sock, socket.IPPROTO_TCP, socket.TCP_NODELAY, value)


class Ip4Addr:
    """An IPv4 address and port; a host that cannot be resolved gives an invalid address."""

    __slots__ = ("_ip", "_port")

    def __init__(self, host: str = "", port: int = 0) -> None:
        self._port = port & 0xFFFF
        if host:
            resolved = get_host_by_name(host)
            self._ip = resolved if resolved is not None else _INADDR_NONE
        else:
            self._ip = _INADDR_ANY
        if self._ip == _INADDR_NONE:
            error("cannot resove %s to ip", host)

    @classmethod
    def from_sockaddr(cls, addr: Tuple[str, int]) -> "Ip4Addr":
        """Build from a (host, port) pair as returned by the socket module."""
        result = cls.__new__(cls)
        result._ip = ipaddress.IPv4Address(addr[0])
        result._port = int(addr[1]) & 0xFFFF
        return result

    @staticmethod
    def host_to_ip(host: str) -> str:
        return Ip4Addr(host, 0).ip()

    def __str__(self) -> str:
        return f"{self._ip}:{self._port}"

    def __repr__(self) -> str:
        return f"Ip4Addr({str(self._ip)!r}, {self._port})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Ip4Addr):
            return NotImplemented
        return self._ip == other._ip and self._port == other._port

    def __hash__(self) -> int:
        return hash((self._ip, self._port))

    def ip(self) -> str:
        return str(self._ip)

    def port(self) -> int:
        return self._port

    def ip_int(self) -> int:
        """The address as a host-order integer."""
        return int(self._ip)

    def is_ip_valid(self) -> bool:
        return self._ip != _INADDR_NONE

    def sockaddr(self) -> Tuple[str, int]:
        """The (host, port) pair the socket module expects."""
        return (str(self._ip), self._port)


def _as_bytes(data) -> bytes:
    if isinstance(data, str):
        return data.encode()
    if isinstance(data, (Buffer, Slice)):
        return bytes(data)
    return bytes(data)


class Buffer:
    """A growable byte buffer that is appended at the end and consumed from the front."""

    __slots__ = ("_buf", "suggest_size")

    def __init__(self, data: Union[bytes, bytearray, memoryview, str, Slice, "Buffer"] = b"") -> None:
        self._buf = bytearray(_as_bytes(data))
        self.suggest_size = _DEFAULT_SUGGEST_SIZE

    def __len__(self) -> int:
        return len(self._buf)

    def __bytes__(self) -> bytes:
        return bytes(self._buf)

    def __repr__(self) -> str:
        return f"Buffer({bytes(self._buf)!r})"

    def empty(self) -> bool:
        return not self._buf

    def data(self) -> bytes:
        return bytes(self._buf)

    def clear(self) -> None:
        self._buf = bytearray()

    def append(self, data) -> "Buffer":
        self._buf += _as_bytes(data)
        return self

    def append_value(self, fmt: str, value) -> "Buffer":
        """Append a value packed with a struct format, native byte order by default."""
        self._buf += struct.pack(fmt, value)
        return self

    def consume(self, size: int) -> "Buffer":
        if size < 0 or size > len(self._buf):
            raise ValueError(f"cannot consume {size} bytes from a buffer of {len(self._buf)}")
        del self._buf[:size]
        return self

    def absorb(self, other: "Buffer") -> "Buffer":
        """Move every byte of `other` to the end of this buffer, leaving `other` empty."""
        if other is self:
            return self
        if not self._buf:
            self._buf, other._buf = other._buf, self._buf
        else:
            self._buf += other._buf
            other.clear()
        return self

    def set_suggest_size(self, size: int) -> None:
        self.suggest_size = size

    def copy(self) -> "Buffer":
        result = Buffer(self._buf)
        result.suggest_size = self.suggest_size
        return result