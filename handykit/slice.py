"""A movable view over immutable bytes."""

from __future__ import annotations

from typing import List, Union

BytesLike = Union[bytes, bytearray, memoryview]
_SPACE = b" \t\n\r\x0b\x0c"


def _to_bytes(value) -> bytes:
    if isinstance(value, Slice):
        return bytes(value)
    if isinstance(value, str):
        return value.encode()
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"cannot use {type(value).__name__} as bytes")


class Slice:
    """A window [begin, end) over a bytes object whose edges can be moved."""

    __slots__ = ("_data", "_b", "_e")

    def __init__(self, data: Union[BytesLike, str, "Slice"] = b"") -> None:
        self._data = _to_bytes(data)
        self._b = 0
        self._e = len(self._data)

    @classmethod
    def _view(cls, data: bytes, begin: int, end: int) -> "Slice":
        view = cls.__new__(cls)
        view._data = data
        view._b = begin
        view._e = end
        return view

    def __len__(self) -> int:
        return self._e - self._b

    def __getitem__(self, index):
        if isinstance(index, slice):
            return bytes(self)[index]
        size = len(self)
        if index < 0:
            index += size
        if not 0 <= index < size:
            raise IndexError("slice index out of range")
        return self._data[self._b + index]

    def __bytes__(self) -> bytes:
        return self._data[self._b : self._e]

    def __repr__(self) -> str:
        return f"Slice({bytes(self)!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, (Slice, bytes, bytearray, memoryview)):
            return NotImplemented
        return bytes(self) == _to_bytes(other)

    def __lt__(self, other) -> bool:
        if not isinstance(other, (Slice, bytes, bytearray, memoryview)):
            return NotImplemented
        return self.compare(other) < 0

    __hash__ = None

    def front(self) -> int:
        return self[0]

    def back(self) -> int:
        return self[-1]

    def empty(self) -> bool:
        return self._e == self._b

    def resize(self, size: int) -> None:
        if size < 0 or self._b + size > len(self._data):
            raise ValueError("size outside the underlying data")
        self._e = self._b + size

    def clear(self) -> None:
        self._data = b""
        self._b = self._e = 0

    def eat_word(self) -> "Slice":
        """Skip leading whitespace, take the next word and move past it."""
        data, b, e = self._data, self._b, self._e
        while b < e and data[b] in _SPACE:
            b += 1
        end = b
        while end < e and data[end] not in _SPACE:
            end += 1
        self._b = end
        return Slice._view(data, b, end)

    def eat_line(self) -> "Slice":
        """Take everything up to the next CR or LF, which is left in place."""
        data, start = self._data, self._b
        while self._b < self._e and data[self._b] not in b"\r\n":
            self._b += 1
        return Slice._view(data, start, self._b)

    def eat(self, size: int) -> "Slice":
        if size < 0 or size > len(self):
            raise ValueError("cannot eat past the end of the slice")
        start = self._b
        self._b += size
        return Slice._view(self._data, start, self._b)

    def sub(self, boff: int, eoff: int = 0) -> "Slice":
        """A new view with the begin moved by boff and the end moved by eoff."""
        b, e = self._b + boff, self._e + eoff
        if not 0 <= b <= e <= len(self._data):
            raise ValueError("sub-slice outside the underlying data")
        return Slice._view(self._data, b, e)

    def trim_space(self) -> "Slice":
        while self._b < self._e and self._data[self._b] in _SPACE:
            self._b += 1
        while self._b < self._e and self._data[self._e - 1] in _SPACE:
            self._e -= 1
        return self

    def compare(self, other) -> int:
        """Three-way comparison: -1, 0 or 1."""
        a, b = bytes(self), _to_bytes(other)
        return (a > b) - (a < b)

    def starts_with(self, prefix) -> bool:
        return bytes(self).startswith(_to_bytes(prefix))

    def end_with(self, suffix) -> bool:
        return bytes(self).endswith(_to_bytes(suffix))

    def split(self, ch: Union[str, bytes, int]) -> List["Slice"]:
        """Split on a single byte; an empty slice gives an empty list."""
        if isinstance(ch, int):
            sep = bytes([ch])
        else:
            sep = _to_bytes(ch)
        if len(sep) != 1:
            raise ValueError("separator must be a single byte")
        if self.empty():
            return []
        parts = []
        start = self._b
        while True:
            pos = self._data.find(sep, start, self._e)
            if pos < 0:
                break
            parts.append(Slice._view(self._data, start, pos))
            start = pos + 1
        parts.append(Slice._view(self._data, start, self._e))
        return parts