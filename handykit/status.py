"""Result status carrying an error code and a message."""

from __future__ import annotations

import os
from dataclasses import dataclass

from handykit.util import cformat


def errstr(err: int) -> str:
    """Text for an errno value."""
    return os.strerror(err)


@dataclass(frozen=True)
class Status:
    """An error code with a message; code 0 means success."""

    code: int = 0
    msg: str = ""

    @classmethod
    def from_system(cls, err: int) -> "Status":
        return cls(err, os.strerror(err))

    @classmethod
    def from_format(cls, code: int, fmt: str, *args) -> "Status":
        return cls(code, cformat(fmt, *args))

    @classmethod
    def io_error(cls, op: str, name: str, err: int) -> "Status":
        return cls.from_format(err, "%s %s %s", op, name, errstr(err))

    def ok(self) -> bool:
        return self.code == 0

    def __str__(self) -> str:
        return cformat("%d %s", self.code, self.msg)