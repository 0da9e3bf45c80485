"""Leveled logger writing one line per record, with time-based file rotation."""

from __future__ import annotations

import enum
import os
import sys
import threading
import time
from typing import BinaryIO, Optional, Union

from handykit.port import gettid
from handykit.util import cformat

try:
    import syslog as _syslog
except ImportError:  # not available on every platform
    _syslog = None

_LINE_LIMIT = 4 * 1024
_STAMP_LEN = 27


class LogLevel(enum.IntEnum):
    FATAL = 0
    ERROR = 1
    UERR = 2
    WARN = 3
    INFO = 4
    DEBUG = 5
    TRACE = 6
    ALL = 7


class FatalError(RuntimeError):
    """Raised after a FATAL record has been written."""


class Logger:
    """Writes formatted records to stdout or to a file that rotates by interval."""

    _instance: Optional["Logger"] = None
    _instance_lock = threading.Lock()

    def __init__(self) -> None:
        self._level = LogLevel.INFO
        self._last_rotate = int(time.time())
        self._real_rotate = self._last_rotate
        self._rotate_interval = 86400
        self._filename = ""
        self._file: Optional[BinaryIO] = None
        self._lock = threading.Lock()

    @staticmethod
    def get_logger() -> "Logger":
        """The process-wide logger."""
        with Logger._instance_lock:
            if Logger._instance is None:
                Logger._instance = Logger()
            return Logger._instance

    @property
    def level(self) -> LogLevel:
        return self._level

    @property
    def filename(self) -> str:
        return self._filename

    def set_log_level(self, level: Union[LogLevel, int, str]) -> None:
        """Set the level by value (clamped) or by name (case-insensitive, INFO if unknown)."""
        if isinstance(level, str):
            self._level = LogLevel.__members__.get(level.upper(), LogLevel.INFO)
            return
        self._level = LogLevel(min(int(LogLevel.ALL), max(int(LogLevel.FATAL), int(level))))

    def adjust_log_level(self, adjust: int) -> None:
        self.set_log_level(int(self._level) + adjust)

    def set_file_name(self, filename: str) -> None:
        """Send records to a file; a file that cannot be opened is reported and ignored."""
        try:
            new_file = open(filename, "ab", buffering=0)
        except OSError as exc:
            print(f"open log file {filename} failed. msg: {exc.strerror} ignored", file=sys.stderr)
            return
        with self._lock:
            old, self._file = self._file, new_file
            self._filename = filename
        if old is not None:
            old.close()

    def set_rotate_interval(self, interval: int) -> None:
        self._rotate_interval = interval

    def level_str(self) -> str:
        return self._level.name

    def close(self) -> None:
        """Close the log file; later records go to stdout."""
        with self._lock:
            old, self._file = self._file, None
            self._filename = ""
        if old is not None:
            old.close()

    def log(self, level: Union[LogLevel, int], fmt: str, *args) -> None:
        self._emit(level, fmt, args)

    def _period(self, t: int) -> int:
        return (t - time.timezone) // self._rotate_interval

    def _maybe_rotate(self) -> None:
        now = int(time.time())
        if not self._filename or self._period(now) == self._period(self._last_rotate):
            return
        self._last_rotate = now
        with self._lock:
            old, self._real_rotate = self._real_rotate, now
        if self._period(old) == self._period(now):
            return
        newname = f"{self._filename}.{time.strftime('%Y%m%d%H%M', time.localtime(now))}"
        try:
            os.rename(self._filename, newname)
        except OSError as exc:
            print(f"rename logfile {self._filename} -> {newname} failed msg: {exc.strerror}", file=sys.stderr)
            return
        try:
            new_file = open(self._filename, "ab", buffering=0)
        except OSError as exc:
            print(f"open log file {newname} failed. msg: {exc.strerror} ignored", file=sys.stderr)
            return
        with self._lock:
            old_file, self._file = self._file, new_file
        if old_file is not None:
            old_file.close()

    def _emit(self, level: Union[LogLevel, int], fmt: str, args: tuple) -> None:
        # the record's location is the caller of log() or of a module-level helper
        if level > self._level:
            return
        level = LogLevel(level)
        self._maybe_rotate()
        try:
            frame = sys._getframe(2)
            where = f"{os.path.basename(frame.f_code.co_filename)}:{frame.f_lineno}"
        except ValueError:
            where = "?:0"
        micros = time.time_ns() // 1000
        seconds, usec = divmod(micros, 1_000_000)
        tm = time.localtime(seconds)
        header = (
            f"{tm.tm_year:04d}/{tm.tm_mon:02d}/{tm.tm_mday:02d}-"
            f"{tm.tm_hour:02d}:{tm.tm_min:02d}:{tm.tm_sec:02d}.{usec:06d} "
            f"{gettid():x} {level.name} {where} "
        )
        message = cformat(fmt, *args)
        raw = (header + message).encode("utf-8", "replace")[: _LINE_LIMIT - 2]
        raw = raw.rstrip(b"\n") + b"\n"
        text = raw.decode("utf-8", "replace")
        self._write(raw, text)
        if level <= LogLevel.ERROR and _syslog is not None:
            _syslog.syslog(_syslog.LOG_ERR, text[_STAMP_LEN:])
        if level == LogLevel.FATAL:
            sys.stderr.write(text)
            raise FatalError(message)

    def _write(self, raw: bytes, text: str) -> None:
        with self._lock:
            try:
                if self._file is None:
                    sys.stdout.write(text)
                    sys.stdout.flush()
                else:
                    self._file.write(raw)
            except OSError as exc:
                print(f"write log file {self._filename} failed. errmsg: {exc.strerror}", file=sys.stderr)


def _root_emit(level: LogLevel, fmt: str, args: tuple) -> None:
    logger = Logger.get_logger()
    if level <= logger.level:
        logger._emit(level, fmt, args)


def trace(fmt: str, *args) -> None:
    logger = Logger.get_logger()
    if LogLevel.TRACE <= logger.level:
        logger._emit(LogLevel.TRACE, fmt, args)


def debug(fmt: str, *args) -> None:
    logger = Logger.get_logger()
    if LogLevel.DEBUG <= logger.level:
        logger._emit(LogLevel.DEBUG, fmt, args)


def info(fmt: str, *args) -> None:
    logger = Logger.get_logger()
    if LogLevel.INFO <= logger.level:
        logger._emit(LogLevel.INFO, fmt, args)


def warn(fmt: str, *args) -> None:
    logger = Logger.get_logger()
    if LogLevel.WARN <= logger.level:
        logger._emit(LogLevel.WARN, fmt, args)


def error(fmt: str, *args) -> None:
    logger = Logger.get_logger()
    if LogLevel.ERROR <= logger.level:
        logger._emit(LogLevel.ERROR, fmt, args)


def fatal(fmt: str, *args) -> None:
    """Log at FATAL and raise FatalError."""
    Logger.get_logger()._emit(LogLevel.FATAL, fmt, args)


def fatalif(cond, fmt: str, *args) -> None:
    """Log at FATAL and raise FatalError when cond is true."""
    if cond:
        Logger.get_logger()._emit(LogLevel.FATAL, fmt, args)


def exitif(cond, fmt: str, *args) -> None:
    """Log at ERROR and exit with status 1 when cond is true."""
    if cond:
        logger = Logger.get_logger()
        if LogLevel.ERROR <= logger.level:
            logger._emit(LogLevel.ERROR, fmt, args)
        raise SystemExit(1)


def setloglevel(level: Union[LogLevel, int, str]) -> None:
    Logger.get_logger().set_log_level(level)


def setlogfile(filename: str) -> None:
    Logger.get_logger().set_file_name(filename)