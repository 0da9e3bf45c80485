"""A bare readiness-loop HTTP server that answers every request with a fixed 1 MiB page."""

from __future__ import annotations

import argparse
import selectors
import socket
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from handykit.net import set_non_block

RESPONSE_HEADER = (
    b"HTTP/1.1 200 OK\r\n"
    b"Connection: Keep-Alive\r\n"
    b"Content-Type: text/html; charset=UTF-8\r\n"
    b"Content-Length: 1048576\r\n"
    b"\r\n"
)
_BODY_SIZE = 1048576
_BODY_PREFIX = b"123456"
_READ_CHUNK = 4096
_BACKLOG = 20
_DEFAULT_PORT = 80
_DEFAULT_WAIT_MS = 10000


def make_http_response() -> bytes:
    """The fixed response: headers, then '123456' padded with NUL bytes to 1 MiB."""
    return RESPONSE_HEADER + _BODY_PREFIX + bytes(_BODY_SIZE - len(_BODY_PREFIX))


@dataclass
class _Connection:
    readed: bytearray = field(default_factory=bytearray)
    written: int = 0
    write_enabled: bool = False


class RawHttpServer:
    """Serves the fixed response over keep-alive connections from a selector loop.

    With ``always_watch_write`` every connection is watched for writability from
    the start; otherwise write interest is added only while a response is pending.
    """

    def __init__(
        self,
        host: str = "",
        port: int = _DEFAULT_PORT,
        verbose: bool = True,
        always_watch_write: bool = False,
    ) -> None:
        self._verbose = verbose
        self._always_write = always_watch_write
        self._response = make_http_response()
        self._connections: Dict[int, _Connection] = {}
        self._selector = selectors.DefaultSelector()
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            self._listener.bind((host, port))
            self._listener.listen(_BACKLOG)
        except OSError:
            self._listener.close()
            self._selector.close()
            raise
        print(f"fd {self._listener.fileno()} listening at {self.address()[1]}")
        set_non_block(self._listener)
        self._update(self._listener, selectors.EVENT_READ, modify=False)

    def __enter__(self) -> "RawHttpServer":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    def address(self) -> Tuple[str, int]:
        """The (host, port) the listening socket is bound to."""
        host, port = self._listener.getsockname()[:2]
        return host, port

    def _log(self, text: str) -> None:
        if self._verbose:
            print(text)

    def _update(self, sock: socket.socket, events: int, modify: bool) -> None:
        print(
            f"{'mod' if modify else 'add'} fd {sock.fileno()} events "
            f"read {int(bool(events & selectors.EVENT_READ))} "
            f"write {int(bool(events & selectors.EVENT_WRITE))}"
        )
        if modify:
            self._selector.modify(sock, events)
        else:
            self._selector.register(sock, events)

    def loop_once(self, wait_ms: int) -> int:
        """Wait up to wait_ms for readiness and handle it; returns the number of events."""
        events = self._selector.select(wait_ms / 1000)
        self._log(f"epoll_wait return {len(events)}")
        for key, mask in events:
            sock: socket.socket = key.fileobj  # type: ignore[assignment]
            if sock.fileno() == -1:
                continue
            if mask & selectors.EVENT_READ:
                if sock is self._listener:
                    self._handle_accept()
                else:
                    self._handle_read(sock)
            elif mask & selectors.EVENT_WRITE:
                self._log("handling epollout")
                self._send_response(sock)
        return len(events)

    def serve_forever(self) -> None:
        while True:
            self.loop_once(_DEFAULT_WAIT_MS)

    def _handle_accept(self) -> None:
        conn, raddr = self._listener.accept()
        print(f"accept a connection from {raddr[0]}")
        set_non_block(conn)
        events = selectors.EVENT_READ
        if self._always_write:
            events |= selectors.EVENT_WRITE
        self._update(conn, events, modify=False)

    def _handle_read(self, sock: socket.socket) -> None:
        fd = sock.fileno()
        while True:
            try:
                chunk = sock.recv(_READ_CHUNK)
            except BlockingIOError:
                return
            except OSError as exc:
                print(f"read {fd} error: {exc.errno} {exc.strerror}")
                break
            if not chunk:
                break
            self._log(f"read {len(chunk)} bytes")
            con = self._connections.setdefault(fd, _Connection())
            con.readed += chunk
            if len(con.readed) > 4 and (con.readed.endswith(b"\n\n") or con.readed.endswith(b"\r\n\r\n")):
                self._send_response(sock)
                if sock.fileno() == -1:
                    return
        self._close(sock)

    def _send_response(self, sock: socket.socket) -> None:
        fd = sock.fileno()
        con = self._connections.setdefault(fd, _Connection())
        if not con.readed:
            return
        view = memoryview(self._response)
        left = len(view) - con.written
        while left > 0:
            try:
                sent = sock.send(view[con.written:])
            except BlockingIOError:
                if not self._always_write and not con.write_enabled:
                    self._update(sock, selectors.EVENT_READ | selectors.EVENT_WRITE, modify=True)
                    con.write_enabled = True
                return
            except OSError as exc:
                print(f"write error for {fd}: {exc.errno} {exc.strerror}")
                self._close(sock)
                return
            con.written += sent
            left -= sent
            self._log(f"write {sent} bytes left: {left}")
        if con.write_enabled:
            self._update(sock, selectors.EVENT_READ, modify=True)
            con.write_enabled = False
        self._connections.pop(fd, None)

    def _close(self, sock: socket.socket) -> None:
        fd = sock.fileno()
        if fd == -1:
            return
        self._selector.unregister(sock)
        sock.close()
        self._connections.pop(fd, None)

    def close(self) -> None:
        """Close every connection, the listener and the selector."""
        if self._selector.get_map() is None:
            return
        socks: List[socket.socket] = [key.fileobj for key in self._selector.get_map().values()]  # type: ignore[misc]
        for sock in socks:
            self._selector.unregister(sock)
            sock.close()
        self._connections.clear()
        self._listener.close()
        self._selector.close()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Serve a fixed 1 MiB page over HTTP.")
    parser.add_argument("--port", type=int, default=_DEFAULT_PORT)
    parser.add_argument("--et", action="store_true", help="watch writability on every connection")
    parser.add_argument("quiet", nargs="*", help="any extra argument turns per-event output off")
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    server = RawHttpServer("", args.port, verbose=not args.quiet, always_watch_write=args.et)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.close()
    return 0