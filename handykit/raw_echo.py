"""A bare readiness-loop TCP echo server."""

from __future__ import annotations

import argparse
import selectors
import socket
import sys
from typing import List, Optional, Tuple

from handykit.net import set_non_block

_READ_CHUNK = 4096
_BACKLOG = 20
_DEFAULT_PORT = 2099
_DEFAULT_WAIT_MS = 10000


class RawEchoServer:
    """Writes back whatever each connection sends, driven by a selector loop.

    Failures that the loop cannot recover from are raised as OSError.
    """

    def __init__(self, host: str = "", port: int = _DEFAULT_PORT, verbose: bool = True) -> None:
        self._verbose = verbose
        self._selector = selectors.DefaultSelector()
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            self._listener.bind((host, port))
            self._listener.listen(_BACKLOG)
        except OSError:
            self._listener.close()
            self._selector.close()
            raise
        self._log(f"fd {self._listener.fileno()} listening at {self.address()[1]}")
        set_non_block(self._listener)
        self._update(self._listener, selectors.EVENT_READ, modify=False)

    def __enter__(self) -> "RawEchoServer":
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
        self._log(
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
        self._log(f"kqueue return {len(events)}")
        for key, mask in events:
            sock: socket.socket = key.fileobj  # type: ignore[assignment]
            if mask & selectors.EVENT_READ and sock.fileno() != -1:
                if sock is self._listener:
                    self._handle_accept()
                else:
                    self._handle_read(sock)
            if mask & selectors.EVENT_WRITE and sock.fileno() != -1:
                # nothing is queued for writing, so stop watching writability
                self._update(sock, selectors.EVENT_READ, modify=True)
        return len(events)

    def serve_forever(self) -> None:
        while True:
            self.loop_once(_DEFAULT_WAIT_MS)

    def _handle_accept(self) -> None:
        conn, raddr = self._listener.accept()
        self._log(f"accept a connection from {raddr[0]}")
        set_non_block(conn)
        self._update(conn, selectors.EVENT_READ | selectors.EVENT_WRITE, modify=False)

    def _handle_read(self, sock: socket.socket) -> None:
        fd = sock.fileno()
        while True:
            try:
                chunk = sock.recv(_READ_CHUNK)
            except BlockingIOError:
                return
            if not chunk:
                break
            self._log(f"read {len(chunk)} bytes")
            sock.send(chunk)
        self._log(f"fd {fd} closed")
        self._selector.unregister(sock)
        sock.close()

    def close(self) -> None:
        """Close every connection, the listener and the selector."""
        if self._selector.get_map() is None:
            return
        socks: List[socket.socket] = [key.fileobj for key in self._selector.get_map().values()]  # type: ignore[misc]
        for sock in socks:
            self._selector.unregister(sock)
            sock.close()
        self._listener.close()
        self._selector.close()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Echo back whatever clients send.")
    parser.add_argument("--port", type=int, default=_DEFAULT_PORT)
    parser.add_argument("--quiet", action="store_true")
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    server = RawEchoServer("", args.port, verbose=not args.quiet)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.close()
    return 0