import contextlib
import selectors
import socket
import threading

import pytest

from handykit.raw_http import RESPONSE_HEADER, RawHttpServer, make_http_response


@contextlib.contextmanager
def running(server):
    stop = threading.Event()

    def run():
        while not stop.is_set():
            server.loop_once(20)

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    try:
        yield server.address()
    finally:
        stop.set()
        thread.join(5)
        server.close()


def read_exactly(sock, size):
    data = bytearray()
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            break
        data += chunk
    return bytes(data)


def test_response_layout():
    response = make_http_response()
    header, body = response.split(b"\r\n\r\n", 1)
    assert header.startswith(b"HTTP/1.1 200 OK")
    assert b"Content-Length: 1048576" in header
    assert len(body) == 1048576
    assert body[:6] == b"123456"
    assert body[6:].count(0) == len(body) - 6
    assert response.startswith(RESPONSE_HEADER)


def test_get_returns_full_response():
    expected = make_http_response()
    server = RawHttpServer("127.0.0.1", 0, verbose=False)
    with running(server) as addr:
        with socket.create_connection(addr, timeout=10) as client:
            client.sendall(b"GET / HTTP/1.1\r\n\r\n")
            assert read_exactly(client, len(expected)) == expected


def test_lf_only_terminator_is_accepted():
    expected = make_http_response()
    server = RawHttpServer("127.0.0.1", 0, verbose=False)
    with running(server) as addr:
        with socket.create_connection(addr, timeout=10) as client:
            client.sendall(b"GET / HTTP/1.0\n\n")
            assert read_exactly(client, len(expected)) == expected


def test_keep_alive_serves_two_requests():
    expected = make_http_response()
    server = RawHttpServer("127.0.0.1", 0, verbose=False)
    with running(server) as addr:
        with socket.create_connection(addr, timeout=10) as client:
            for _ in range(2):
                client.sendall(b"GET / HTTP/1.1\r\n\r\n")
                assert read_exactly(client, len(expected)) == expected


def test_always_watch_write_mode():
    expected = make_http_response()
    server = RawHttpServer("127.0.0.1", 0, verbose=False, always_watch_write=True)
    with running(server) as addr:
        with socket.create_connection(addr, timeout=10) as client:
            client.sendall(b"GET / HTTP/1.1\r\n\r\n")
            assert read_exactly(client, len(expected)) == expected


def test_incomplete_request_gets_no_answer():
    server = RawHttpServer("127.0.0.1", 0, verbose=False)
    with running(server) as addr:
        with socket.create_connection(addr, timeout=0.3) as client:
            client.sendall(b"GET / HTTP/1.1\r\n")
            with pytest.raises(socket.timeout):
                client.recv(1)


def test_idle_loop_returns_zero():
    with RawHttpServer("127.0.0.1", 0, verbose=False) as server:
        assert server.loop_once(10) == 0


def test_accept_is_reported(capsys):
    with RawHttpServer("127.0.0.1", 0, verbose=True) as server:
        with socket.create_connection(server.address(), timeout=5):
            assert server.loop_once(2000) == 1
        out = capsys.readouterr().out
    assert "accept a connection from 127.0.0.1" in out
    assert "epoll_wait return 1" in out


def test_listening_message(capsys):
    with RawHttpServer("127.0.0.1", 0, verbose=False) as server:
        port = server.address()[1]
        out = capsys.readouterr().out
    assert f"listening at {port}" in out


def test_bind_to_used_port_raises():
    with RawHttpServer("127.0.0.1", 0, verbose=False) as first:
        with pytest.raises(OSError):
            RawHttpServer("127.0.0.1", first.address()[1], verbose=False)


def test_address_is_loopback():
    with RawHttpServer("127.0.0.1", 0, verbose=False) as server:
        host, port = server.address()
    assert host == "127.0.0.1"
    assert port > 0