"""
Unit tests for Connection, over a local socket pair.
"""

import socket
import threading
import time

import pytest

from minihttp.core import Connection, ConnectionState


@pytest.fixture
def pair():
    server_sock, client_sock = socket.socketpair()
    client_sock.settimeout(5.0)
    yield server_sock, client_sock
    client_sock.close()
    server_sock.close()


class TestConnection:

    def test_reader_reads_lines(self, pair):
        server_sock, client_sock = pair
        conn = Connection(socket=server_sock, address=("127.0.0.1", 1))

        client_sock.sendall(b"GET / HTTP/1.1\r\n\r\n")

        assert conn.reader.readline() == b"GET / HTTP/1.1\r\n"
        assert conn.state == ConnectionState.READING
        conn.close()

    def test_send_then_close_delivers_eof(self, pair):
        server_sock, client_sock = pair
        conn = Connection(socket=server_sock, address=("127.0.0.1", 1))

        assert conn.send_response(b"HTTP/1.1 200 OK\r\n\r\n")
        conn.close()

        assert client_sock.recv(1024) == b"HTTP/1.1 200 OK\r\n\r\n"
        assert client_sock.recv(1024) == b""
        assert conn.state == ConnectionState.CLOSED

    def test_close_is_idempotent(self, pair):
        server_sock, _ = pair
        conn = Connection(socket=server_sock, address=("127.0.0.1", 1))

        conn.close()
        conn.close()

        assert conn.state == ConnectionState.CLOSED

    def test_context_manager_closes(self, pair):
        server_sock, client_sock = pair

        with Connection(socket=server_sock, address=("127.0.0.1", 1)) as conn:
            conn.send_response(b"x")

        assert conn.state == ConnectionState.CLOSED
        assert client_sock.recv(1024) == b"x"
        assert client_sock.recv(1024) == b""

    def test_send_to_closed_peer(self, pair):
        server_sock, client_sock = pair
        conn = Connection(socket=server_sock, address=("127.0.0.1", 1))
        client_sock.close()

        assert conn.send_response(b"x" * 1024 * 1024) is False
        conn.close()

    def test_close_bounded_by_trickling_peer(self, pair):
        """A peer that keeps sending a byte at a time can't hold close() open."""
        server_sock, client_sock = pair
        conn = Connection(socket=server_sock, address=("127.0.0.1", 1), timeout=1.0)
        stop = threading.Event()

        def trickle():
            while not stop.is_set():
                try:
                    client_sock.send(b"x")
                except OSError:
                    return
                stop.wait(0.1)

        sender = threading.Thread(target=trickle, daemon=True)
        sender.start()
        try:
            conn.send_response(b"HTTP/1.1 200 OK\r\n\r\n")
            start = time.monotonic()
            conn.close()
            elapsed = time.monotonic() - start
        finally:
            stop.set()
            sender.join(timeout=2.0)

        assert conn.state == ConnectionState.CLOSED
        assert elapsed < Connection.DRAIN_TIMEOUT + 0.5

    def test_timeout_applied(self, pair):
        server_sock, _ = pair
        conn = Connection(socket=server_sock, address=("127.0.0.1", 1), timeout=2.0)

        assert server_sock.gettimeout() == 2.0
        assert conn.client_ip == "127.0.0.1"
        assert len(conn.id) == 8
        conn.close()
