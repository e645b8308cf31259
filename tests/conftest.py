"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator, Optional

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttp import HTTPServer, ServerConfig, create_app


@pytest.fixture
def sample_get_request() -> bytes:
    """A typical request head, as curl would send it."""
    return (
        b"GET /echo/abc123 HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: curl/8.4.0\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def files_dir(tmp_path: Path) -> Path:
    """Base directory with a couple of files in it."""
    base = tmp_path / "files"
    base.mkdir()
    (base / "report.txt").write_bytes(b"data")
    (base / "nested").mkdir()
    (base / "nested" / "blob.bin").write_bytes(bytes(range(256)))
    (tmp_path / "secret.txt").write_bytes(b"top secret")
    return base


class ServerThread:
    """Runs an HTTPServer in a background thread for the duration of a test."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"setup_logging": False},
            daemon=True,
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes on a fresh connection and read until the server closes it."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=timeout) as sock:
            sock.sendall(raw)
            return recv_all(sock)


def recv_all(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


@pytest.fixture
def running_server(files_dir: Path) -> Generator[ServerThread, None, None]:
    """The standard app on an OS-assigned port, serving files_dir."""
    server = create_app(ServerConfig(
        host="127.0.0.1",
        port=0,
        directory=str(files_dir),
        timeout=5.0,
        log_level="WARNING",
    ))

    srv = ServerThread(server)
    srv.start()

    yield srv

    srv.stop()


@pytest.fixture
def running_server_no_dir() -> Generator[ServerThread, None, None]:
    """The standard app with file serving disabled."""
    server = create_app(ServerConfig(host="127.0.0.1", port=0, timeout=5.0))

    srv = ServerThread(server)
    srv.start()

    yield srv

    srv.stop()
