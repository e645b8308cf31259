"""
=============================================================================
CONNECTION WRAPPER
=============================================================================

Wraps one accepted client socket for exactly one request/response
exchange.

=============================================================================
LIFECYCLE
=============================================================================

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
              │                                      ▲
              └──── parse / transport error ─────────┘

There is no keep-alive: every path ends in close(), and close() is
idempotent so the `with conn:` block in the server can always call it.

=============================================================================
READING
=============================================================================

The raw socket is wrapped in socket.makefile("rb"), a BufferedReader.
That gives us readline() for free, which is all the request reader
needs:

    conn.reader.readline()  →  b"GET / HTTP/1.1\\r\\n"

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Optional


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The accepted client socket.
        address: Peer (ip, port).
        id: Short random id used to correlate log lines.
        state: Where in the lifecycle this connection is.
        buffer_size: Buffer size for the stream reader.
        timeout: Socket timeout in seconds, None for blocking.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192
    timeout: Optional[float] = None

    _reader: Optional[BinaryIO] = field(default=None, repr=False)

    DRAIN_TIMEOUT = 0.5  # seconds

    def __post_init__(self):
        # settimeout(None) puts the socket in blocking mode
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Seconds since accept()."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    @property
    def reader(self) -> BinaryIO:
        """
        Buffered binary stream over the socket (created on first use).

        Marks the connection READING; the request reader pulls lines from
        this until the end-of-headers marker.
        """
        if self._reader is None:
            self._reader = self.socket.makefile("rb", buffering=self.buffer_size)
        self.state = ConnectionState.READING
        return self._reader

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Write a full response in one sendall().

        There is no retry: if the client is gone the error is logged and the
        caller closes the connection.

        Returns:
            True if every byte was handed to the kernel, False otherwise.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        1. shutdown(SHUT_WR) sends FIN so the client sees end-of-response.
        2. Drain whatever the client sent that we never read (a request
           body, say), for at most DRAIN_TIMEOUT seconds in total.
           Closing with unread data makes the kernel send RST, which can
           destroy the response before the client reads it.
        3. Close the stream reader (it holds its own reference to the fd).
        4. Close the socket.

        Errors are expected here (peer already gone) and ignored.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # peer already disconnected

        # One deadline for the whole drain, however slowly the peer sends.
        deadline = time.monotonic() + self.DRAIN_TIMEOUT
        try:
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                if not self.socket.recv(1024):
                    break
        except OSError:
            pass  # timeout or reset, closing anyway

        if self._reader is not None:
            try:
                self._reader.close()
            except OSError:
                pass
            self._reader = None

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
