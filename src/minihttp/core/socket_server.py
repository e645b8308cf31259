"""
=============================================================================
LOW-LEVEL TCP LISTENER
=============================================================================

Binds the listening socket and runs the accept loop. Each accepted client
is wrapped in a Connection and handed to a callback; the callback decides
how it gets scheduled (HTTPServer spawns a thread).

=============================================================================
SOCKET LIFECYCLE (SERVER SIDE)
=============================================================================

    1. socket()    Create a TCP socket
    2. bind()      Claim host:port         ← only fatal failure point
    3. listen()    Start queueing clients
    4. accept()    Loop: one new socket per client
    5. close()     Release the listening socket

                    ┌───────────────────────┐
                    │   listening socket    │
                    │   0.0.0.0:4221        │
                    └───────────┬───────────┘
                                │ accept()
             ┌──────────────────┼──────────────────┐
             ▼                  ▼                  ▼
       client socket      client socket      client socket
       (Connection)       (Connection)       (Connection)

=============================================================================
INTERRUPTIBLE ACCEPT
=============================================================================

accept() has a 1 second timeout. Every second the loop wakes up, checks
the running flag and goes back to waiting. That is how shutdown() (from
a signal handler or another thread) stops the loop without closing the
socket out from under a blocked accept().

=============================================================================
"""

import logging
import signal
import socket
import threading
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)

ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    TCP accept loop.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False
        self._ready_event = threading.Event()
        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The bound (host, port).

        With port=0 the OS picks the port, so read it back from the socket
        once it exists.
        """
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restarting the server must not fail on a port stuck in TIME_WAIT.
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Responses are written in one sendall(); don't let Nagle hold
        # the tail of it back.
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(ACCEPT_POLL_INTERVAL)
        return sock

    def _setup_signals(self):
        """
        Turn SIGINT / SIGTERM into a graceful shutdown.

        signal.signal() may only be called from the main thread. When the
        server runs in a background thread (tests, embedding) we skip this
        and rely on shutdown() being called directly.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and run the accept loop. Blocks until shutdown().

        Raises:
            OSError: bind() failed (port in use, permission denied). This is
                     the one error that is fatal to the process.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to port {self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)

        self._running = True
        self._setup_signals()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Accept clients until shutdown.

        A failed accept() is logged and the loop keeps going; one bad
        client must not take the listener down.
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue  # poll the running flag
            except OSError as e:
                if not self._running:
                    break
                logger.error(f"Accept error: {e}")
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
            )
            connection_handler(conn)

    def shutdown(self):
        """Stop the accept loop. Safe to call more than once, from any thread."""
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._restore_signals()
        self._ready_event.clear()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. Returns False on timeout."""
        return self._ready_event.wait(timeout)
