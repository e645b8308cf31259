"""
=============================================================================
HTTP SERVER
=============================================================================

Glues the pieces together: listener, request reader, middleware, router,
response writer.

=============================================================================
REQUEST FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │  accept loop (main thread)                                          │
    │      │                                                               │
    │      │  Connection                                                   │
    │      ▼                                                               │
    │  threading.Thread(target=_process_connection)   one per connection  │
    │      │                                                               │
    │      ├─► RequestParser.read(conn.reader)   → HTTPRequest            │
    │      │       └─ HTTPParseError / OSError  → close, no response      │
    │      │                                                               │
    │      ├─► middleware(router.handle)(request) → HTTPResponse          │
    │      │       └─ handler raised             → 500, empty body        │
    │      │                                                               │
    │      ├─► conn.send_response(response.to_bytes())                    │
    │      │                                                               │
    │      └─► conn.close()                     on every path             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
CONCURRENCY
=============================================================================

One thread per connection, one request per connection. The only blocking
points in a connection thread are reading the request head and writing
the response; neither can stall the accept loop.

Threads share nothing mutable. The router, the middleware chain and the
config are built before the first accept() and only read afterwards, so
there are no locks anywhere in the request path.

=============================================================================
"""

import logging
import threading
from typing import Callable, Optional

from .config import ServerConfig
from .core import Connection, ConnectionState, SocketServer
from .http import (
    HTTPParseError,
    HTTPRequest,
    HTTPResponse,
    RequestParser,
    Router,
    internal_error,
)
from .middleware import Middleware, MiddlewarePipeline


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class HTTPServer:
    """
    Thread-per-connection HTTP/1.1 server.

    Usage:
        server = HTTPServer(ServerConfig(port=4221))
        server.use(LoggingMiddleware())

        @server.route("/echo/*text")
        def echo(request):
            return ok(request.path_params["text"])

        server.run()   # blocks until Ctrl+C / SIGTERM / shutdown()

    Most callers want create_app() instead, which registers the standard
    routes.
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._router = Router()
        self._middleware = MiddlewarePipeline()

        # middleware.wrap(router.handle), built in run()
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """Add middleware. First added runs outermost."""
        self._middleware.add(middleware)
        return self

    @property
    def router(self) -> Router:
        return self._router

    def route(self, pattern: str, name: Optional[str] = None):
        """Register a handler for a pattern (decorator)."""
        return self._router.route(pattern, name)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    @property
    def address(self) -> tuple:
        """Bound (host, port); the real port once listening with port=0."""
        return self._socket_server.address

    def run(self, setup_logging: bool = True):
        """
        Serve until shut down. Blocks.

        Args:
            setup_logging: Configure the root logger from config. Pass False
                           when the embedding application owns logging.

        Raises:
            OSError: The listening port could not be bound.
        """
        if setup_logging:
            self._setup_logging()

        self._handler = self._middleware.wrap(self._router.handle)

        for route in self._router.routes():
            logger.debug(f"Route {route.pattern} → {route.name}")
        if self.config.directory:
            logger.info(f"Serving files from {self.config.directory}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """
        Stop accepting connections.

        In-flight connection threads are daemons and finish on their own;
        there is nothing to wait for since no state is shared.
        """
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is up (for tests and embedding)."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        logging.getLogger("minihttp").setLevel(level)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Called by the accept loop: give the connection its own thread."""
        thread = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        thread.start()

    def _process_connection(self, conn: Connection):
        """
        Serve exactly one request on conn, then close it (runs in its own thread).
        """
        with conn:
            try:
                request = self._parser.read(conn.reader, conn.address)
            except HTTPParseError as e:
                logger.debug(f"[{conn.id}] Dropping connection: {e}")
                return
            except OSError as e:
                logger.warning(f"[{conn.id}] Read error: {e}")
                return

            conn.state = ConnectionState.PROCESSING
            response = self.dispatch(request, conn.id)

            # A failed send is already logged by the connection; either
            # way the with-block closes it next.
            conn.send_response(response.to_bytes())

    def dispatch(self, request: HTTPRequest, conn_id: str = "-") -> HTTPResponse:
        """
        Run a request through middleware and router.

        A handler that raises is answered with 500 instead of killing the
        connection thread silently.
        """
        handler = self._handler or self._middleware.wrap(self._router.handle)
        try:
            return handler(request)
        except Exception as e:
            logger.exception(f"[{conn_id}] Handler error: {e}")
            return internal_error()
