"""
=============================================================================
MINIHTTP - A Minimal HTTP/1.1 Server on Raw Sockets
=============================================================================

A small HTTP/1.1 server built directly on TCP sockets. It answers four
routes and nothing else:

    GET /                 → 200
    GET /echo/<text>      → 200, body <text>
    GET /user-agent       → 200, body = User-Agent header
    GET /files/<name>     → 200 file bytes, or 404

(Method is ignored; any token in the method slot is accepted.)

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    minihttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m minihttp)
    ├── app.py               # create_app(): server + route table
    ├── server.py            # HTTPServer: thread per connection
    ├── config.py            # ServerConfig dataclass
    ├── core/
    │   ├── socket_server.py # bind / listen / accept loop
    │   └── connection.py    # buffered reader, one-shot writer
    ├── http/
    │   ├── request.py       # request line + header parsing
    │   ├── response.py      # response serialization
    │   ├── router.py        # exact + prefix routing
    │   └── status_codes.py  # HTTPStatus enum
    ├── handlers/
    │   ├── basic.py         # root, echo, user-agent
    │   └── files.py         # read-only file serving
    └── middleware/
        ├── base.py          # Middleware / MiddlewarePipeline
        └── logging.py       # access log

=============================================================================
QUICK START
=============================================================================

    $ python -m minihttp --directory /tmp/files
    $ curl -i localhost:4221/echo/hello

    from minihttp import create_app, ServerConfig

    server = create_app(ServerConfig(directory="/tmp/files"))
    server.run()

=============================================================================
WHAT IT DELIBERATELY DOESN'T DO
=============================================================================

No keep-alive (one request per connection), no chunked encoding, no
request bodies, no TLS, no compression, no HTTP/2. Each connection gets
its own thread, reads one request head, writes one response, and closes.

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import HTTPServer
from .app import create_app

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
