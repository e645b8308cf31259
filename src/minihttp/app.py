"""
Application factory: an HTTPServer with the standard route table.

    ┌──────────────────────┬─────────────────────────────────────────────┐
    │ /                    │ 200, empty                                  │
    │ /echo/<x>            │ 200, text/plain "<x>"                       │
    │ /user-agent          │ 200, text/plain User-Agent header           │
    │ /files/<name>        │ 200 octet-stream / 404 / 500                │
    │ anything else        │ 404, empty                                  │
    └──────────────────────┴─────────────────────────────────────────────┘

Order matters: routes are matched first-registered, first-matched.
"""

from typing import Optional

from .config import ServerConfig
from .handlers import echo, root, serve_files, user_agent
from .middleware import LoggingMiddleware
from .server import HTTPServer


def create_app(
    config: Optional[ServerConfig] = None,
    access_log: bool = True,
) -> HTTPServer:
    """
    Build the server with its four routes.

    Args:
        config: Server configuration; config.directory enables /files/.
        access_log: Install LoggingMiddleware (on by default).

    Returns:
        A ready-to-run HTTPServer.
    """
    server = HTTPServer(config)

    if access_log:
        server.use(LoggingMiddleware(log_format=server.config.log_format))

    files = serve_files(server.config.directory)

    router = server.router
    router.add_route("/", root)
    router.add_route("/echo/*text", echo)
    router.add_route("/user-agent", user_agent)
    router.add_route("/files/*filename", files.handle, name="files")

    return server
