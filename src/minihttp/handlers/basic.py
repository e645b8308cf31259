"""
Root, echo and user-agent handlers.

All three are pure functions of the request: same request in, same bytes
out, no state anywhere.
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok


def root(request: HTTPRequest) -> HTTPResponse:
    """GET / → "HTTP/1.1 200 OK\\r\\n\\r\\n"."""
    return ok()


def echo(request: HTTPRequest) -> HTTPResponse:
    """
    Echo the rest of the path back as text/plain.

    Registered as "/echo/*text", so "/echo/a/b%20c" answers "a/b%20c":
    further slashes are kept and nothing is decoded.
    """
    return ok(request.path_params.get("text", ""))


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """Reflect the User-Agent header (empty body, Content-Length: 0, if absent)."""
    return ok(request.user_agent)
