"""
=============================================================================
URL ROUTER
=============================================================================

Maps a raw request path to exactly one handler.

=============================================================================
PATTERNS
=============================================================================

Two kinds of route pattern are supported:

    ┌───────────────────┬────────────────────┬─────────────────────────────┐
    │ Pattern           │ Matches            │ path_params                 │
    ├───────────────────┼────────────────────┼─────────────────────────────┤
    │ /user-agent       │ exactly that path  │ {}                          │
    │ /echo/*text       │ anything starting  │ {"text": rest of the path,  │
    │                   │ with "/echo/"      │  further slashes included}  │
    └───────────────────┴────────────────────┴─────────────────────────────┘

A wildcard is only allowed as the last segment. Paths are compared as raw
strings: no percent-decoding, no trailing-slash normalization, no "..".
"/echo" (no slash) does NOT match "/echo/*text".

=============================================================================
DISPATCH ORDER
=============================================================================

Routes are tried in registration order and the first match wins. The
HTTP method is never consulted; every route answers every method.

    "/"              ─► root
    "/echo/a/b"      ─► echo         text="a/b"
    "/user-agent"    ─► user_agent
    "/files/x.txt"   ─► files        filename="x.txt"
    "" or "/nope"    ─► not_found()  (404, empty)

=============================================================================
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional

from .request import HTTPRequest
from .response import HTTPResponse, not_found


logger = logging.getLogger(__name__)

# A handler takes a request and returns a response.
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """
    A registered route.

    pattern "/files/*filename" compiles to prefix="/files/",
    param="filename". A static pattern has param=None and matches only
    when the whole path equals prefix.
    """

    pattern: str
    handler: Handler
    name: Optional[str] = None
    prefix: str = field(default="", repr=False)
    param: Optional[str] = field(default=None, repr=False)

    def match(self, path: str) -> Optional[Dict[str, str]]:
        """Return captured params if path matches, else None."""
        if self.param is None:
            return {} if path == self.prefix else None
        if path.startswith(self.prefix):
            return {self.param: path[len(self.prefix):]}
        return None


@dataclass
class RouteMatch:
    """The route that matched plus the params it captured."""

    route: Route
    params: Dict[str, str]


class Router:
    """
    First-match-wins router over exact and prefix routes.

    Usage:
        router = Router()

        @router.route("/echo/*text")
        def echo(request):
            return ok(request.path_params["text"])

        response = router.handle(request)
    """

    def __init__(self):
        self._routes: List[Route] = []

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def add_route(
        self,
        pattern: str,
        handler: Handler,
        name: Optional[str] = None,
    ) -> Route:
        """
        Register a route.

        Args:
            pattern: "/exact/path" or "/prefix/*param"
            handler: Called with the request when the pattern matches
            name: Optional label, shown in logs

        Raises:
            ValueError: A "*" appears anywhere but the last segment, or the
                        pattern doesn't start with "/".
        """
        prefix, param = self._compile_pattern(pattern)
        route = Route(
            pattern=pattern,
            handler=handler,
            name=name or getattr(handler, "__name__", None),
            prefix=prefix,
            param=param,
        )
        self._routes.append(route)
        logger.debug(f"Registered route {pattern} → {route.name}")
        return route

    def route(self, pattern: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Decorator form of add_route(). Returns the handler unchanged."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(pattern, handler, name)
            return handler
        return decorator

    @staticmethod
    def _compile_pattern(pattern: str) -> tuple:
        """
        Split a pattern into (prefix, param).

            "/"                → ("/", None)
            "/user-agent"      → ("/user-agent", None)
            "/echo/*text"      → ("/echo/", "text")
            "/files/*"         → ("/files/", "wildcard")
        """
        if not pattern.startswith("/"):
            raise ValueError(f"Route pattern must start with '/': {pattern!r}")

        star = pattern.find("*")
        if star == -1:
            return pattern, None

        prefix, param = pattern[:star], pattern[star + 1:]
        if "/" in param or "*" in param or not prefix.endswith("/"):
            raise ValueError(f"Wildcard must be the last segment: {pattern!r}")
        return prefix, param or "wildcard"

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def match(self, path: str) -> Optional[RouteMatch]:
        """First route matching path, in registration order."""
        for route in self._routes:
            params = route.match(path)
            if params is not None:
                return RouteMatch(route=route, params=params)
        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its handler.

        The handler receives a copy of the request with path_params set;
        the original request object is left untouched.
        """
        result = self.match(request.path)
        if result is None:
            return not_found()

        return result.route.handler(replace(request, path_params=result.params))

    def routes(self) -> List[Route]:
        """All registered routes, in dispatch order."""
        return list(self._routes)
