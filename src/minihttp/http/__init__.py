"""
=============================================================================
HTTP PROTOCOL MODULE
=============================================================================

The protocol layer: everything that knows what HTTP bytes look like.

    request.py       bytes → HTTPRequest       (Request Reader)
    response.py      HTTPResponse → bytes      (Response Writer)
    router.py        path → handler            (Router/Dispatcher)
    status_codes.py  HTTPStatus + reason phrases

Nothing in here touches sockets; see minihttp.core for that.
=============================================================================
"""

from .status_codes import HTTPStatus
from .request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    IncompleteRequestError,
    parse_request,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,
    not_found,
    internal_error,
)
from .router import Router, Route, RouteMatch, Handler

__all__ = [
    "HTTPStatus",
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "IncompleteRequestError",
    "parse_request",
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "not_found",
    "internal_error",
    "Router",
    "Route",
    "RouteMatch",
    "Handler",
]
