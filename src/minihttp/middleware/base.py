"""
=============================================================================
MIDDLEWARE BASE CLASSES
=============================================================================

Middleware wraps the router so cross-cutting work (today: access logging)
stays out of the handlers.

=============================================================================
CHAIN OF RESPONSIBILITY
=============================================================================

    request ──► [ Middleware A ] ──► [ Middleware B ] ──► router.handle
                      │                     │                   │
    response ◄────────┴─────────────────────┴───────────────────┘

Each middleware receives the request and a `next` callable. It may look at
the request, call next(request), look at the response, and return it.

    class Timing(Middleware):
        def __call__(self, request, next):
            start = time.perf_counter()
            response = next(request)
            log(time.perf_counter() - start)
            return response

First added = outermost.

=============================================================================
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, List

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)

# The next middleware in the chain, or the router at the end of it.
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Base class for middleware.

    Subclasses implement __call__(request, next) and must call next(request)
    unless they deliberately answer the request themselves.
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        pass

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Ordered list of middleware that can wrap a final handler.

        pipeline = MiddlewarePipeline()
        pipeline.add(LoggingMiddleware())
        handler = pipeline.wrap(router.handle)
        response = handler(request)
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def __len__(self) -> int:
        return len(self._middleware)

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Build the chain around handler.

        Wrapping happens in reverse so the first middleware added ends up
        outermost: [A, B] + h → A(B(h)).
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)
        return current

    @staticmethod
    def _create_wrapped_handler(middleware: Middleware, next_handler: NextHandler) -> NextHandler:
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)
        return wrapped
