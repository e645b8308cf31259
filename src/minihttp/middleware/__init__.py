"""
Middleware for the request pipeline.

    from minihttp.middleware import LoggingMiddleware
    server.use(LoggingMiddleware())
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
]
