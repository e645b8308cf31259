"""
=============================================================================
ACCESS LOGGING MIDDLEWARE
=============================================================================

One log record per handled request, on the "minihttp.access" logger.

Two formats:

    text   127.0.0.1 - - [17/Oct/2026:10:00:00 +0000] "GET /echo/abc HTTP/1.1" 200 3 0.21ms
    json   {"request_id": "1f2e3d4c", "method": "GET", "path": "/echo/abc", ...}

The middleware only observes: it never adds headers or touches the body,
so the bytes on the wire are exactly what the handler produced.

Route it like any other logger:

    logging.getLogger("minihttp.access").addHandler(file_handler)

=============================================================================
"""

import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass
from typing import Optional

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("minihttp.access")


@dataclass
class RequestLog:
    """One access-log entry."""

    request_id: str
    method: str
    path: str
    version: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        """Apache-style access line."""
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.path} {self.version}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Request logging middleware.

    Add it first so it times the whole chain and sees every request:

        server.use(LoggingMiddleware(log_format="json"))

    Args:
        log_format: "text" or "json".
        log_level: Level for successful requests. 4xx/5xx are logged at
                   WARNING at least, so they survive a quieter level.
        skip_paths: Exact paths not worth logging (e.g. ["/"] when a
                    load balancer polls it).
    """

    def __init__(
        self,
        log_format: str = "text",
        log_level: int = logging.INFO,
        skip_paths: Optional[list] = None,
    ):
        self.log_format = log_format
        self.log_level = log_level
        self.skip_paths = set(skip_paths or [])

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        request_id = str(uuid.uuid4())[:8]
        start_time = time.perf_counter()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"[{request_id}] Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000

        if request.path in self.skip_paths:
            return response

        entry = RequestLog(
            request_id=request_id,
            method=request.method or "-",
            path=request.path or "-",
            version=request.version or "-",
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        level = self.log_level
        if response.status.is_error:
            level = max(level, logging.WARNING)

        if self.log_format == "json":
            logger.log(level, json.dumps(entry.to_dict()))
        else:
            logger.log(level, entry.to_text())

        return response
