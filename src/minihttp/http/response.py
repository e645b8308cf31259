"""
=============================================================================
HTTP RESPONSE WRITER
=============================================================================

Builds HTTP/1.1 responses and serializes them to the exact bytes that go
on the wire.

=============================================================================
WIRE FORMAT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                  ◄── status line             │
    │    Content-Type: text/plain\r\n         ◄── one line per header     │
    │    Content-Length: 5\r\n                                             │
    │    \r\n                                 ◄── blank line, always      │
    │    hello                                ◄── body, no terminator     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Two rules hold for every response:

1. The blank line is always present, even with no headers and no body:
       b"HTTP/1.1 200 OK\r\n\r\n"
2. A non-empty body always carries Content-Length. Handlers usually set it
   themselves; to_bytes() fills it in if they forgot.

Nothing else is injected. No Date, no Server: the same response object
always serializes to the same bytes, which keeps responses for read-only
routes byte-identical across connections.

=============================================================================
BUILDER PATTERN
=============================================================================

    response = (ResponseBuilder()
        .status(HTTPStatus.OK)
        .text("hello")
        .build())

Each method returns self; build() produces the HTTPResponse.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from .status_codes import HTTPStatus


TEXT_PLAIN = "text/plain"
OCTET_STREAM = "application/octet-stream"

# surrogateescape mirrors the request decoder, so text taken from a request
# encodes back to the original bytes.
BODY_ENCODING = "utf-8"
BODY_ENCODING_ERRORS = "surrogateescape"


def _encode_body(body: Union[str, bytes]) -> bytes:
    if isinstance(body, str):
        return body.encode(BODY_ENCODING, errors=BODY_ENCODING_ERRORS)
    return body


@dataclass
class HTTPResponse:
    """
    An HTTP response, built by a handler and consumed once by the writer.

        HTTPResponse(status=HTTPStatus.OK,
                     headers={"Content-Type": "text/plain"},
                     body=b"hi")
                │
                │ to_bytes()
                ▼
        b"HTTP/1.1 200 OK\\r\\nContent-Type: text/plain\\r\\n"
        b"Content-Length: 2\\r\\n\\r\\nhi"
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)  # insertion-ordered
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """"HTTP/1.1 200 OK" and friends."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        self.headers[name] = value
        return self

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        self.body = _encode_body(body)
        return self

    def to_bytes(self) -> bytes:
        """
        Serialize to wire format.

        Headers are written in insertion order, which makes the output
        deterministic for a given response. The response's own headers
        dict is not modified.
        """
        response_headers = dict(self.headers)

        if self.body and "Content-Length" not in response_headers:
            response_headers["Content-Length"] = str(len(self.body))

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")

        # Trailing "" + "\r\n" gives the CRLF after the last header
        # followed by the bare CRLF separator.
        lines.append("")
        head = "\r\n".join(lines) + "\r\n"

        return head.encode(BODY_ENCODING, errors=BODY_ENCODING_ERRORS) + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

    Usage:
        ResponseBuilder().text("abc").build()
        ResponseBuilder().octet_stream(data).build()
        ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def headers(self, headers: Dict[str, str]) -> "ResponseBuilder":
        self._headers.update(headers)
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """
        Set the body and its Content-Length.

        Content-Length is only written for a non-empty body, matching
        the rule in to_bytes().
        """
        self._body = _encode_body(body)
        if self._body:
            self._headers["Content-Length"] = str(len(self._body))
        else:
            self._headers.pop("Content-Length", None)
        return self

    def text(self, text: str, content_type: str = TEXT_PLAIN) -> "ResponseBuilder":
        """
        Plain-text body.

        Content-Type and Content-Length are always both present, even for
        an empty string: /user-agent with no User-Agent header still
        answers "Content-Length: 0".
        """
        self.content_type(content_type)
        self.body(text)
        self._headers["Content-Length"] = str(len(self._body))
        return self

    def octet_stream(self, data: bytes) -> "ResponseBuilder":
        """Raw bytes served as application/octet-stream."""
        self.content_type(OCTET_STREAM)
        self._body = data
        self._headers["Content-Length"] = str(len(data))
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
        )

    def to_bytes(self) -> bytes:
        """Shortcut for build().to_bytes()."""
        return self.build().to_bytes()


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
# One-liners for the responses this server actually sends:
#
#     return ok()                   # 200, no headers, no body
#     return ok("abc")              # 200, text/plain, Content-Length: 3
#     return not_found()            # 404, no headers, no body
# =============================================================================

def ok(body: Union[str, bytes, None] = None, content_type: Optional[str] = None) -> HTTPResponse:
    """
    Create a 200 OK response.

    - None  → bare "HTTP/1.1 200 OK\\r\\n\\r\\n"
    - str   → text/plain (or content_type) with Content-Length
    - bytes → application/octet-stream (or content_type) with Content-Length
    """
    builder = ResponseBuilder().status(HTTPStatus.OK)

    if isinstance(body, str):
        builder.text(body, content_type or TEXT_PLAIN)
    elif isinstance(body, bytes):
        builder.octet_stream(body)
        if content_type:
            builder.content_type(content_type)

    return builder.build()


def not_found() -> HTTPResponse:
    """404 Not Found with an empty body and no headers."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()


def internal_error() -> HTTPResponse:
    """500 Internal Server Error with an empty body and no headers."""
    return ResponseBuilder().status(HTTPStatus.INTERNAL_SERVER_ERROR).build()
