"""
=============================================================================
HTTP REQUEST READER
=============================================================================

Reads one HTTP/1.1 request head (request line + header block) from a
buffered byte stream and turns it into an immutable HTTPRequest.

=============================================================================
WHAT WE READ (AND WHAT WE DON'T)
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    GET /echo/abc HTTP/1.1\r\n      ◄── request line                 │
    │    ─┬─ ────┬──── ────┬────                                          │
    │   Method  Path     Version                                          │
    │                                                                      │
    │    Host: localhost:4221\r\n        ◄── header block                 │
    │    User-Agent: curl/8.4.0\r\n                                        │
    │    \r\n                            ◄── end-of-headers marker        │
    │                                                                      │
    │    (body)                          ◄── never read                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

No supported route needs a body, so we stop at the blank line. Whatever
the client sent after it is discarded when the connection closes.

=============================================================================
LENIENCY RULES
=============================================================================

The reader is deliberately forgiving about content and strict about framing:

    Request line with < 2 tokens    → path = ""  (router turns it into 404)
    Header line without a colon     → skipped
    Duplicate header name           → last value wins
    Unknown / lowercase method      → accepted as-is (routing ignores it)
    Percent-escapes in the path     → left untouched ("/echo/a%20b")

    Line without a trailing \\n      → IncompleteRequestError
    (client closed mid-request)       (connection dropped, no response)

=============================================================================
WHY A STREAM AND NOT A BYTE BLOB?
=============================================================================

Reading line by line from socket.makefile("rb") means the only blocking
points are "wait for the next line". We never need to guess how much to
recv() or scan a growing buffer for \\r\\n\\r\\n.

=============================================================================
"""

import io
from dataclasses import dataclass, field
from typing import BinaryIO, Dict


# Request text is decoded with surrogateescape so that any byte sequence the
# client sends survives a decode/encode round trip unchanged. This is what
# lets /echo/ return the exact bytes it was given.
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"

END_OF_HEADERS = b"\r\n"


class HTTPParseError(Exception):
    """
    Raised when a request head cannot be read.

    Unlike a typical web framework we never answer these with 400: the
    connection is simply closed. The exception exists so the server can tell
    "client sent garbage / went away" apart from a genuine bug.
    """


class IncompleteRequestError(HTTPParseError):
    """The stream ended before the end-of-headers marker."""


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request head.

    Frozen: built once per connection and never mutated. The router hands
    handlers a copy with path_params filled in (dataclasses.replace) rather
    than writing into this object.

    Attributes:
        method:         First request-line token, unvalidated ("GET", "FOO")
        path:           Second token, verbatim. "" for a malformed line.
        version:        Third token if present ("HTTP/1.1"), else ""
        headers:        lowercase name → trimmed value
        path_params:    Wildcard captures from the matched route
        client_address: (ip, port) of the peer, for logging
    """

    method: str
    path: str
    version: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    path_params: Dict[str, str] = field(default_factory=dict)
    client_address: tuple = ("", 0)

    @property
    def user_agent(self) -> str:
        """User-Agent header value, or "" when the client sent none."""
        return self.headers.get("user-agent", "")

    def get_header(self, name: str, default: str = "") -> str:
        """
        Case-insensitive header lookup.

        Works because names are lower-cased at parse time:

            request.get_header("User-Agent") == request.headers["user-agent"]
        """
        return self.headers.get(name.lower(), default)


class RequestParser:
    """
    Reads HTTPRequest objects from buffered binary streams.

    ==========================================================================
    PARSER FLOW
    ==========================================================================

        stream.readline()
              │
              ▼
        ┌─────────────────────────────┐
        │ 1. request line             │──► method, path, version
        └─────────────────────────────┘
              │
              ▼
        ┌─────────────────────────────┐
        │ 2. header lines             │──► headers{}  (until b"\\r\\n")
        └─────────────────────────────┘
              │
              ▼
        HTTPRequest(frozen)

    Every readline() is bounded by the bytes still allowed under
    max_request_size, so a client streaming an endless header cannot grow
    our memory without limit.

    ==========================================================================
    """

    def __init__(self, max_request_size: int = 64 * 1024):
        """
        Args:
            max_request_size: Upper bound in bytes for request line plus
                              header block. Exceeding it raises
                              HTTPParseError.
        """
        self.max_request_size = max_request_size

    def read(
        self,
        stream: BinaryIO,
        client_address: tuple = ("", 0),
    ) -> HTTPRequest:
        """
        Read one request head from a buffered binary stream.

        Args:
            stream: Anything with readline(limit), e.g. socket.makefile("rb").
            client_address: Peer (ip, port), carried into the request.

        Returns:
            The parsed HTTPRequest.

        Raises:
            IncompleteRequestError: Stream ended before the blank line.
            HTTPParseError: Head is larger than max_request_size.
            OSError: Propagated from the underlying socket (reset, timeout).
        """
        budget = self.max_request_size

        line = self._readline(stream, budget)
        budget -= len(line)
        method, path, version = self.parse_request_line(self._decode(line))

        headers: Dict[str, str] = {}
        while True:
            line = self._readline(stream, budget)
            budget -= len(line)
            if line == END_OF_HEADERS:
                break
            self.parse_header_line(self._decode(line), headers)

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            client_address=client_address,
        )

    def _readline(self, stream: BinaryIO, budget: int) -> bytes:
        """
        Read one \\n-terminated line without exceeding the byte budget.

        readline(limit) returns early when it hits the limit, so a line
        that comes back without \\n is either "stream ended" or "too big".
        """
        if budget <= 0:
            raise HTTPParseError(
                f"Request head exceeds {self.max_request_size} bytes"
            )

        line = stream.readline(budget)
        if line.endswith(b"\n"):
            return line

        if len(line) >= budget:
            raise HTTPParseError(
                f"Request head exceeds {self.max_request_size} bytes"
            )
        if not line:
            raise IncompleteRequestError("Connection closed before end of headers")
        raise IncompleteRequestError(f"Connection closed mid-line: {line!r}")

    @staticmethod
    def _decode(line: bytes) -> str:
        return line.decode(ENCODING, errors=ENCODING_ERRORS)

    @staticmethod
    def parse_request_line(line: str) -> tuple:
        """
        Split a request line into (method, path, version).

        Tokens are separated by single spaces, so "GET  /x" (two spaces)
        yields an empty path, exactly like any other malformed line.

            "GET /echo/a HTTP/1.1"  → ("GET", "/echo/a", "HTTP/1.1")
            "GET /"                 → ("GET", "/", "")
            "GET"                   → ("GET", "", "")
            ""                      → ("", "", "")
        """
        parts = line.strip().split(" ")
        if len(parts) < 2:
            return parts[0], "", ""

        method, path = parts[0], parts[1]
        version = parts[2] if len(parts) > 2 else ""
        return method, path, version

    @staticmethod
    def parse_header_line(line: str, headers: Dict[str, str]) -> None:
        """
        Parse "Name: value" into headers (in place).

        Splits on the FIRST colon only, so values may contain colons
        ("Host: localhost:4221"). Name is trimmed and lower-cased, value is
        trimmed. A later duplicate overwrites an earlier one.
        """
        line = line.strip()
        name, sep, value = line.partition(":")
        if not sep:
            return  # not a header, skip

        headers[name.strip().lower()] = value.strip()


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(
    data: bytes,
    client_address: tuple = ("", 0),
    max_size: int = 64 * 1024,
) -> HTTPRequest:
    """
    Parse a complete request head held in memory.

    Handy in tests and tools; the server itself reads from the socket
    stream through RequestParser.read().
    """
    parser = RequestParser(max_request_size=max_size)
    return parser.read(io.BytesIO(data), client_address)
