"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The handful of status codes this server can actually send, as an IntEnum
that also knows its reason phrase.

=============================================================================
WHY SO FEW?
=============================================================================

The route table is fixed, and every outcome maps onto one of three codes:

    ┌──────┬───────────────────────┬──────────────────────────────────────┐
    │ Code │ Phrase                │ Sent when                            │
    ├──────┼───────────────────────┼──────────────────────────────────────┤
    │ 200  │ OK                    │ /, /echo/*, /user-agent, found file  │
    │ 404  │ Not Found             │ unknown path, missing/unsafe file    │
    │ 500  │ Internal Server Error │ file vanished mid-read, handler bug  │
    └──────┴───────────────────────┴──────────────────────────────────────┘

Anything else would be a code path that nothing exercises.

=============================================================================
STATUS LINE ANATOMY
=============================================================================

    HTTP/1.1 404 Not Found
    ──┬───── ─┬─ ────┬────
      │       │      └── Reason phrase  (HTTPStatus.phrase)
      │       └───────── Status code    (int(HTTPStatus))
      └───────────────── Protocol version

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the server.

    IntEnum means members compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> str(HTTPStatus.NOT_FOUND.value)
        '404'
    """

    OK = 200
    NOT_FOUND = 404
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line ("OK", "Not Found", ...)."""
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_error(self) -> bool:
        """4xx or 5xx. Used by the access log to pick a level."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
