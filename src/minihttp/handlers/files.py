"""
=============================================================================
FILE HANDLER
=============================================================================

Serves /files/<name> from a configured base directory, read-only.

=============================================================================
OUTCOMES
=============================================================================

    ┌──────────────────────────────────────────┬──────────────────────────┐
    │ Situation                                │ Response                 │
    ├──────────────────────────────────────────┼──────────────────────────┤
    │ no base directory configured             │ 404, empty               │
    │ resolved path escapes the base directory │ 404, empty (+ warning)   │
    │ unresolvable: NUL byte, symlink loop     │ 404, empty (+ warning)   │
    │ open() fails: missing, EACCES, a dir...  │ 404, empty               │
    │ open() ok, read comes back short / fails │ 500, empty               │
    │ open() ok, read ok                       │ 200, octet-stream body   │
    └──────────────────────────────────────────┴──────────────────────────┘

"Missing" and "can't open" are deliberately the same answer. 500 is kept
for the case where we already had the file open and still couldn't
deliver it.

=============================================================================
PATH TRAVERSAL
=============================================================================

The filename is the raw path suffix, so a client can ask for
"/files/../../etc/passwd". We join it with the base directory, resolve()
the result (collapsing ".." and following symlinks) and require the
result to still be inside the resolved base:

    base      = /srv/files
    request   = /files/../../etc/passwd
    resolved  = /etc/passwd        → not under /srv/files → 404

An escape answers 404 rather than 403 so a client can't tell "exists
outside the root" from "doesn't exist".

=============================================================================
"""

import logging
import os
from pathlib import Path
from typing import Optional

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder, internal_error, not_found


logger = logging.getLogger(__name__)


class ShortReadError(OSError):
    """The file delivered fewer bytes than fstat() promised."""


class FileHandler:
    """
    Read-only file server for one base directory.

    Usage:
        files = FileHandler("/srv/files")
        router.add_route("/files/*filename", files.handle)

        FileHandler(None).handle(request)   # always 404
    """

    def __init__(self, directory: Optional[str] = None):
        """
        Args:
            directory: Base directory. None (or "") disables the route.
                       The directory is resolved once here; it need not
                       exist yet, requests simply 404 until it does.
        """
        self.directory: Optional[Path] = Path(directory).resolve() if directory else None

    @property
    def enabled(self) -> bool:
        return self.directory is not None

    def resolve(self, filename: str) -> Optional[Path]:
        """
        Map a requested filename to a path inside the base directory.

        Returns None when no directory is configured, when the resolved
        path would fall outside it, or when the name can't be a path at all
        (an embedded NUL byte, or a symlink loop).
        """
        if self.directory is None:
            return None

        try:
            candidate = (self.directory / filename).resolve()
        except (ValueError, RuntimeError, OSError) as e:
            # NUL byte (ValueError), symlink loop (RuntimeError on 3.10-3.12)
            logger.warning(f"Rejected unresolvable file path {filename!r}: {e}")
            return None

        try:
            candidate.relative_to(self.directory)
        except ValueError:
            logger.warning(f"Rejected file path outside base directory: {filename!r}")
            return None
        return candidate

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        filename = request.path_params.get("filename", "")

        path = self.resolve(filename)
        if path is None:
            return not_found()

        try:
            f = open(path, "rb")
        except (OSError, ValueError) as e:
            logger.debug(f"Cannot open {path}: {e}")
            return not_found()

        with f:
            try:
                content = self._read_all(f)
            except OSError as e:
                logger.error(f"Error reading file {path}: {e}")
                return internal_error()

        return ResponseBuilder().octet_stream(content).build()

    @staticmethod
    def _read_all(f) -> bytes:
        """
        Read exactly as many bytes as fstat() reports.

        A file that shrinks between stat and read raises ShortReadError; a
        file that grows is cut at the size we saw, so Content-Length and body
        always agree.
        """
        size = os.fstat(f.fileno()).st_size
        content = f.read(size)
        if len(content) != size:
            raise ShortReadError(f"expected {size} bytes, got {len(content)}")
        return content


def serve_files(directory: Optional[str]) -> FileHandler:
    """Factory for FileHandler, mirroring how routes are wired in create_app()."""
    return FileHandler(directory)
