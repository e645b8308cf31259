"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Everything the server reads at startup, in one dataclass. Loaded once,
never modified while the server is running.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line flags                                             │
    │      └── python -m minihttp --directory /tmp/files                  │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── MINIHTTP_DIRECTORY=/tmp/files python -m minihttp           │
    │                                                                      │
    │   3. Defaults (in this dataclass)                                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The CLI builds its argparse defaults from ServerConfig.from_env(), so an
explicit flag always beats the environment.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    Development:
        ServerConfig(host="127.0.0.1", directory="./files", log_level="DEBUG")

    Hardened (slow clients get cut off after 10s):
        ServerConfig(timeout=10.0)
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """Address to bind. 0.0.0.0 listens on every interface."""

    port: int = 4221
    """TCP port. 0 asks the OS for a free one (used by tests)."""

    backlog: int = 128
    """Pending-connection queue length passed to listen()."""

    buffer_size: int = 8192
    """Read buffer for each connection's stream reader."""

    timeout: Optional[float] = None
    """
    Per-connection socket timeout in seconds.
    None = block forever: a client that never finishes its headers holds
    its thread indefinitely. Set it to bound that.
    """

    max_request_size: int = 64 * 1024
    """Upper bound for request line + headers. Larger heads are dropped."""

    # ─────────────────────────────────────────────────────────────────────
    # FILE SERVING
    # ─────────────────────────────────────────────────────────────────────

    directory: Optional[str] = None
    """
    Base directory for /files/<name>.
    None disables the route: every /files/ request answers 404.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    log_format: str = "text"
    """Access log format: 'text' (one line) or 'json' (one object)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Build a config from environment variables.

            MINIHTTP_HOST        bind address      (default: 0.0.0.0)
            MINIHTTP_PORT        port              (default: 4221)
            MINIHTTP_DIRECTORY   files directory   (default: unset)
            MINIHTTP_TIMEOUT     socket timeout s  (default: unset)
            MINIHTTP_LOG_LEVEL   logging level     (default: INFO)
        """
        timeout = os.getenv("MINIHTTP_TIMEOUT")
        return cls(
            host=os.getenv("MINIHTTP_HOST", "0.0.0.0"),
            port=int(os.getenv("MINIHTTP_PORT", "4221")),
            directory=os.getenv("MINIHTTP_DIRECTORY") or None,
            timeout=float(timeout) if timeout else None,
            log_level=os.getenv("MINIHTTP_LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> None:
        """
        Fail fast on nonsense values.

        Called by HTTPServer.__init__ so a bad config never reaches bind().
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_request_size < 1024:
            raise ValueError("max_request_size must be >= 1024")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log_level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {LOG_FORMATS}")
