"""
=============================================================================
CORE NETWORKING MODULE
=============================================================================

Socket-level building blocks; no HTTP knowledge lives here.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer          Connection                                  │
    │   ────────────          ──────────                                  │
    │   bind / listen         buffered reader (readline)                  │
    │   accept loop   ──────► one sendall() per response                  │
    │   shutdown              close on every exit path                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .connection import Connection, ConnectionState
from .socket_server import SocketServer

__all__ = ["SocketServer", "Connection", "ConnectionState"]
