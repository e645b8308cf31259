"""
=============================================================================
HANDLERS MODULE
=============================================================================

The four route handlers. A handler takes an HTTPRequest and returns an
HTTPResponse; it never touches the socket.

    ┌──────────────────────┬───────────────────┬──────────────────────────┐
    │ Route                │ Handler           │ Kind                     │
    ├──────────────────────┼───────────────────┼──────────────────────────┤
    │ /                    │ root              │ function                 │
    │ /echo/*text          │ echo              │ function                 │
    │ /user-agent          │ user_agent        │ function                 │
    │ /files/*filename     │ FileHandler.handle│ class (holds base dir)   │
    └──────────────────────┴───────────────────┴──────────────────────────┘

=============================================================================
"""

from .basic import root, echo, user_agent
from .files import FileHandler, ShortReadError, serve_files

__all__ = [
    "root",
    "echo",
    "user_agent",
    "FileHandler",
    "ShortReadError",
    "serve_files",
]
