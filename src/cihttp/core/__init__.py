"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

    SocketServer   Owns the listening socket, accepts clients
    Connection     One client socket: read line, drain headers, send, close

    ┌──────────────┐  accept()   ┌──────────────┐   handler(conn)
    │ SocketServer │ ──────────► │  Connection  │ ─────────────────► HTTPServer
    └──────────────┘             └──────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
]
