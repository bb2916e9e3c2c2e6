"""
=============================================================================
CIHTTP - Minimal GET/HEAD File Server
=============================================================================

Serves files from a content root over plain TCP sockets. One request per
connection, GET and HEAD only.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          ONE CONNECTION                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   accept ──► request line ──► drain headers ──► parse               │
    │                                                    │                 │
    │                    close ◄── send ◄── respond ◄────┘                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    cihttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m cihttp)
    ├── server.py            # HTTPServer: per-connection flow
    ├── config.py            # ServerConfig dataclass
    ├── errors.py            # Fatal vs per-connection errors
    ├── core/
    │   ├── socket_server.py # Listening socket, accept loop, signals
    │   └── connection.py    # Client socket: read line, drain, send
    ├── http/
    │   ├── request.py       # Request line parsing
    │   ├── response.py      # Response model, Last-Modified format
    │   └── status_codes.py  # The four status lines
    └── handlers/
        └── files.py         # Path → file → 200/404 response

=============================================================================
QUICK START
=============================================================================

    from cihttp import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(port=8080, content_root="www"))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "__version__"]
