"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the cihttp file server.

The defaults ARE the classic behavior: port 8080 on all interfaces, files
served from ./www, 404.html as the fallback page. Running the server with no
arguments and no environment variables reproduces that exactly. Everything
else here is an optional override.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m cihttp --port 3000                              │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── CIHTTP_PORT=3000 python -m cihttp                         │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ERROR MODES
=============================================================================

    fail_fast=False (default)
        A malformed request only costs its own connection. The client
        gets a bare 400/405 status line and the accept loop keeps going.

    fail_fast=True (legacy)
        A malformed or unreadable request brings the whole process down
        with exit status 1, and nothing is sent to the client.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_PORT = 8080
DEFAULT_CONTENT_ROOT = "www"
DEFAULT_FALLBACK_FILE = "404.html"
SERVER_NAME = "cihttp"


@dataclass
class ServerConfig:
    """
    Configuration for the file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    REQUEST READING
    - max_request_line, max_header_bytes, header_timeout

    BEHAVIOR
    - concurrent, fail_fast, shutdown_timeout

    CONTENT
    - content_root, fallback_file

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = ""
    """
    The IP address to bind to.
    "" binds every interface, like listening on ":8080".
    """

    port: int = DEFAULT_PORT
    """
    The port number to listen on. 0 lets the OS pick one (tests).
    """

    backlog: int = 128
    """Maximum number of queued connections."""

    buffer_size: int = 4096
    """Size of each recv() call in bytes."""

    timeout: Optional[float] = None
    """
    Socket timeout for reading the request line, in seconds.
    None = blocking. A client that never finishes its request line
    holds its connection forever; in serial mode it holds the server.
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST READING
    # ─────────────────────────────────────────────────────────────────────

    max_request_line: int = 8192
    """Longest request line accepted, terminator included."""

    max_header_bytes: int = 64 * 1024
    """
    Upper bound on header bytes drained after the request line.
    Headers are never interpreted, only read and thrown away.
    """

    header_timeout: float = 0.5
    """
    How long to wait for more header bytes before giving up on draining.
    """

    # ─────────────────────────────────────────────────────────────────────
    # BEHAVIOR
    # ─────────────────────────────────────────────────────────────────────

    concurrent: bool = True
    """
    Handle each connection on its own thread.
    False = one connection at a time, fully handled before the next accept.
    """

    fail_fast: bool = False
    """Treat malformed or unreadable requests as fatal for the process."""

    shutdown_timeout: float = 5.0
    """
    How long run() waits, after the accept loop stops, for in-flight
    worker threads to finish sending. Workers still running after that
    are daemon threads and die with the process.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    content_root: str = DEFAULT_CONTENT_ROOT
    """Directory files are served from, relative to the working directory."""

    fallback_file: str = DEFAULT_FALLBACK_FILE
    """Page sent (for GET) when the requested file cannot be read."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    INFO gives one access line per request. The raw request line and each
    header line the client sent are logged at DEBUG only.
    """

    server_name: str = SERVER_NAME
    """Value of the Server header on 200 responses."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        CIHTTP_HOST       Bind address (default: all interfaces)
        CIHTTP_PORT       Port (default: 8080)
        CIHTTP_ROOT       Content root (default: www)
        CIHTTP_TIMEOUT    Request line read timeout in seconds (default: none)
        CIHTTP_LOG_LEVEL  Logging level (default: INFO)

        =====================================================================
        """
        timeout = os.getenv("CIHTTP_TIMEOUT")
        return cls(
            host=os.getenv("CIHTTP_HOST", ""),
            port=int(os.getenv("CIHTTP_PORT", str(DEFAULT_PORT))),
            content_root=os.getenv("CIHTTP_ROOT", DEFAULT_CONTENT_ROOT),
            timeout=float(timeout) if timeout else None,
            log_level=os.getenv("CIHTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called at server construction so a bad value is caught before
        anything binds.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.header_timeout <= 0:
            raise ValueError("header_timeout must be > 0")

        if self.shutdown_timeout < 0:
            raise ValueError("shutdown_timeout must be >= 0")

        if self.max_request_line < 16:
            raise ValueError("max_request_line must be >= 16")

        if self.max_header_bytes < 0:
            raise ValueError("max_header_bytes must be >= 0")

        if not self.content_root:
            raise ValueError("content_root must not be empty")
