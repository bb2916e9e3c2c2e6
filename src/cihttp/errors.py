"""
=============================================================================
ERROR TYPES
=============================================================================

Every failure the server knows about has its own exception class, and the
class decides how far the failure reaches:

    ┌─────────────────────────────────────────────────────────────────────────┐
    │                           ERROR TAXONOMY                                │
    ├──────────────────────────────┬──────────────────────────────────────────┤
    │  FatalServerError            │  The whole process stops (exit 1)        │
    │    BindError                 │  listening socket could not be bound     │
    │    AcceptError               │  accept() failed while running           │
    │    FallbackMissingError      │  404.html itself cannot be read          │
    ├──────────────────────────────┼──────────────────────────────────────────┤
    │  RequestError                │  Only this connection is affected        │
    │    RequestReadError          │  socket error or timeout on request line │
    │    ConnectionClosedError     │  client hung up before a full line       │
    │    RequestLineTooLongError   │  no terminator within the size bound     │
    │    RequestParseError         │  too few tokens or unsupported method    │
    └──────────────────────────────┴──────────────────────────────────────────┘

A missing target file is not an error at all: it is a 404 response.

With ServerConfig.fail_fast, RequestError is escalated to a fatal error by
the server, which is the classic behavior.

=============================================================================
"""

from typing import Optional


class CIHTTPError(Exception):
    """Base class for all cihttp errors."""


# =============================================================================
# PROCESS-WIDE FAILURES
# =============================================================================

class FatalServerError(CIHTTPError):
    """
    An error that terminates the whole server.

    HTTPServer.run() re-raises these after shutting down; the CLI turns
    them into exit status 1.
    """


class BindError(FatalServerError):
    """The listening socket could not be bound."""

    def __init__(self, host: str, port: int, reason: OSError):
        super().__init__(f"Failed to bind to {host or '*'}:{port}: {reason}")
        self.host = host
        self.port = port
        self.reason = reason


class AcceptError(FatalServerError):
    """accept() failed on the listening socket."""


class FallbackMissingError(FatalServerError):
    """The fallback page needed for a 404 response could not be read."""

    def __init__(self, path: str, reason: OSError):
        super().__init__(f"Fallback file {path} is unreadable: {reason}")
        self.path = path
        self.reason = reason


class RequestEscalatedError(FatalServerError):
    """A per-connection error promoted to fatal because of fail_fast."""

    def __init__(self, cause: "RequestError"):
        super().__init__(str(cause))
        self.cause = cause


# =============================================================================
# PER-CONNECTION FAILURES
# =============================================================================

class RequestError(CIHTTPError):
    """
    A problem with one client's request.

    status_code is the HTTP status to answer with, or None when the
    connection should simply be closed without a response.
    """

    status_code: Optional[int] = None


class RequestReadError(RequestError):
    """Reading the request line failed (socket error or timeout)."""


class ConnectionClosedError(RequestReadError):
    """The client closed the connection before sending a full line."""


class RequestLineTooLongError(RequestReadError):
    """No line terminator arrived within max_request_line bytes."""


class RequestParseError(RequestError):
    """
    The request line could not be turned into a request.

        400 Bad Request         - fewer than two tokens
        405 Method Not Allowed  - method is not GET or HEAD
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code
