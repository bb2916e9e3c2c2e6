"""
=============================================================================
REQUEST LINE PARSER
=============================================================================

Turns the first line of an HTTP request into an HTTPRequest.

Only the request line matters to this server. Header lines are drained from
the socket by Connection and never interpreted.

=============================================================================
REQUEST LINE ANATOMY
=============================================================================

    GET /index.html HTTP/1.1\r\n
    ─┬─ ─────┬───── ────┬───
     │       │          │
   Method   Path     Version (ignored)

The line is split on single spaces, exactly like str.split(" "). That means
two spaces in a row produce an empty token, and a line with no space at all
is a single token.

=============================================================================
VALIDATION
=============================================================================

    tokens < 2                  →  RequestParseError(400)
    method not GET and not HEAD →  RequestParseError(405)

The method comparison is case-sensitive: "get" is rejected.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import List, Tuple

from ..errors import RequestParseError
from .status_codes import HTTPStatus


@dataclass
class HTTPRequest:
    """
    A parsed request.

    Attributes:
        method:         "GET" or "HEAD".
        path:           Raw target as sent, leading "/" included.
        version:        Third token of the request line, or "" if absent.
                        Never used for anything but logging.
        client_address: (ip, port) of the client.
        headers:        Header lines drained after the request line.
                        Kept for logging only.
    """

    method: str
    path: str
    version: str = ""
    client_address: Tuple[str, int] = ("", 0)
    headers: List[str] = field(default_factory=list)

    @property
    def is_head(self) -> bool:
        """HEAD responses carry no payload."""
        return self.method == "HEAD"

    @property
    def request_line(self) -> str:
        """The request line, rebuilt for access logs."""
        return " ".join(part for part in (self.method, self.path, self.version) if part)


class RequestParser:
    """
    Parses request lines into HTTPRequest objects.

    Usage:
        parser = RequestParser()
        request = parser.parse("GET /index.html HTTP/1.1")
    """

    SUPPORTED_METHODS = ("GET", "HEAD")

    def parse(self, line: str, client_address: Tuple[str, int] = ("", 0)) -> HTTPRequest:
        """
        Parse a request line with its terminator already stripped.

        Args:
            line: e.g. "GET /index.html HTTP/1.1"
            client_address: Client's (ip, port) tuple for logging.

        Returns:
            Parsed HTTPRequest.

        Raises:
            RequestParseError: too few tokens (400) or unsupported method (405).
        """
        parts = line.split(" ")

        if len(parts) < 2:
            raise RequestParseError(
                f"Too few request line tokens: {line!r}",
                status_code=HTTPStatus.BAD_REQUEST,
            )

        method, path = parts[0], parts[1]

        if method not in self.SUPPORTED_METHODS:
            raise RequestParseError(
                f"Unsupported method: {method!r}",
                status_code=HTTPStatus.METHOD_NOT_ALLOWED,
            )

        version = parts[2] if len(parts) > 2 else ""

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            client_address=client_address,
        )


def parse_request_line(line: str, client_address: Tuple[str, int] = ("", 0)) -> HTTPRequest:
    """Convenience wrapper around RequestParser().parse()."""
    return RequestParser().parse(line, client_address)
