"""
=============================================================================
HTTP RESPONSE
=============================================================================

The response model and its wire format.

=============================================================================
WIRE FORMAT
=============================================================================

A found file:

    HTTP/1.1 200 Okay\r\n
    Content-length: 12\r\n
    Last-Modified: Friday, 01 March 2024 09:05:07 GMT\r\n
    Server: cihttp\r\n
    \r\n
    Hello World!                      ← omitted for HEAD

A missing file:

    HTTP/1.1 404 Not found\r\n
    Not Found                         ← 404.html, omitted for HEAD

The 404 form has no headers and no blank separator line. Clients that
care only look at the status line, and existing ones rely on the bytes
being exactly this.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from .status_codes import HTTPStatus


@dataclass
class HTTPResponse:
    """
    A response ready to be written to a connection.

    Attributes:
        status:    Status code.
        headers:   Ordered (name, value) pairs. Order is preserved on the wire.
        payload:   Bytes sent after the header text, or None for no payload.
        terminate_headers: Whether to end the header block with a blank line.
        version:   Protocol version echoed in the status line.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: List[Tuple[str, str]] = field(default_factory=list)
    payload: Optional[bytes] = None
    terminate_headers: bool = True
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 200 Okay"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def header_text(self) -> str:
        """
        Everything before the payload, exactly as sent.

        Each line ends with CRLF. With terminate_headers, an extra CRLF
        closes the block.
        """
        lines = [self.status_line]
        lines.extend(f"{name}: {value}" for name, value in self.headers)

        text = "".join(f"{line}\r\n" for line in lines)
        if self.terminate_headers:
            text += "\r\n"
        return text

    def get_header(self, name: str) -> Optional[str]:
        """First value of a header, compared case-insensitively."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None

    def without_payload(self) -> "HTTPResponse":
        """Same status and headers, no payload (HEAD)."""
        return HTTPResponse(
            status=self.status,
            headers=list(self.headers),
            payload=None,
            terminate_headers=self.terminate_headers,
            version=self.version,
        )

    def to_bytes(self) -> bytes:
        """Header text followed by the payload, if any."""
        data = self.header_text.encode("latin-1")
        if self.payload is not None:
            data += self.payload
        return data


# =============================================================================
# LAST-MODIFIED FORMAT
# =============================================================================

_WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday",
             "Friday", "Saturday", "Sunday"]

_MONTHS = ["January", "February", "March", "April", "May", "June", "July",
           "August", "September", "October", "November", "December"]


def format_last_modified(dt: datetime) -> str:
    """
    Format a timestamp for the Last-Modified header.

    Format: Weekday, DD Month YYYY HH:MM:SS GMT
    Example: Friday, 01 March 2024 09:05:07 GMT

    Weekday and month are spelled out in full. Day, hour, minute and second
    are zero-padded to two digits; the year is not padded.

    Args:
        dt: Timestamp to format. Should already be in UTC.
    """
    return (
        f"{_WEEKDAYS[dt.weekday()]}, "
        f"{dt.day:02d} {_MONTHS[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# CONVENIENCE CONSTRUCTORS
# =============================================================================

def error_response(status: HTTPStatus) -> HTTPResponse:
    """
    A bare status line and blank line, used to reject a request.

        HTTP/1.1 405 Method not allowed\r\n
        \r\n
    """
    return HTTPResponse(status=status)
