"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket with the three operations the server
needs: read the request line, drain the headers, send the response.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

A client that sends

    GET /index.html HTTP/1.1\r\nHost: x\r\n\r\n

might arrive as one recv() or as several:

    recv() → "GET /ind"
    recv() → "ex.html HTTP/1.1\r\nHo"
    recv() → "st: x\r\n\r\n"

So we keep a buffer, and only cut a line out of it once its "\n" is there.
Whatever follows the cut stays in the buffer for the next read.

=============================================================================
READING THE REQUEST
=============================================================================

    read_request_line()
        Blocks (up to `timeout`, forever if None) until a full line is
        buffered. Returns it without the CRLF.

    drain_headers()
        Reads and discards header lines until the blank line that ends
        them. Draining is bounded twice over:

            max_header_bytes  - stop after this many header bytes
            header_timeout    - stop if the client goes quiet this long

        Hitting a bound just ends draining; the response still goes out.

=============================================================================
"""

import os
import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import uuid

from ..errors import (
    ConnectionClosedError,
    RequestLineTooLongError,
    RequestReadError,
)
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states. The state a connection closes from is logged."""
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


def _strip_terminator(line: bytes) -> bytes:
    if line.endswith(b"\r\n"):
        return line[:-2]
    if line.endswith(b"\n"):
        return line[:-1]
    return line


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier for logs.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
    """

    # Required parameters
    socket: socket.socket
    address: Tuple[str, int]

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    # Configuration (passed from ServerConfig)
    buffer_size: int = 4096
    timeout: Optional[float] = None
    max_request_line: int = 8192
    max_header_bytes: int = 64 * 1024
    header_timeout: float = 0.5

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else ""

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request_line(self) -> str:
        """
        Read the request line.

        Reads up to and including the first "\\n", strips a trailing
        "\\r\\n" (or bare "\\n") and decodes the rest with os.fsdecode.
        Bytes that are not valid UTF-8 become surrogate escapes, so the
        path encodes back to exactly the bytes the client sent when it
        reaches open().

        Returns:
            The request line without its terminator.

        Raises:
            ConnectionClosedError: Client closed before sending "\\n".
            RequestLineTooLongError: No "\\n" within max_request_line bytes.
            RequestReadError: Socket error or timeout.
        """
        self.state = ConnectionState.READING

        try:
            while b"\n" not in self._buffer:
                if len(self._buffer) >= self.max_request_line:
                    raise RequestLineTooLongError(
                        f"Request line exceeds {self.max_request_line} bytes"
                    )

                chunk = self.socket.recv(self.buffer_size)
                if not chunk:
                    raise ConnectionClosedError("Connection closed before request line")

                self._buffer += chunk
        except socket.timeout as e:
            raise RequestReadError("Timed out reading request line") from e
        except OSError as e:
            raise RequestReadError(f"Failed to read request line: {e}") from e

        line_end = self._buffer.index(b"\n") + 1
        if line_end > self.max_request_line:
            raise RequestLineTooLongError(
                f"Request line exceeds {self.max_request_line} bytes"
            )

        line, self._buffer = self._buffer[:line_end], self._buffer[line_end:]
        return os.fsdecode(_strip_terminator(line))

    def drain_headers(self) -> List[str]:
        """
        Read and discard the header lines that follow the request line.

        Stops at the blank line ending the headers, at end of stream, after
        max_header_bytes, or when nothing arrives for header_timeout
        seconds. None of these is an error.

        Returns:
            The header lines read, terminators stripped. For logging only.
        """
        headers: List[str] = []
        consumed = 0

        if self.max_header_bytes <= 0:
            return headers

        self.socket.settimeout(self.header_timeout)

        try:
            while consumed < self.max_header_bytes:
                while b"\n" not in self._buffer:
                    if consumed + len(self._buffer) >= self.max_header_bytes:
                        logger.debug(f"[{self.id}] Header limit reached, stop draining")
                        return headers

                    chunk = self.socket.recv(self.buffer_size)
                    if not chunk:
                        return headers

                    self._buffer += chunk

                line_end = self._buffer.index(b"\n") + 1
                raw, self._buffer = self._buffer[:line_end], self._buffer[line_end:]
                consumed += len(raw)

                header = _strip_terminator(raw).decode("latin-1")
                if not header:
                    break

                logger.debug(f"[{self.id}] {header}")
                headers.append(header)
        except socket.timeout:
            logger.debug(f"[{self.id}] No more header bytes within {self.header_timeout}s")
        except OSError as e:
            logger.debug(f"[{self.id}] Stopped draining headers: {e}")
        finally:
            self.socket.settimeout(self.timeout)

        return headers

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, response: HTTPResponse) -> bool:
        """
        Write the header text, then the payload bytes if there is a payload.

        Returns:
            True if everything was sent, False if the client went away.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(response.header_text.encode("latin-1"))
            if response.payload is not None:
                self.socket.sendall(response.payload)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        shutdown(SHUT_WR) sends FIN so the client sees end of response,
        then any bytes the client still sends are drained briefly so the
        kernel does not answer them with RST, then the socket is closed.
        """
        if self.state == ConnectionState.CLOSED:
            return

        closed_from = self.state
        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # Timeout or reset, closing anyway

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(
            f"[{self.id}] Connection closed from {closed_from.value} after {self.age:.3f}s"
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
