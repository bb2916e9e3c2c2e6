"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket: bind, listen, accept, hand each client off.

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. socket()    Create a TCP socket
    2. bind()      Reserve HOST:PORT          ── failure → BindError (fatal)
    3. listen()    Start queueing connections
    4. accept()    Wait for a client          ── failure → AcceptError (fatal)
                   └─ returns a NEW socket just for that client
    5. close()     Release the listening socket on shutdown

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── Created once at startup
                    │   bound to *:8080     │     Never sends/receives data
                    └───────────┬───────────┘
                                │ accept()
                                ▼
                    ┌───────────────────────┐
                    │   Connection          │ ◄── One per client, handed to
                    │   (client socket)     │     the connection handler
                    └───────────────────────┘

=============================================================================
SHUTDOWN
=============================================================================

accept() runs with a 1 second timeout so the loop can notice shutdown()
being called from a signal handler or another thread. SIGINT and SIGTERM
both trigger a graceful shutdown, which is how the server exits with
status 0. Signal handlers can only be installed from the main thread; a
server started on any other thread (tests) skips them.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from ..errors import AcceptError, BindError
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            with conn:
                ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    ACCEPT_POLL_INTERVAL = 1.0

    def __init__(self, config: ServerConfig):
        """
        Args:
            config: Server configuration (host, port, backlog, read limits).

        The socket is created in start(), not here.
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False
        self._bound_address: Optional[Tuple[str, int]] = None

        # Set once listen() succeeded; cleared again on shutdown
        self._ready_event = threading.Event()
        self._shutdown_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The address actually bound, or the configured one before start().

        With port=0 this is where the OS-assigned port shows up.
        """
        if self._bound_address is not None:
            return self._bound_address
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restarting right after a stop would otherwise hit "Address already in use"
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        sock.settimeout(self.ACCEPT_POLL_INTERVAL)
        return sock

    def _setup_signals(self):
        """Install SIGINT/SIGTERM handlers that request a graceful shutdown."""
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread, signal handlers not installed")
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and accept until shutdown() is called.

        The handler receives every accepted Connection and is responsible
        for closing it.

        Raises:
            BindError: The address could not be bound.
            AcceptError: accept() failed while the server was running.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host or '*'}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise BindError(self.config.host, self.config.port, e) from e

        self._socket.listen(self.config.backlog)
        self._bound_address = self._socket.getsockname()[:2]

        self._running = True
        self._shutdown_event.clear()
        self._setup_signals()

        host, port = self._bound_address
        logger.info(f"Started Server. Listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue  # Poll the running flag
            except OSError as e:
                if not self._running:
                    break  # Socket closed by shutdown
                logger.error(f"Accept error: {e}")
                raise AcceptError(f"Accept failed: {e}") from e

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
                max_request_line=self.config.max_request_line,
                max_header_bytes=self.config.max_header_bytes,
                header_timeout=self.config.header_timeout,
            )

            logger.debug(f"[{conn.id}] Accepted connection from {client_address[0]}:{client_address[1]}")

            connection_handler(conn)

    def shutdown(self):
        """
        Stop accepting connections. Idempotent, safe from any thread.

        The accept loop exits within one poll interval.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False
        self._shutdown_event.set()

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._running = False
        self._ready_event.clear()
        self._shutdown_event.set()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the socket is listening.

        Returns:
            True once listening, False on timeout.
        """
        return self._ready_event.wait(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the server to shut down.

        Returns:
            True if shutdown completed, False on timeout.
        """
        return self._shutdown_event.wait(timeout)
