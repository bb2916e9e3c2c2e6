"""
=============================================================================
FILE SERVER
=============================================================================

Ties the pieces together: accept a connection, read its request line,
build the file response, send it, close.

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. CLIENT CONNECTS
       └── SocketServer accepts, wraps the socket in a Connection

    2. DISPATCH
       └── concurrent=True:  own daemon thread per connection
       └── concurrent=False: handled inline, next accept() waits

    3. READ
       └── request line, then drain (and log) header lines

    4. PARSE
       └── RequestParser → HTTPRequest(method, path)

    5. RESPOND
       └── FileResponder → 200 with file / 404 with 404.html

    6. SEND AND CLOSE
       └── header text, payload (GET only), FIN

    7. SHUTDOWN
       └── accept loop stops, run() waits up to shutdown_timeout for
           worker threads still sending

=============================================================================
FAILURES
=============================================================================

    RequestError (bad line, unreadable request)
        default   → 400/405 status line (parse errors) or nothing
                    (read errors), connection closed, server keeps going
        fail_fast → recorded as fatal, no response

    FatalServerError (bind, accept, 404.html unreadable)
        → recorded, accept loop stopped, run() raises it

Only the first fatal error is kept; later ones are logged.

=============================================================================
"""

import logging
import threading
import time
from typing import Optional, Set, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState
from .errors import FatalServerError, RequestError, RequestEscalatedError
from .handlers import FileResponder
from .http import HTTPResponse, HTTPStatus, RequestParser, error_response


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    The cihttp file server.

    Usage:
        server = HTTPServer(ServerConfig(content_root="www"))
        server.run()  # Blocks until SIGINT/SIGTERM or a fatal error
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Defaults serve ./www on port 8080.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser()
        self._responder = FileResponder.from_config(self.config)

        self._fatal_error: Optional[FatalServerError] = None
        self._fatal_lock = threading.Lock()

        self._workers: Set[threading.Thread] = set()
        self._workers_lock = threading.Lock()

        self._running = False

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port) once running."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._running

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, configure_logging: bool = True):
        """
        Start the server (blocking).

        Returns normally after a signal or shutdown().

        Raises:
            FatalServerError: bind/accept failure, unreadable 404.html,
                or a bad request with fail_fast enabled.
        """
        if configure_logging:
            self._setup_logging()

        self._running = True
        self._fatal_error = None

        mode = "concurrent" if self.config.concurrent else "serial"
        logger.info(f"Serving {self._responder.content_root} ({mode})")

        try:
            self._socket_server.start(self._handle_connection)
        except FatalServerError as e:
            self._record_fatal(e)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._join_workers()
            self._running = False

        if self._fatal_error is not None:
            raise self._fatal_error

        logger.info("Server stopped")

    def shutdown(self):
        """Ask the server to stop. Safe from any thread."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is listening. For tests and embedding."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("cihttp").setLevel(level)

    def _join_workers(self):
        """Give in-flight connections up to shutdown_timeout to finish."""
        with self._workers_lock:
            workers = list(self._workers)

        if not workers:
            return

        logger.info(f"Waiting for {len(workers)} connection(s) to finish")
        deadline = time.monotonic() + self.config.shutdown_timeout
        for worker in workers:
            worker.join(max(0.0, deadline - time.monotonic()))

        still_running = sum(1 for worker in workers if worker.is_alive())
        if still_running:
            logger.warning(f"Abandoning {still_running} unfinished connection(s)")

    def _record_fatal(self, error: FatalServerError):
        with self._fatal_lock:
            if self._fatal_error is None:
                logger.error(f"Fatal: {error}")
                self._fatal_error = error
            else:
                logger.error(f"Additional fatal error after shutdown began: {error}")
        self._socket_server.shutdown()

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Called by SocketServer for every accepted connection."""
        if self.config.concurrent:
            worker = threading.Thread(
                target=self._process_connection,
                args=(conn,),
                name=f"cihttp-{conn.id}",
                daemon=True,
            )
            with self._workers_lock:
                self._workers.add(worker)
            worker.start()
        else:
            self._process_connection(conn)

    def _process_connection(self, conn: Connection):
        try:
            with conn:
                self.serve(conn)
        except FatalServerError as e:
            self._record_fatal(e)
        except Exception as e:
            logger.exception(f"[{conn.id}] Connection error: {e}")
            if self.config.fail_fast:
                self._record_fatal(FatalServerError(f"Unexpected error: {e}"))
        finally:
            with self._workers_lock:
                self._workers.discard(threading.current_thread())

    def serve(self, conn: Connection) -> Optional[HTTPResponse]:
        """
        Handle the single request on a connection. Does not close it.

        Returns:
            The response sent, or None when the request was rejected
            without a response.

        Raises:
            FatalServerError: unreadable 404.html, or any RequestError
                when fail_fast is enabled.
        """
        try:
            line = conn.read_request_line()
            logger.debug(f"[{conn.id}] {line}")
            headers = conn.drain_headers()
            request = self._parser.parse(line, conn.address)
        except RequestError as e:
            if self.config.fail_fast:
                raise RequestEscalatedError(e) from e
            return self._reject(conn, e)

        request.headers = headers
        conn.state = ConnectionState.PROCESSING

        response = self._responder.respond(request)
        sent = conn.send_response(response)

        payload_size = len(response.payload) if response.payload is not None else 0
        logger.info(
            f'{conn.client_ip} "{request.request_line}" '
            f"{int(response.status)} {payload_size}{'' if sent else ' (not delivered)'}"
        )
        return response

    def _reject(self, conn: Connection, error: RequestError) -> Optional[HTTPResponse]:
        logger.warning(f"[{conn.id}] Rejected request from {conn.client_ip}: {error}")

        if error.status_code is None:
            return None

        response = error_response(HTTPStatus(error.status_code))
        conn.send_response(response)
        return response
