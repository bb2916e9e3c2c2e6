"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cihttp import HTTPServer, ServerConfig


INDEX_CONTENT = b"Hello World!"
FALLBACK_CONTENT = b"Not Found"


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    """Content root with index.html (12 bytes) and 404.html (9 bytes)."""
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_CONTENT)
    (root / "404.html").write_bytes(FALLBACK_CONTENT)
    return root


@pytest.fixture
def make_config(content_root: Path):
    """Factory for a test config bound to localhost on an OS-assigned port."""
    def factory(**overrides) -> ServerConfig:
        values = dict(
            host="127.0.0.1",
            port=0,
            content_root=str(content_root),
            header_timeout=0.2,
            shutdown_timeout=2.0,
            log_level="WARNING",
        )
        values.update(overrides)
        return ServerConfig(**values)
    return factory


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class despite the name

    def __init__(self, server: HTTPServer):
        self.server = server
        self.error: Optional[BaseException] = None
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def _run(self):
        try:
            self.server.run(configure_logging=False)
        except BaseException as e:
            self.error = e

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()
        self.join()

    def join(self, timeout: float = 5.0) -> bool:
        """Wait for run() to return. True if it did."""
        if self._thread:
            self._thread.join(timeout=timeout)
            return not self._thread.is_alive()
        return True

    def request(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes, return everything the server sends back."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=timeout) as s:
            s.sendall(raw)
            chunks = []
            while True:
                try:
                    chunk = s.recv(4096)
                except ConnectionResetError:
                    break
                if not chunk:
                    break
                chunks.append(chunk)
            return b"".join(chunks)


@pytest.fixture
def start_server(make_config) -> Generator:
    """Start servers with the given config overrides; all stopped on teardown."""
    started = []

    def factory(**overrides) -> TestServer:
        srv = TestServer(HTTPServer(make_config(**overrides)))
        srv.start()
        started.append(srv)
        return srv

    yield factory

    for srv in started:
        srv.stop()


@pytest.fixture
def test_server(start_server) -> TestServer:
    """A running server with default (concurrent, non-fatal) behavior."""
    return start_server()
