"""
=============================================================================
FILE RESPONDER
=============================================================================

Maps a request path to a file under the content root and builds the
response for it.

=============================================================================
FLOW
=============================================================================

    Request: GET /docs/a.html

    1. Drop ONE leading "/"           →  "docs/a.html"
    2. Join to the content root        →  www/docs/a.html
    3. Outside the root?               →  treat as missing
    4. Read the whole file             →  bytes + fstat of the same fd
         │
         ├── read failed  →  404 Not found, payload = www/404.html
         │                   (404.html unreadable → FallbackMissingError)
         │
         └── read ok      →  200 Okay
                              Content-length, Last-Modified, Server
    5. HEAD?                           →  drop the payload, keep the status

"Read failed" covers every OSError: missing file, permission denied, the
path naming a directory (so "/" itself is a 404).

=============================================================================
"""

import os
import logging
from datetime import datetime, timezone
from typing import Tuple

from ..config import ServerConfig
from ..errors import FallbackMissingError
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, format_last_modified
from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)


class FileResponder:
    """
    Builds responses for file requests.

    Usage:
        responder = FileResponder(content_root="www")
        response = responder.respond(request)
    """

    def __init__(
        self,
        content_root: str = "www",
        fallback_file: str = "404.html",
        server_name: str = "cihttp",
    ):
        """
        Args:
            content_root: Directory files are served from.
            fallback_file: Name, relative to content_root, of the 404 page.
            server_name: Value of the Server header.
        """
        self.content_root = os.path.abspath(content_root)
        self.fallback_path = os.path.join(self.content_root, fallback_file)
        self.server_name = server_name

        if not os.path.isdir(self.content_root):
            logger.warning(f"Content root {self.content_root} is not a directory")

    @classmethod
    def from_config(cls, config: ServerConfig) -> "FileResponder":
        return cls(
            content_root=config.content_root,
            fallback_file=config.fallback_file,
            server_name=config.server_name,
        )

    def respond(self, request: HTTPRequest) -> HTTPResponse:
        """
        Build the response for a GET or HEAD request.

        Returns:
            The response. Its payload is None for HEAD.

        Raises:
            FallbackMissingError: the file was missing and so is 404.html.
        """
        relative_name = request.path[1:] if request.path.startswith("/") else request.path

        try:
            data, modified = self._read(relative_name)
        except (OSError, ValueError) as e:
            logger.debug(f"Cannot read {relative_name!r}: {e}")
            response = self._not_found()
        else:
            response = self._found(data, modified)

        if request.is_head:
            return response.without_payload()
        return response

    def resolve(self, relative_name: str) -> str:
        """
        Filesystem path for a name relative to the content root.

        Raises:
            FileNotFoundError: the name escapes the content root (e.g. "../x").
        """
        full_path = os.path.abspath(os.path.join(self.content_root, relative_name))

        if os.path.commonpath([self.content_root, full_path]) != self.content_root:
            logger.warning(f"Path outside content root rejected: {relative_name!r}")
            raise FileNotFoundError(relative_name)

        return full_path

    def _read(self, relative_name: str) -> Tuple[bytes, datetime]:
        """
        Read a file and its modification time.

        The timestamp comes from fstat() on the descriptor that was read,
        so it always describes the bytes being sent.
        """
        full_path = self.resolve(relative_name)

        with open(full_path, "rb") as f:
            data = f.read()
            stat = os.fstat(f.fileno())

        modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
        return data, modified

    def _found(self, data: bytes, modified: datetime) -> HTTPResponse:
        return HTTPResponse(
            status=HTTPStatus.OK,
            headers=[
                ("Content-length", str(len(data))),
                ("Last-Modified", format_last_modified(modified)),
                ("Server", self.server_name),
            ],
            payload=data,
        )

    def _not_found(self) -> HTTPResponse:
        try:
            with open(self.fallback_path, "rb") as f:
                fallback = f.read()
        except OSError as e:
            raise FallbackMissingError(self.fallback_path, e) from e

        return HTTPResponse(
            status=HTTPStatus.NOT_FOUND,
            payload=fallback,
            terminate_headers=False,
        )
