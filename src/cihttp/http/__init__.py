"""
HTTP protocol pieces: request line parsing, status codes and responses.
"""

from .status_codes import HTTPStatus
from .request import HTTPRequest, RequestParser, parse_request_line
from .response import HTTPResponse, error_response, format_last_modified

__all__ = [
    "HTTPStatus",
    "HTTPRequest",
    "RequestParser",
    "parse_request_line",
    "HTTPResponse",
    "error_response",
    "format_last_modified",
]
