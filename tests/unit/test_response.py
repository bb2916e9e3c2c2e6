"""
Unit tests for the response model and Last-Modified formatting.
"""

import re
from datetime import datetime, timezone

import pytest

from cihttp.http.response import (
    HTTPResponse,
    error_response,
    format_last_modified,
)
from cihttp.http.status_codes import HTTPStatus


LAST_MODIFIED_PATTERN = re.compile(
    r"^(Monday|Tuesday|Wednesday|Thursday|Friday|Saturday|Sunday), "
    r"\d{2} (January|February|March|April|May|June|July|August|September|"
    r"October|November|December) \d{4} \d{2}:\d{2}:\d{2} GMT$"
)


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_lines(self):
        """Test the exact status line text."""
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 Okay"
        assert HTTPResponse(status=HTTPStatus.NOT_FOUND).status_line == "HTTP/1.1 404 Not found"
        assert HTTPResponse(status=HTTPStatus.BAD_REQUEST).status_line == "HTTP/1.1 400 Bad request"
        assert (HTTPResponse(status=HTTPStatus.METHOD_NOT_ALLOWED).status_line
                == "HTTP/1.1 405 Method not allowed")

    def test_header_text_keeps_order(self):
        """Test headers are rendered in order with CRLF and a blank line."""
        response = HTTPResponse(
            headers=[("Content-length", "3"), ("Server", "cihttp")],
            payload=b"abc",
        )

        assert response.header_text == (
            "HTTP/1.1 200 Okay\r\n"
            "Content-length: 3\r\n"
            "Server: cihttp\r\n"
            "\r\n"
        )

    def test_unterminated_header_block(self):
        """Test the 404 form: status line only, no blank line."""
        response = HTTPResponse(
            status=HTTPStatus.NOT_FOUND,
            payload=b"Not Found",
            terminate_headers=False,
        )

        assert response.header_text == "HTTP/1.1 404 Not found\r\n"
        assert response.to_bytes() == b"HTTP/1.1 404 Not found\r\nNot Found"

    def test_to_bytes_appends_payload(self):
        response = HTTPResponse(headers=[("Content-length", "2")], payload=b"hi")
        assert response.to_bytes() == b"HTTP/1.1 200 Okay\r\nContent-length: 2\r\n\r\nhi"

    def test_to_bytes_without_payload(self):
        response = HTTPResponse(headers=[("Content-length", "2")])
        assert response.to_bytes() == b"HTTP/1.1 200 Okay\r\nContent-length: 2\r\n\r\n"

    def test_without_payload_keeps_status_and_headers(self):
        response = HTTPResponse(headers=[("Server", "cihttp")], payload=b"data")
        head = response.without_payload()

        assert head.payload is None
        assert head.header_text == response.header_text
        assert response.payload == b"data"  # original untouched

    def test_get_header_case_insensitive(self):
        response = HTTPResponse(headers=[("Content-length", "12")])

        assert response.get_header("content-length") == "12"
        assert response.get_header("Server") is None

    def test_error_response(self):
        assert error_response(HTTPStatus.BAD_REQUEST).to_bytes() == b"HTTP/1.1 400 Bad request\r\n\r\n"


class TestLastModified:
    """Tests for format_last_modified."""

    def test_zero_padding(self):
        dt = datetime(2024, 3, 1, 9, 5, 7, tzinfo=timezone.utc)
        assert format_last_modified(dt) == "Friday, 01 March 2024 09:05:07 GMT"

    def test_two_digit_fields(self):
        dt = datetime(2023, 12, 31, 23, 59, 58, tzinfo=timezone.utc)
        assert format_last_modified(dt) == "Sunday, 31 December 2023 23:59:58 GMT"

    @pytest.mark.parametrize("timestamp", [0, 86400 * 3, 1_000_000_000, 1_700_000_000])
    def test_matches_pattern(self, timestamp):
        dt = datetime.fromtimestamp(timestamp, tz=timezone.utc)
        assert LAST_MODIFIED_PATTERN.match(format_last_modified(dt))

    def test_epoch(self):
        dt = datetime.fromtimestamp(0, tz=timezone.utc)
        assert format_last_modified(dt) == "Thursday, 01 January 1970 00:00:00 GMT"
