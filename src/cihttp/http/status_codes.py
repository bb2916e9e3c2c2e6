"""
=============================================================================
STATUS LINES
=============================================================================

cihttp only ever answers with a handful of statuses, and its reason phrases
are its own rather than the RFC ones:

    ┌────────┬──────────────────────┬─────────────────────────────────────┐
    │  Code  │  Phrase              │  When                               │
    ├────────┼──────────────────────┼─────────────────────────────────────┤
    │  200   │  Okay                │  file read successfully             │
    │  400   │  Bad request         │  request line has < 2 tokens        │
    │  404   │  Not found           │  file missing or unreadable         │
    │  405   │  Method not allowed  │  method other than GET/HEAD         │
    └────────┴──────────────────────┴─────────────────────────────────────┘

Clients only look at the code; the phrases are kept byte-exact because
existing tooling compares whole status lines.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    Status codes used by the server.

    IntEnum, so members compare equal to plain ints:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not found'
    """

    OK = 200
    BAD_REQUEST = 400
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405

    @property
    def phrase(self) -> str:
        """Reason phrase that follows the code in the status line."""
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "Okay",
    HTTPStatus.BAD_REQUEST: "Bad request",
    HTTPStatus.NOT_FOUND: "Not found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method not allowed",
}
