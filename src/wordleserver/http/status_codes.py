"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server emits, with their reason phrases.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  2xx   │ 200 OK                    - guess scored / page served    │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  3xx   │ 302 Found                 - / and /index.html redirect    │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  4xx   │ 400 Bad Request           - bad guess, exhausted, method  │
    │        │ 404 Not Found             - missing static file           │
    │        │ 405 Method Not Allowed                                    │
    │        │ 411 Length Required       - POST without Content-Length   │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  5xx   │ 500 Internal Server Error - handler bug                   │
    │        │ 501 Not Implemented                                       │
    │        │ 505 HTTP Version Not Supported                            │
    └────────┴───────────────────────────────────────────────────────────┘

Any other numeric code still serializes, with the phrase "Unknown":

    HTTP/1.1 418 Unknown

=============================================================================
"""

from enum import IntEnum
from typing import Union


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the server.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.FOUND.phrase
        'Found'
    """

    OK = 200
    FOUND = 302
    BAD_REQUEST = 400
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    LENGTH_REQUIRED = 411
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line."""
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_redirect(self) -> bool:
        return 300 <= self < 400

    @property
    def is_error(self) -> bool:
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.FOUND: "Found",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.LENGTH_REQUIRED: "Length Required",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}


def reason_phrase(status: Union[HTTPStatus, int]) -> str:
    """
    Reason phrase for any numeric status code.

    Known codes map through the fixed table; everything else is "Unknown".
    """
    try:
        return HTTPStatus(int(status)).phrase
    except ValueError:
        return "Unknown"
