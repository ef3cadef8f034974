"""
=============================================================================
HTTP PROTOCOL IMPLEMENTATION
=============================================================================

Hand-written HTTP/1.1: bytes from a socket in, bytes to a socket out.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   socket stream                                                      │
    │        │                                                             │
    │        ▼                                                             │
    │   request.py       RequestParser    → HTTPRequest                   │
    │        │                                                             │
    │        ▼                                                             │
    │   router.py        RequestRouter    → HTTPResponse                  │
    │        │                                                             │
    │        ▼                                                             │
    │   response.py      ResponseFramer   → bytes (Content-Length or      │
    │                                        chunked, Connection: close)  │
    │                                                                      │
    │   status_codes.py  reason phrases                                   │
    │   mime_types.py    Content-Type for static files                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    MalformedRequest,
    TruncatedBody,
    SESSION_COOKIE,
    parse_request,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ResponseFramer,
    Framing,
    chunk_body,
    session_cookie,
    error_response,
    bad_request,
    not_found,
    internal_error,
)
from .router import RequestRouter, Route, extract_guess
from .status_codes import HTTPStatus, reason_phrase
from .mime_types import get_mime_type, get_content_type

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "MalformedRequest",
    "TruncatedBody",
    "SESSION_COOKIE",
    "parse_request",

    # Responses
    "HTTPResponse",
    "ResponseBuilder",
    "ResponseFramer",
    "Framing",
    "chunk_body",
    "session_cookie",
    "error_response",
    "bad_request",
    "not_found",
    "internal_error",

    # Routing
    "RequestRouter",
    "Route",
    "extract_guess",

    # Status codes
    "HTTPStatus",
    "reason_phrase",

    # MIME types
    "get_mime_type",
    "get_content_type",
]
