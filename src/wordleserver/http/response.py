"""
=============================================================================
HTTP RESPONSE BUILDER AND FRAMER
=============================================================================

Builds responses and serializes them to bytes in one of two framings.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                    ← status line             │
    │    Content-Type: application/json\r\n     ← headers                 │
    │    Set-Cookie: SESSIONID=...\r\n                                    │
    │    Connection: close\r\n                                            │
    │    Content-Length: 42\r\n                 ← or Transfer-Encoding    │
    │    \r\n                                   ← empty line              │
    │    {"result":"BGYYG","attempts":["TRACE"]}  ← body                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
FRAMING: HOW THE CLIENT KNOWS WHERE THE BODY ENDS
=============================================================================

1. CONTENT-LENGTH

    Content-Length: 11\r\n
    \r\n
    hello world

2. CHUNKED TRANSFER ENCODING

    Transfer-Encoding: chunked\r\n
    \r\n
    80\r\n                 ← chunk size in hex (128 bytes)
    <128 bytes>\r\n
    1a\r\n                 ← last partial chunk (26 bytes)
    <26 bytes>\r\n
    0\r\n                  ← zero-length chunk ends the body
    \r\n

Every response carries "Connection: close": the server answers exactly one
request per connection.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional, Union

from .request import SESSION_COOKIE
from .status_codes import HTTPStatus, reason_phrase

DEFAULT_SERVER_NAME = "WordleServer/1.0"
DEFAULT_CHUNK_SIZE = 128
SESSION_MAX_AGE = 1800


def session_cookie(token: str, max_age: int = SESSION_MAX_AGE) -> str:
    """
    Set-Cookie value carrying a session token.

        SESSIONID=<token>; Max-Age=1800; SameSite=Strict
    """
    return f"{SESSION_COOKIE}={token}; Max-Age={max_age}; SameSite=Strict"


@dataclass
class HTTPResponse:
    """
    An HTTP response waiting to be framed.

    Use ResponseBuilder for a more convenient way to construct one, and
    ResponseFramer to turn it into bytes.
    """

    status: Union[HTTPStatus, int] = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 302 Found"
        """
        return f"{self.version} {int(self.status)} {reason_phrase(self.status)}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        self.headers[name] = value
        return self


class ResponseBuilder:
    """
    Fluent builder for HTTP responses.

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .json_text('{"result":"GGGGG GAMEOVER","attempts":["CRANE"]}')
            .session_cookie(token)
            .build())

    Every method except build() returns self.
    """

    def __init__(self):
        self._status: Union[HTTPStatus, int] = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: Union[HTTPStatus, int]) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def text(self, text: str) -> "ResponseBuilder":
        """Plain text body (used for error messages)."""
        self._body = text.encode("utf-8")
        self._headers["Content-Type"] = "text/plain; charset=utf-8"
        return self

    def html(self, html: str) -> "ResponseBuilder":
        self._body = html.encode("utf-8")
        self._headers["Content-Type"] = "text/html; charset=utf-8"
        return self

    def json_text(self, payload: str) -> "ResponseBuilder":
        """Body that is already serialized JSON."""
        self._body = payload.encode("utf-8")
        self._headers["Content-Type"] = "application/json; charset=utf-8"
        return self

    def file(self, content: bytes, content_type: str) -> "ResponseBuilder":
        self._body = content
        self._headers["Content-Type"] = content_type
        return self

    def redirect(self, location: str) -> "ResponseBuilder":
        """302 Found to location."""
        self._status = HTTPStatus.FOUND
        self._headers["Location"] = location
        return self

    def session_cookie(
        self,
        token: str,
        max_age: int = SESSION_MAX_AGE,
    ) -> "ResponseBuilder":
        """Hand the client its session token (see session_cookie())."""
        self._headers["Set-Cookie"] = session_cookie(token, max_age)
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
        )


# =============================================================================
# FRAMING
# =============================================================================

class Framing(Enum):
    """How the end of the response body is signalled."""

    CONTENT_LENGTH = "content-length"
    CHUNKED = "chunked"


def chunk_body(body: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bytes:
    """
    Encode a body with chunked transfer coding.

        chunk_body(b"hello", 2) == b"2\\r\\nhe\\r\\n2\\r\\nll\\r\\n1\\r\\no\\r\\n0\\r\\n\\r\\n"
    """
    if chunk_size < 1:
        raise ValueError("chunk_size must be >= 1")

    parts = []
    for start in range(0, len(body), chunk_size):
        chunk = body[start:start + chunk_size]
        parts.append(f"{len(chunk):x}\r\n".encode("ascii"))
        parts.append(chunk)
        parts.append(b"\r\n")
    parts.append(b"0\r\n\r\n")
    return b"".join(parts)


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP date (RFC 7231, IMF-fixdate).

        Sun, 06 Nov 1994 08:49:37 GMT
    """
    weekdays = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
    return (
        f"{weekdays[dt.weekday()]}, {dt.day:02d} {months[dt.month - 1]} "
        f"{dt.year} {dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


class ResponseFramer:
    """
    Serializes HTTPResponse objects to wire bytes.

        framer = ResponseFramer(Framing.CHUNKED, chunk_size=128)
        conn.send_response(framer.frame(response))

    Headers added to every response (unless the handler set them):
        Date, Server
    Headers always forced:
        Connection: close
        Content-Length  (CONTENT_LENGTH framing)
        Transfer-Encoding: chunked  (CHUNKED framing)
    """

    def __init__(
        self,
        framing: Framing = Framing.CONTENT_LENGTH,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        server_name: str = DEFAULT_SERVER_NAME,
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self.framing = framing
        self.chunk_size = chunk_size
        self.server_name = server_name

    def frame(
        self,
        response: HTTPResponse,
        now: Optional[datetime] = None,
        request_version: str = "HTTP/1.1",
    ) -> bytes:
        """
        Serialize a response.

        Args:
            response: The response to serialize. Not modified.
            now: Timestamp for the Date header (defaults to current UTC).
            request_version: Protocol of the request being answered.
                HTTP/1.0 clients cannot decode chunked bodies, so they
                always get Content-Length framing.

        Returns:
            Status line, headers, blank line and framed body as bytes.
        """
        headers = dict(response.headers)
        headers.setdefault(
            "Date", format_http_date(now or datetime.now(timezone.utc))
        )
        headers.setdefault("Server", self.server_name)
        headers["Connection"] = "close"

        if self.framing is Framing.CHUNKED and request_version != "HTTP/1.0":
            headers.pop("Content-Length", None)
            headers["Transfer-Encoding"] = "chunked"
            body = chunk_body(response.body, self.chunk_size)
        else:
            headers.pop("Transfer-Encoding", None)
            headers["Content-Length"] = str(len(response.body))
            body = response.body

        lines = [response.status_line]
        lines.extend(f"{name}: {value}" for name, value in headers.items())
        lines.append("")
        head = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return head + body


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def error_response(status: Union[HTTPStatus, int], message: str) -> HTTPResponse:
    """Plain-text error response."""
    return ResponseBuilder().status(status).text(message).build()


def bad_request(message: str = "Bad Request") -> HTTPResponse:
    return error_response(HTTPStatus.BAD_REQUEST, message)


def not_found(message: str = "File not found") -> HTTPResponse:
    return error_response(HTTPStatus.NOT_FOUND, message)


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, message)
