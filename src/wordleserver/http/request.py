"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads one HTTP/1.1 request from a binary stream and turns it into an
HTTPRequest. No library parser is involved: the request line, headers and
body are read and split by hand.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │    GET /play.html?guess=crane HTTP/1.1\r\n                     │ │
    │  │    ─┬─ ──────────┬─────────── ────┬───                         │ │
    │  │   Method       Target          Version                         │ │
    │  │                  │                                              │ │
    │  │        ┌─────────┴─────────┐                                   │ │
    │  │      Path              Query (raw)                              │ │
    │  │   /play.html          guess=crane                               │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    Host: localhost:8021\r\n                                    │ │
    │  │    Cookie: theme=dark; SESSIONID=3f2a...\r\n                   │ │
    │  │    Content-Length: 11\r\n                                      │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ EMPTY LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY (exactly Content-Length bytes) ──────────────────────────┐ │
    │  │    guess=crane                                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PARSING RULES
=============================================================================

    Request line  must split into exactly 3 space-separated tokens,
                  otherwise MalformedRequest.
    Header line   split on the first ": ". Lines without it are skipped.
                  A repeated header name keeps the LAST value.
    Body          read only when Content-Length is present. Fewer bytes
                  than announced → TruncatedBody. Chunked request bodies
                  are not supported.
    Cookie        "; "-separated name=value pairs; SESSIONID is the
                  session token.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import BinaryIO, Dict, Optional

SESSION_COOKIE = "SESSIONID"


class HTTPParseError(Exception):
    """
    Raised when a request cannot be read off the stream.

    Carries an HTTP status code for logging; the server closes the
    connection without answering.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class MalformedRequest(HTTPParseError):
    """Missing or unsplittable request line, or an unusable header."""


class TruncatedBody(HTTPParseError):
    """The stream ended before Content-Length body bytes arrived."""


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Attributes:
        method:         Request method as sent ("GET", "POST", ...)
        path:           Target before the first "?" ("/play.html")
        query:          Raw text after the first "?" ("guess=crane"), or ""
        version:        Protocol version token ("HTTP/1.1")
        headers:        Header name → value. Names keep the case they were
                        sent with; use get_header() for case-insensitive
                        lookup.
        body:           Exactly Content-Length bytes (b"" without the header)
        session_token:  SESSIONID cookie value, or None
        client_address: (ip, port) of the client
    """

    method: str
    path: str
    query: str = ""
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    session_token: Optional[str] = None
    client_address: tuple[str, int] = ("", 0)

    @property
    def target(self) -> str:
        """The request target as it appeared on the request line."""
        return f"{self.path}?{self.query}" if self.query else self.path

    @property
    def content_length(self) -> Optional[int]:
        """Declared Content-Length, or None if the header is absent."""
        value = self.get_header("Content-Length")
        return int(value) if value is not None else None

    @property
    def user_agent(self) -> str:
        return self.get_header("User-Agent", "")

    @property
    def text(self) -> str:
        """Body decoded as UTF-8 (invalid bytes replaced)."""
        return self.body.decode("utf-8", errors="replace")

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive header lookup."""
        return find_header(self.headers, name, default)


# =============================================================================
# HELPERS
# =============================================================================

def find_header(
    headers: Dict[str, str],
    name: str,
    default: Optional[str] = None,
) -> Optional[str]:
    """
    Look a header up ignoring case.

    An exact-case match wins; otherwise the last header whose name matches
    ignoring case is returned.
    """
    if name in headers:
        return headers[name]
    wanted = name.lower()
    found = default
    for key, value in headers.items():
        if key.lower() == wanted:
            found = value
    return found


def split_target(target: str) -> tuple[str, str]:
    """
    Split a request target on the first "?".

        "/play.html?guess=crane" → ("/play.html", "guess=crane")
        "/play.html"             → ("/play.html", "")
    """
    path, _, query = target.partition("?")
    return path, query


def extract_session_token(cookie_header: Optional[str]) -> Optional[str]:
    """
    Find the SESSIONID value in a Cookie header.

        "theme=dark; SESSIONID=abc" → "abc"
        "theme=dark"                → None
        None                        → None
    """
    if not cookie_header:
        return None
    for pair in cookie_header.split("; "):
        name, sep, value = pair.strip().partition("=")
        if sep and name == SESSION_COOKIE and value:
            return value
    return None


# =============================================================================
# PARSER
# =============================================================================

class RequestParser:
    """
    Reads one request from a binary stream.

    The stream is usually socket.makefile("rb"); tests pass io.BytesIO.

        ┌───────────────────────────────────────────────────────────────┐
        │  1. readline()          request line → method, target, version│
        │  2. readline() ...      headers until the empty line / EOF    │
        │  3. read(n) ...         body, n = Content-Length              │
        │  4. split target        path + raw query                      │
        │  5. Cookie header       session token                         │
        └───────────────────────────────────────────────────────────────┘

    Size guards reject lines longer than max_line_length, more than
    max_headers header lines, and bodies above max_body_size.
    """

    def __init__(
        self,
        max_line_length: int = 8192,
        max_headers: int = 100,
        max_body_size: int = 1024 * 1024,
    ):
        self.max_line_length = max_line_length
        self.max_headers = max_headers
        self.max_body_size = max_body_size

    def parse(
        self,
        stream: BinaryIO,
        client_address: tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Read and parse one request.

        Args:
            stream: Readable binary stream positioned at a request.
            client_address: Client's (ip, port), copied onto the request.

        Returns:
            The parsed HTTPRequest.

        Raises:
            MalformedRequest: Missing/invalid request line or bad header.
            TruncatedBody: Body shorter than Content-Length.
        """
        request_line = self._read_line(stream)
        if not request_line:
            raise MalformedRequest("Empty request: no request line")

        method, target, version = self._parse_request_line(request_line)
        headers = self._parse_headers(stream)

        body = b""
        length = self._content_length(headers)
        if length:
            body = self._read_body(stream, length)

        path, query = split_target(target)
        return HTTPRequest(
            method=method,
            path=path,
            query=query,
            version=version,
            headers=headers,
            body=body,
            session_token=extract_session_token(find_header(headers, "Cookie")),
            client_address=client_address,
        )

    def _read_line(self, stream: BinaryIO) -> str:
        """Read one CRLF (or LF) terminated line, without the terminator."""
        raw = stream.readline(self.max_line_length + 1)
        if len(raw) > self.max_line_length:
            raise MalformedRequest(f"Line exceeds {self.max_line_length} bytes")
        return raw.decode("iso-8859-1").rstrip("\r\n")

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        parts = line.split(" ")
        if len(parts) != 3 or not all(parts):
            raise MalformedRequest(f"Invalid request line: {line!r}")
        method, target, version = parts
        return method, target, version

    def _parse_headers(self, stream: BinaryIO) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        count = 0
        while True:
            line = self._read_line(stream)
            if not line:
                # Blank line ends the header block; so does EOF.
                return headers

            count += 1
            if count > self.max_headers:
                raise MalformedRequest(f"More than {self.max_headers} header lines")

            parts = line.split(": ", 1)
            if len(parts) != 2:
                continue  # Skip malformed headers (lenient parsing)

            name, value = parts
            headers[name] = value

    def _content_length(self, headers: Dict[str, str]) -> int:
        value = find_header(headers, "Content-Length")
        if value is None:
            return 0

        try:
            length = int(value.strip())
        except ValueError:
            raise MalformedRequest(f"Invalid Content-Length: {value!r}")
        if length < 0:
            raise MalformedRequest(f"Invalid Content-Length: {value!r}")
        if length > self.max_body_size:
            raise MalformedRequest(f"Body too large: {length} bytes")
        return length

    def _read_body(self, stream: BinaryIO, length: int) -> bytes:
        # read() on a socket file can return short; keep going until EOF
        chunks = []
        remaining = length
        while remaining > 0:
            chunk = stream.read(remaining)
            if not chunk:
                raise TruncatedBody(
                    f"Incomplete body: expected {length} bytes, "
                    f"got {length - remaining}"
                )
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)


def parse_request(
    stream: BinaryIO,
    client_address: tuple[str, int] = ("", 0),
) -> HTTPRequest:
    """Parse one request with default limits."""
    return RequestParser().parse(stream, client_address)
