"""
=============================================================================
ACCESS LOGGING MIDDLEWARE
=============================================================================

One log line per routed request, emitted on the "wordleserver.access"
logger.

Text format (Apache-like, plus the session):

    127.0.0.1 - - [19/Oct/2026:10:02:11 +0000] "GET /play.html?guess=crane" 200 41 0.42ms session=3f2a9c1e

JSON format:

    {"request_id": "a1b2c3d4", "method": "GET", "path": "/play.html",
     "query": "guess=crane", "client_ip": "127.0.0.1", "status_code": 200,
     "content_length": 41, "duration_ms": 0.42, "session": "3f2a9c1e",
     "new_session": false, ...}

The session column is the first 8 characters of the token: the one the
client sent, or the one minted for it (taken from Set-Cookie).

Route the access log elsewhere with the standard library:

    handler = logging.FileHandler("access.log")
    logging.getLogger("wordleserver.access").addHandler(handler)

=============================================================================
"""

import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass
from typing import Optional

from ..http.request import HTTPRequest, SESSION_COOKIE
from ..http.response import HTTPResponse
from .base import Middleware, NextHandler

logger = logging.getLogger("wordleserver.access")


@dataclass
class RequestLog:
    """Structured access log entry."""

    request_id: str
    method: str
    path: str
    query: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str
    session: str
    new_session: bool

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        target = f"{self.path}?{self.query}" if self.query else self.path
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {target}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms '
            f'session={self.session or "-"}'
        )


def minted_token(response: HTTPResponse) -> Optional[str]:
    """Token carried by a SESSIONID Set-Cookie header, if any."""
    cookie = response.headers.get("Set-Cookie", "")
    name, sep, rest = cookie.partition("=")
    if not sep or name != SESSION_COOKIE:
        return None
    return rest.split(";", 1)[0]


class LoggingMiddleware(Middleware):
    """
    Times each request and logs the outcome.

    Should be added first so its timing covers everything behind it.

        pipeline.add(LoggingMiddleware(log_format="json"))

    A request that raises is logged at ERROR and the exception re-raised;
    the server answers it with a 500.
    """

    def __init__(
        self,
        log_format: str = "text",
        include_request_id: bool = False,
        log_level: int = logging.INFO,
        skip_paths: Optional[list[str]] = None,
    ):
        """
        Args:
            log_format: "text" or "json".
            include_request_id: Add an X-Request-ID header to responses.
            log_level: Level for access lines.
            skip_paths: Paths that are never logged (e.g. ["/favicon.ico"]).
        """
        if log_format not in ("text", "json"):
            raise ValueError(f"Unknown log format: {log_format}")
        self.log_format = log_format
        self.include_request_id = include_request_id
        self.log_level = log_level
        self.skip_paths = set(skip_paths or [])

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        request_id = str(uuid.uuid4())[:8]
        start_time = time.perf_counter()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000

        if self.include_request_id:
            response.set_header("X-Request-ID", request_id)

        if request.path in self.skip_paths:
            return response

        new_token = minted_token(response)
        token = new_token or request.session_token or ""

        entry = RequestLog(
            request_id=request_id,
            method=request.method,
            path=request.path,
            query=request.query,
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
            session=token[:8],
            new_session=new_token is not None,
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())
        return response
