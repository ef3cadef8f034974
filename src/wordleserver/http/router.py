"""
=============================================================================
REQUEST ROUTER
=============================================================================

Maps a parsed request to a response. Every request that gets past the
pre-checks is tied to a game session first, then dispatched through an
ordered route table.

=============================================================================
ROUTING FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   HTTPRequest                                                        │
    │        │                                                             │
    │        ▼                                                             │
    │   PRE-CHECKS                                                         │
    │     version not HTTP/1.0 or HTTP/1.1   → 505                        │
    │     POST without Content-Length        → 411                        │
    │        │                                                             │
    │        ▼                                                             │
    │   SESSION   store.resolve_or_create(request.session_token)          │
    │        │                                                             │
    │        ▼                                                             │
    │   ROUTE TABLE (first match wins)                                    │
    │     1. POST  *                       → guess flow, HTML page        │
    │     2. GET   / or /index.html        → 302 Location: /play.html     │
    │     3. GET   /play.html?...guess=... → guess flow, JSON body        │
    │     4. GET   *                       → play page / static file      │
    │     (none)                           → 400 not a GET nor a POST     │
    │        │                                                             │
    │        ▼                                                             │
    │   Set-Cookie added if the session token was just minted             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
THE GUESS FLOW
=============================================================================

The guess is taken from an "&"-separated payload (query string for GET,
body for POST): the pair whose key is "guess" (any case), value = the text
after its first "=". No pair means an empty guess.

    "guess=crane"             → "CRANE"
    "x=1&Guess=slate"         → "SLATE"
    "foo=bar"                 → ""       (→ 400, wrong length)

Success responses:

    GET   {"result":"BGYBG","attempts":["TRACE","CRANE"]}
          {"result":"GGGGG GAMEOVER","attempts":["CRANE"]}

          The GET body is real JSON: attempts are quoted strings
          (["TRACE"]), not the bare list form [TRACE]. Clients should
          parse it with a JSON parser rather than slicing at "[".

    POST  play page with the coloured guess

Game errors become 400 text/plain with the error's message.

=============================================================================
"""

import json
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, TYPE_CHECKING

from ..game.engine import GameError, GuessOutcome
from ..game.session import Session, SessionStore
from ..handlers.play_page import PlayPage
from .request import HTTPRequest
from .response import (
    HTTPResponse,
    ResponseBuilder,
    SESSION_MAX_AGE,
    error_response,
    session_cookie,
)
from .status_codes import HTTPStatus

if TYPE_CHECKING:
    from ..handlers.static import StaticFileHandler

logger = logging.getLogger(__name__)


SUPPORTED_VERSIONS = ("HTTP/1.0", "HTTP/1.1")
PLAY_PATH = "/play.html"
REDIRECT_PATHS = ("/", "/index.html")
INVALID_METHOD_MESSAGE = "Invalid request : not a GET nor a POST method"


# =============================================================================
# TYPES
# =============================================================================

# Route handlers see the request and the session it belongs to
RouteHandler = Callable[[HTTPRequest, Session], HTTPResponse]
Predicate = Callable[[HTTPRequest], bool]


@dataclass
class Route:
    """
    One entry of the route table.

    Attributes:
        name: Label used in logs.
        predicate: Decides whether this route takes the request.
        handler: Produces the response.
    """

    name: str
    predicate: Predicate
    handler: RouteHandler

    def matches(self, request: HTTPRequest) -> bool:
        return self.predicate(request)


def extract_guess(payload: str) -> str:
    """
    Value of the "guess" pair in an "&"-separated payload, or "".

    The key match ignores case; the value is everything after the pair's
    first "=" and is returned as sent.
    """
    for pair in payload.split("&"):
        key, sep, value = pair.partition("=")
        if sep and key.strip().lower() == "guess":
            return value
    return ""


def guess_payload(outcome: GuessOutcome) -> str:
    """Compact JSON for a GET guess: result first, then attempts."""
    return json.dumps(
        {"result": outcome.result_text, "attempts": list(outcome.attempts)},
        separators=(",", ":"),
    )


# =============================================================================
# ROUTER
# =============================================================================

class RequestRouter:
    """
    Routes requests for the word game.

    Usage:
        router = RequestRouter(store, PlayPage())
        response = router.handle(request)

    handle() has the plain (request) → response signature, so it can be
    wrapped by the middleware pipeline.

    Routes are tried in table order. add_route(..., position=0) puts a
    route ahead of the built-in ones.
    """

    def __init__(
        self,
        store: SessionStore,
        page: Optional[PlayPage] = None,
        static: Optional["StaticFileHandler"] = None,
        cookie_max_age: int = SESSION_MAX_AGE,
    ):
        """
        Args:
            store: Session store shared by all workers.
            page: Renders the play document.
            static: If set, non-guess GETs are served from disk instead of
                    the rendered play page.
            cookie_max_age: Max-Age of the session cookie, in seconds.
        """
        self.store = store
        self.page = page or PlayPage()
        self.static = static
        self.cookie_max_age = cookie_max_age
        self._routes: List[Route] = []

        self.add_route("post_guess", is_post, self._post_guess)
        self.add_route("redirect", is_root_get, self._redirect)
        self.add_route("get_guess", is_guess_get, self._get_guess)
        self.add_route("document", is_get, self._document)

    # =========================================================================
    # ROUTE TABLE
    # =========================================================================

    def add_route(
        self,
        name: str,
        predicate: Predicate,
        handler: RouteHandler,
        position: Optional[int] = None,
    ) -> Route:
        """Register a route at the end of the table, or at position."""
        route = Route(name=name, predicate=predicate, handler=handler)
        if position is None:
            self._routes.append(route)
        else:
            self._routes.insert(position, route)
        return route

    @property
    def routes(self) -> List[Route]:
        return list(self._routes)

    def match(self, request: HTTPRequest) -> Optional[Route]:
        """First route whose predicate accepts the request, or None."""
        for route in self._routes:
            if route.matches(request):
                return route
        return None

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Produce the response for one request.

        Raises:
            Whatever a route handler raises other than GameError; the
            server turns that into a 500.
        """
        rejection = self.precheck(request)
        if rejection is not None:
            return rejection

        token, session, is_new = self.store.resolve_or_create(request.session_token)

        route = self.match(request)
        if route is None:
            logger.debug(f"No route for {request.method} {request.path}")
            response = error_response(HTTPStatus.BAD_REQUEST, INVALID_METHOD_MESSAGE)
        else:
            logger.debug(f"{request.method} {request.target} → {route.name}")
            try:
                response = route.handler(request, session)
            except GameError as e:
                response = error_response(e.status_code, str(e))

        if is_new:
            response.set_header("Set-Cookie", session_cookie(token, self.cookie_max_age))
        return response

    def precheck(self, request: HTTPRequest) -> Optional[HTTPResponse]:
        """Protocol-level rejections that happen before any session work."""
        if request.version not in SUPPORTED_VERSIONS:
            return error_response(
                HTTPStatus.HTTP_VERSION_NOT_SUPPORTED,
                f"Unsupported protocol version: {request.version}",
            )
        if request.method == "POST" and request.content_length is None:
            return error_response(
                HTTPStatus.LENGTH_REQUIRED,
                "Invalid request : POST requires Content-Length",
            )
        return None

    # =========================================================================
    # HANDLERS
    # =========================================================================

    def _play(self, session: Session, payload: str) -> GuessOutcome:
        guess = extract_guess(payload).upper()
        return self.store.submit_guess(session, guess)

    def _post_guess(self, request: HTTPRequest, session: Session) -> HTTPResponse:
        outcome = self._play(session, request.text)
        document = self.page.render(outcome.result, outcome.guess, game_over=outcome.won)
        return ResponseBuilder().html(document).build()

    def _get_guess(self, request: HTTPRequest, session: Session) -> HTTPResponse:
        outcome = self._play(session, request.query)
        return ResponseBuilder().json_text(guess_payload(outcome)).build()

    def _redirect(self, request: HTTPRequest, session: Session) -> HTTPResponse:
        return ResponseBuilder().redirect(PLAY_PATH).build()

    def _document(self, request: HTTPRequest, session: Session) -> HTTPResponse:
        if self.static is not None:
            return self.static.handle(request)
        return ResponseBuilder().html(self.page.render()).build()


# =============================================================================
# PREDICATES
# =============================================================================

def is_post(request: HTTPRequest) -> bool:
    return request.method == "POST"


def is_get(request: HTTPRequest) -> bool:
    return request.method == "GET"


def is_root_get(request: HTTPRequest) -> bool:
    return is_get(request) and request.path in REDIRECT_PATHS


def is_guess_get(request: HTTPRequest) -> bool:
    return (
        is_get(request)
        and request.path == PLAY_PATH
        and "guess=" in request.query.lower()
    )
