"""
=============================================================================
MIDDLEWARE PIPELINE
=============================================================================

Middleware runs around the router, seeing each request before it is routed
and each response before it is framed:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   request ──► MW1 ──► MW2 ──► router.handle                         │
    │                                   │                                  │
    │   response ◄── MW1 ◄── MW2 ◄──────┘                                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A middleware is a callable (request, next) → response. It may:

    - call next(request) and return its response (pass-through)
    - change the response returned by next (add a header)
    - return its own response without calling next (short-circuit)
    - time, log or count the call

The first middleware added is the outermost one.

=============================================================================
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, List

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse

logger = logging.getLogger(__name__)


# The next handler in the chain: another middleware or the router itself
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Base class for middleware.

        class ServerTiming(Middleware):
            def __call__(self, request, next):
                start = time.perf_counter()
                response = next(request)
                elapsed = (time.perf_counter() - start) * 1000
                response.set_header("Server-Timing", f"app;dur={elapsed:.1f}")
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """
        Process one request.

        Args:
            request: The parsed request.
            next: Calls the rest of the chain.

        Returns:
            The response to send.
        """

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Ordered list of middleware that wraps a final handler.

        pipeline = MiddlewarePipeline()
        pipeline.add(LoggingMiddleware())
        handler = pipeline.wrap(router.handle)
        response = handler(request)
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """Append middleware (runs inside everything added before it)."""
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        for mw in middleware:
            self.add(mw)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Build the call chain around handler.

        Wrapping happens in reverse so the first-added middleware ends up
        outermost:

            [MW1, MW2] + handler  →  MW1(MW2(handler))
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._bind(middleware, current)
        return current

    @staticmethod
    def _bind(middleware: Middleware, next_handler: NextHandler) -> NextHandler:
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)
        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)
