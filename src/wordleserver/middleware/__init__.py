"""
=============================================================================
MIDDLEWARE
=============================================================================

Cross-cutting behaviour wrapped around the router.

    base.py      Middleware ABC, MiddlewarePipeline
    logging.py   LoggingMiddleware (access log, text or JSON)

    pipeline = MiddlewarePipeline()
    pipeline.add(LoggingMiddleware(log_format="text"))
    handler = pipeline.wrap(router.handle)

=============================================================================
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
]
