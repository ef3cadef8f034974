"""
=============================================================================
WORDLE SERVER
=============================================================================

Ties the transport, the HTTP layer and the game together.

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │  SocketServer.accept()                     (accept thread)          │
    │        │                                                             │
    │        ▼                                                             │
    │  ThreadPool.submit(_process_connection)                              │
    │        │                                                             │
    │        ▼                                   (worker thread)          │
    │  RequestParser.parse(conn.reader)                                    │
    │        │   MalformedRequest / TruncatedBody / timeout                │
    │        │   └──► log, close, no response                             │
    │        ▼                                                             │
    │  LoggingMiddleware → RequestRouter.handle                            │
    │        │   SessionStore ↔ GameEngine                                 │
    │        │   unexpected exception ──► 500                             │
    │        ▼                                                             │
    │  ResponseFramer.frame → conn.send_response → conn.close             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

No error in one connection reaches the accept loop or the other workers.

=============================================================================
"""

import logging
import random
import socket
from typing import Callable, Optional, Tuple

from .config import ServerConfig
from .core import Connection, SocketServer, ThreadPool
from .game import GameEngine, SessionStore, WordDictionary
from .handlers import PlayPage, StaticFileHandler
from .http import (
    Framing,
    HTTPParseError,
    HTTPRequest,
    HTTPResponse,
    RequestParser,
    RequestRouter,
    ResponseFramer,
    internal_error,
)
from .middleware import LoggingMiddleware, MiddlewarePipeline

logger = logging.getLogger(__name__)


class WordleServer:
    """
    The word-game HTTP server.

    Usage:
        server = WordleServer(ServerConfig(port=8021, workers=8))
        server.run()        # Blocks until SIGINT/SIGTERM or stop()

    Components (all built from the config):
        dictionary  WordDictionary    built-in words or config.word_file
        engine      GameEngine        scoring + attempt policy
        store       SessionStore      shared by every worker
        router      RequestRouter     route table + guess flow
        framer      ResponseFramer    content-length or chunked
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        dictionary: Optional[WordDictionary] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            config: Server configuration; defaults if omitted.
            dictionary: Word list override (tests pin the target with a
                        one-word dictionary).
            rng: Random source for target selection.

        Raises:
            ValueError: Invalid configuration, word file or static dir.
            OSError: Word file cannot be read.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        if dictionary is None:
            if self.config.word_file:
                dictionary = WordDictionary.from_file(self.config.word_file)
            else:
                dictionary = WordDictionary.default()
        self.dictionary = dictionary

        self.engine = GameEngine(
            dictionary,
            max_attempts=self.config.max_attempts,
            rng=rng,
        )
        self.store = SessionStore(self.engine, ttl=self.config.session_ttl)

        static = None
        if self.config.static_dir:
            static = StaticFileHandler(self.config.static_dir)

        self.router = RequestRouter(
            self.store,
            page=PlayPage(
                word_length=dictionary.word_length,
                max_attempts=self.config.max_attempts,
            ),
            static=static,
            cookie_max_age=self.config.cookie_max_age,
        )

        self.framer = ResponseFramer(
            Framing(self.config.response_framing),
            chunk_size=self.config.chunk_size,
            server_name=self.config.server_name,
        )

        self._parser = RequestParser(
            max_line_length=self.config.max_line_length,
            max_body_size=self.config.max_request_size,
        )
        self._middleware = MiddlewarePipeline()
        self._middleware.add(LoggingMiddleware(log_format=self.config.log_format))

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            workers=self.config.workers,
            queue_size=self.config.queue_size,
        )
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the OS-assigned port when configured as 0."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self):
        """Serve until stop() or a shutdown signal. Blocks."""
        self._setup_logging()
        self._handler = self._middleware.wrap(self.router.handle)
        self._thread_pool.start()

        logger.info(
            f"{self.config.server_name}: {len(self.dictionary)} words, "
            f"{self.config.workers} workers, "
            f"{self.config.response_framing} framing"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is up (for tests)."""
        return self._socket_server.wait_until_ready(timeout)

    def stop(self):
        """Ask run() to return. Safe from any thread."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("wordleserver").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        stats = self._thread_pool.shutdown(wait=True, timeout=self.config.shutdown_timeout)
        handled = stats["tasks"]["completed"] if stats else 0
        logger.info(
            f"Server stopped ({handled} connections handled, "
            f"{len(self.store)} sessions discarded)"
        )

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Hand an accepted connection to the pool (accept thread)."""
        if not self._thread_pool.submit(self._process_connection, args=(conn,)):
            logger.warning(f"[{conn.id}] Worker queue full, dropping connection")
            conn.close()

    def _process_connection(self, conn: Connection):
        """Read one request, answer it, close (worker thread)."""
        with conn:
            try:
                request = conn.read_request(self._parser)
            except HTTPParseError as e:
                logger.warning(f"[{conn.id}] Bad request from {conn.client_ip}: {e}")
                return
            except socket.timeout:
                logger.info(f"[{conn.id}] Timed out waiting for {conn.client_ip}")
                return
            except OSError as e:
                logger.warning(f"[{conn.id}] Read failed: {e}")
                return

            response = self.handle_request(request, conn.id)
            conn.send_response(
                self.framer.frame(response, request_version=request.version)
            )

    def handle_request(self, request: HTTPRequest, conn_id: str = "-") -> HTTPResponse:
        """Run a parsed request through middleware and router; 500 on a bug."""
        handler = self._handler or self._middleware.wrap(self.router.handle)
        try:
            return handler(request)
        except Exception as e:
            logger.exception(f"[{conn_id}] Handler error: {e}")
            return internal_error()
