"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Every tunable of the word-game server in one dataclass.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── wordleserver 8 --port 9000                                 │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── WORDLE_PORT=9000 wordleserver 8                            │
    │                                                                      │
    │   3. Default values (in this dataclass)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ENVIRONMENT VARIABLES
=============================================================================

    WORDLE_HOST          host
    WORDLE_PORT          port
    WORDLE_WORKERS       workers
    WORDLE_TIMEOUT       timeout (seconds)
    WORDLE_FRAMING       response_framing (content-length | chunked)
    WORDLE_CHUNK_SIZE    chunk_size
    WORDLE_SESSION_TTL   session_ttl (seconds)
    WORDLE_WORD_FILE     word_file
    WORDLE_STATIC_DIR    static_dir
    WORDLE_LOG_LEVEL     log_level
    WORDLE_LOG_FORMAT    log_format (text | json)

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional


FRAMINGS = ("content-length", "chunked")
LOG_FORMATS = ("text", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Server configuration.

        config = ServerConfig(port=9000, workers=8, response_framing="chunked")
        config.validate()
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """IP address to bind. "0.0.0.0" listens on every interface."""

    port: int = 8021
    """TCP port. 0 lets the OS pick a free one (tests)."""

    backlog: int = 128
    """Pending connections the kernel queues before refusing new ones."""

    buffer_size: int = 8192
    """Read buffer of each connection's socket file, in bytes."""

    timeout: Optional[float] = 300.0
    """
    Idle timeout in seconds for every blocking socket read or write.
    None blocks forever.
    """

    # ─────────────────────────────────────────────────────────────────────
    # WORKER POOL
    # ─────────────────────────────────────────────────────────────────────

    workers: int = 4
    """Number of worker threads. Fixed for the life of the server."""

    queue_size: int = 0
    """Connections allowed to wait for a worker; 0 is unbounded."""

    shutdown_timeout: float = 5.0
    """Seconds to let in-flight connections finish on shutdown."""

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST LIMITS
    # ─────────────────────────────────────────────────────────────────────

    max_request_size: int = 1024 * 1024
    """Largest accepted Content-Length, in bytes."""

    max_line_length: int = 8192
    """Longest accepted request line or header line, in bytes."""

    # ─────────────────────────────────────────────────────────────────────
    # RESPONSE FRAMING
    # ─────────────────────────────────────────────────────────────────────

    response_framing: str = "content-length"
    """How response bodies are delimited: "content-length" or "chunked"."""

    chunk_size: int = 128
    """Bytes per chunk when response_framing is "chunked"."""

    # ─────────────────────────────────────────────────────────────────────
    # GAME
    # ─────────────────────────────────────────────────────────────────────

    session_ttl: Optional[float] = 1800.0
    """
    Idle seconds before a session is forgotten. Also the cookie Max-Age.
    None keeps sessions until they are won or exhausted.
    """

    max_attempts: int = 6
    """Guesses allowed per session."""

    word_file: Optional[str] = None
    """Word list to draw targets from; the built-in list when None."""

    static_dir: Optional[str] = None
    """Serve non-guess GETs from this directory instead of the built-in page."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING / IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    log_format: str = "text"
    """Access log format: "text" or "json"."""

    server_name: str = "WordleServer/1.0"
    """Value of the Server response header."""

    @property
    def cookie_max_age(self) -> int:
        """Max-Age for the session cookie."""
        return int(self.session_ttl) if self.session_ttl else 1800

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        """
        Build a config from WORDLE_* environment variables.

        Unset variables keep the dataclass default.

        Raises:
            ValueError: If a numeric variable does not parse.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        def _get(name: str, default):
            return env.get(f"WORDLE_{name}", default)

        ttl = _get("SESSION_TTL", None)
        return cls(
            host=_get("HOST", defaults.host),
            port=int(_get("PORT", defaults.port)),
            workers=int(_get("WORKERS", defaults.workers)),
            timeout=float(_get("TIMEOUT", defaults.timeout)),
            response_framing=_get("FRAMING", defaults.response_framing),
            chunk_size=int(_get("CHUNK_SIZE", defaults.chunk_size)),
            session_ttl=float(ttl) if ttl is not None else defaults.session_ttl,
            word_file=_get("WORD_FILE", defaults.word_file),
            static_dir=_get("STATIC_DIR", defaults.static_dir),
            log_level=_get("LOG_LEVEL", defaults.log_level).upper(),
            log_format=_get("LOG_FORMAT", defaults.log_format),
        )

    def validate(self) -> None:
        """
        Check every value at startup.

        Raises:
            ValueError: Naming the first invalid field.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.workers < 1:
            raise ValueError("workers must be >= 1")

        if self.queue_size < 0:
            raise ValueError("queue_size must be >= 0")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.response_framing not in FRAMINGS:
            raise ValueError(
                f"response_framing must be one of {', '.join(FRAMINGS)}"
            )

        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

        if self.session_ttl is not None and self.session_ttl <= 0:
            raise ValueError("session_ttl must be > 0")

        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        if self.max_line_length < 256:
            raise ValueError("max_line_length must be >= 256")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")
