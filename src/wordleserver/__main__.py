"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    wordleserver WORKERS [options]
    python -m wordleserver WORKERS [options]

WORKERS is required: the number of worker threads answering connections.

Settings not given on the command line come from WORDLE_* environment
variables (see config.py), then from the built-in defaults.

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .config import FRAMINGS, LOG_FORMATS, LOG_LEVELS, ServerConfig
from .server import WordleServer


def positive_int(value: str) -> int:
    """argparse type: an integer >= 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid positive integer: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wordleserver",
        description="Word-guessing game over a hand-written HTTP/1.1 server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  wordleserver 4                          # 4 workers on 127.0.0.1:8021
  wordleserver 8 --host 0.0.0.0           # Listen on all interfaces
  wordleserver 4 --framing chunked        # Chunked response bodies
  wordleserver 4 --words words.txt        # Custom word list
  wordleserver 4 --static ./public        # Serve play.html from disk
        """,
    )

    parser.add_argument(
        "workers",
        type=positive_int,
        help="Number of worker threads (required, >= 1)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--host", "-H", help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", "-p", type=int, help="Port to listen on (default: 8021)")
    parser.add_argument(
        "--timeout",
        type=float,
        help="Idle socket timeout in seconds (default: 300)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # HTTP / GAME
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--framing",
        choices=FRAMINGS,
        help="Response body framing (default: content-length; "
             "HTTP/1.0 requests always get content-length)",
    )
    parser.add_argument(
        "--chunk-size",
        type=positive_int,
        help="Chunk size in bytes for chunked framing (default: 128)",
    )
    parser.add_argument("--words", "-w", metavar="FILE", help="Word list file")
    parser.add_argument("--static", "-s", metavar="DIR", help="Static files directory")

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING / META
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging verbosity (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        help="Access log format (default: text)",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"wordleserver {__version__}",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment config with command-line values layered on top."""
    config = ServerConfig.from_env()
    config.workers = args.workers

    overrides = {
        "host": args.host,
        "port": args.port,
        "timeout": args.timeout,
        "response_framing": args.framing,
        "chunk_size": args.chunk_size,
        "word_file": args.words,
        "static_dir": args.static,
        "log_level": args.log_level,
        "log_format": args.log_format,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse arguments, build the server and run it. Returns the exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
        server = WordleServer(config)
    except (ValueError, OSError) as e:
        parser.error(str(e))

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
