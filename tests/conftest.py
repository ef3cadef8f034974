"""
pytest configuration and fixtures.
"""

import random
import socket
import threading
from typing import Generator, Optional

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from wordleserver import ServerConfig, WordleServer
from wordleserver.game import GameEngine, SessionStore, WordDictionary


TARGET = "CRANE"


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample GET guess request carrying a session cookie."""
    return (
        b"GET /play.html?guess=crane HTTP/1.1\r\n"
        b"Host: localhost:8021\r\n"
        b"User-Agent: pytest\r\n"
        b"Cookie: theme=dark; SESSIONID=abc-123\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample POST guess request with a form body."""
    body = b"guess=slate"
    return (
        b"POST /play.html HTTP/1.1\r\n"
        b"Host: localhost:8021\r\n"
        b"Content-Type: application/x-www-form-urlencoded\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
        + body
    )


@pytest.fixture
def dictionary() -> WordDictionary:
    """One-word dictionary so every session's target is CRANE."""
    return WordDictionary([TARGET])


@pytest.fixture
def engine(dictionary: WordDictionary) -> GameEngine:
    return GameEngine(dictionary, rng=random.Random(0))


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(engine: GameEngine, clock: FakeClock) -> SessionStore:
    return SessionStore(engine, ttl=1800.0, clock=clock)


@pytest.fixture
def config() -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        workers=2,
        timeout=5.0,
        log_level="WARNING",
    )


class TestServer:
    """Runs a WordleServer in a background thread."""

    __test__ = False  # Not a test class

    def __init__(self, server: WordleServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start the server and wait until it is listening."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server and wait for run() to return."""
        self.server.stop()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def request(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes and read until the server closes the connection."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=timeout) as s:
            s.sendall(raw)
            chunks = []
            while True:
                data = s.recv(4096)
                if not data:
                    break
                chunks.append(data)
        return b"".join(chunks)


def start_server(config: ServerConfig, dictionary: WordDictionary) -> TestServer:
    server = WordleServer(config, dictionary=dictionary, rng=random.Random(0))
    test_srv = TestServer(server)
    test_srv.start()
    return test_srv


@pytest.fixture
def test_server(config: ServerConfig, dictionary: WordDictionary) -> Generator[TestServer, None, None]:
    """A running server whose target word is always CRANE."""
    test_srv = start_server(config, dictionary)
    yield test_srv
    test_srv.stop()


@pytest.fixture
def chunked_server(config: ServerConfig, dictionary: WordDictionary) -> Generator[TestServer, None, None]:
    """Same as test_server, with chunked response framing."""
    config.response_framing = "chunked"
    test_srv = start_server(config, dictionary)
    yield test_srv
    test_srv.stop()
