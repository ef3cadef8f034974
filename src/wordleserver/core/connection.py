"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket for the lifetime of exactly one request:

    accept → read one request → write one response → close

There is no keep-alive. Every response says "Connection: close" and the
server closes its side as soon as the response is written.

=============================================================================
READING
=============================================================================

The socket is wrapped in a buffered binary file (socket.makefile("rb")) so
the parser can use readline() for the request line and headers and read(n)
for the body. The socket timeout applies to every blocking read: a client
that sends nothing for `timeout` seconds gets socket.timeout raised into
the worker, which drops the connection.

=============================================================================
CLOSING
=============================================================================

close() sends FIN (SHUT_WR), drains whatever the client still sends for up
to half a second, then closes the descriptor. Closing twice is a no-op.

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from typing import BinaryIO, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..http.request import HTTPRequest, RequestParser

logger = logging.getLogger(__name__)


@dataclass
class Connection:
    """
    One client connection.

    Usage:
        with Connection(client_socket, address, timeout=300.0) as conn:
            request = conn.read_request(parser)
            conn.send_response(framer.frame(response))

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port).
        id: Short identifier used in log lines.
        timeout: Idle timeout in seconds for each blocking socket call.
        created_at: Wall-clock accept time.
        closed: Set once close() has run.
    """

    socket: socket.socket
    address: tuple[str, int]
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    timeout: Optional[float] = 300.0
    buffer_size: int = 8192
    created_at: float = field(default_factory=time.time)
    closed: bool = False

    _reader: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        # Accepted sockets inherit the listener's short accept timeout
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def reader(self) -> BinaryIO:
        """Buffered binary stream over the socket, created on first use."""
        if self._reader is None:
            self._reader = self.socket.makefile("rb", buffering=self.buffer_size)
        return self._reader

    def read_request(self, parser: "RequestParser") -> "HTTPRequest":
        """
        Parse one request off the socket.

        Raises:
            HTTPParseError: Malformed or truncated request.
            socket.timeout: Client idle longer than timeout.
            OSError: Connection reset while reading.
        """
        return parser.parse(self.reader, self.address)

    def send_response(self, data: bytes) -> bool:
        """
        Write a complete framed response.

        Returns:
            True if every byte was handed to the kernel, False if the
            client went away first.
        """
        try:
            self.socket.sendall(data)
            return True
        except (ConnectionResetError, BrokenPipeError, OSError) as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    def close(self):
        """
        Close gracefully: FIN our side, drain what the client still sends,
        then release the descriptor. Safe to call twice.
        """
        if self.closed:
            return
        self.closed = True

        if self._reader is not None:
            try:
                self._reader.close()
            except OSError:
                pass

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except (socket.timeout, OSError):
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        logger.debug(
            f"[{self.id}] Connection closed after "
            f"{time.time() - self.created_at:.3f}s"
        )

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
