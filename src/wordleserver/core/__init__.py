"""
=============================================================================
CORE NETWORKING
=============================================================================

Transport layer: sockets and threads, no HTTP knowledge.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer     listening socket + accept loop                   │
    │        │                                                             │
    │        ▼                                                             │
    │   Connection       one accepted client, one request, then closed    │
    │        │                                                             │
    │        ▼                                                             │
    │   ThreadPool       fixed number of workers draining a task queue    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

One request per connection: the accept loop hands each Connection to the
pool, a worker reads the request, writes the response and closes it.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection
from .thread_pool import ThreadPool, Worker, WorkerState

__all__ = [
    "SocketServer",
    "Connection",
    "ThreadPool",
    "Worker",
    "WorkerState",
]
