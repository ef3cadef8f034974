"""
=============================================================================
WORDLESERVER
=============================================================================

A single-player word-guessing game served over a hand-written HTTP/1.1
server: raw sockets, a fixed thread pool, and no HTTP library.

=============================================================================
ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   core/          SocketServer → Connection → ThreadPool              │
    │                         │                                            │
    │   http/          RequestParser → RequestRouter → ResponseFramer     │
    │                         │              │                             │
    │   middleware/    LoggingMiddleware     │                             │
    │                                        ▼                             │
    │   game/          SessionStore ↔ GameEngine ↔ WordDictionary          │
    │                                        │                             │
    │   handlers/      PlayPage, StaticFileHandler                         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PLAYING
=============================================================================

    $ wordleserver 4
    $ curl -i 'http://127.0.0.1:8021/play.html?guess=crane'
    HTTP/1.1 200 OK
    Content-Type: application/json; charset=utf-8
    Set-Cookie: SESSIONID=...; Max-Age=1800; SameSite=Strict
    Connection: close
    ...

    {"result":"BYBBG","attempts":["CRANE"]}

Send the SESSIONID cookie back to keep playing the same word. Six guesses
per word; "GGGGG GAMEOVER" means it was found.

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import WordleServer

__all__ = ["WordleServer", "ServerConfig", "__version__"]
