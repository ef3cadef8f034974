"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Serves files from an optional static directory in place of the built-in
play page (e.g. a hand-edited play.html with its own stylesheet and logo).

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  GET /../../../etc/passwd HTTP/1.1                                  │
    │                                                                      │
    │  Unprotected, this reads:                                           │
    │  /srv/wordle/../../../etc/passwd  →  /etc/passwd                    │
    │                                                                      │
    │  Protection:                                                        │
    │  1. Resolve the full path (follow .. and symlinks)                  │
    │  2. Check it is still inside root_dir                               │
    │  3. If not, answer exactly like a missing file (404)                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    full_path = (root_dir / user_input).resolve()
    full_path.relative_to(root_dir)  # Raises ValueError if outside root

=============================================================================
"""

import logging
from pathlib import Path
from typing import Union

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder, not_found
from ..http.mime_types import get_content_type

logger = logging.getLogger(__name__)


class ResourceNotFound(Exception):
    """No servable file for the requested path (missing, outside root, unreadable)."""

    def __init__(self, path: str):
        super().__init__(f"File not found: {path}")
        self.path = path


class StaticFileHandler:
    """
    Serves files below root_dir.

        static = StaticFileHandler("/srv/wordle")
        static.handle(request)      # GET /play.html → /srv/wordle/play.html

    Directory requests serve index_file from that directory.
    """

    def __init__(
        self,
        root_dir: Union[str, Path],
        index_file: str = "play.html",
        cache_max_age: int = 0,
    ):
        """
        Args:
            root_dir: Directory to serve from. Must exist.
            index_file: File served for directory paths ("/").
            cache_max_age: Cache-Control max-age in seconds; 0 sends no-cache.

        Raises:
            ValueError: If root_dir is not a directory.
        """
        self.root_dir = Path(root_dir).resolve()
        self.index_file = index_file
        self.cache_max_age = cache_max_age

        if not self.root_dir.is_dir():
            raise ValueError(f"Static root directory does not exist: {root_dir}")

    def resolve(self, url_path: str) -> Path:
        """
        Map a URL path to a file inside root_dir.

        Raises:
            ResourceNotFound: If no such file exists inside root_dir.
        """
        relative = url_path.lstrip("/")
        full_path = (self.root_dir / relative).resolve()

        try:
            full_path.relative_to(self.root_dir)
        except ValueError:
            logger.warning(f"Path traversal attempt: {url_path}")
            raise ResourceNotFound(url_path)

        if full_path.is_dir():
            full_path = full_path / self.index_file

        if not full_path.is_file():
            raise ResourceNotFound(url_path)
        return full_path

    def load(self, url_path: str) -> tuple[bytes, str]:
        """
        Read a file and work out its Content-Type.

        Returns:
            (content, content_type)

        Raises:
            ResourceNotFound: Missing file or IO failure while reading it.
        """
        path = self.resolve(url_path)
        try:
            content = path.read_bytes()
        except OSError as e:
            logger.error(f"Error reading file {path}: {e}")
            raise ResourceNotFound(url_path) from e
        return content, get_content_type(path)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        try:
            content, content_type = self.load(request.path)
        except ResourceNotFound:
            return not_found("File not found")

        if self.cache_max_age > 0:
            cache_control = f"public, max-age={self.cache_max_age}"
        else:
            cache_control = "no-cache"

        return (ResponseBuilder()
            .file(content, content_type)
            .header("Cache-Control", cache_control)
            .build())
