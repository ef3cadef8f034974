"""
=============================================================================
REQUEST HANDLERS
=============================================================================

Content the router serves outside the guess flow.

1. PlayPage
   - The HTML document at /play.html
   - Renders a scored guess as coloured letters after a POST

2. StaticFileHandler
   - Optional: serves play.html and its assets from a directory
   - Path traversal protection; anything unservable is a 404

=============================================================================
USAGE
=============================================================================

    from wordleserver.handlers import PlayPage, StaticFileHandler

    page = PlayPage()
    html = page.render(outcome.result, outcome.guess, game_over=outcome.won)

    static = StaticFileHandler("/srv/wordle")
    response = static.handle(request)

=============================================================================
"""

from .play_page import PlayPage, colour_guess
from .static import StaticFileHandler, ResourceNotFound

__all__ = [
    "PlayPage",
    "colour_guess",
    "StaticFileHandler",
    "ResourceNotFound",
]
