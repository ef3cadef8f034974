"""
Unit tests for the play page and static file handler.
"""

import pytest

from wordleserver.game import score
from wordleserver.handlers import (
    PlayPage,
    ResourceNotFound,
    StaticFileHandler,
    colour_guess,
)
from wordleserver.http.request import HTTPRequest


class TestPlayPage:
    """Tests for PlayPage rendering."""

    def test_blank_page_has_form(self):
        page = PlayPage().render()

        assert page.startswith("<!DOCTYPE html>")
        assert '<form action="/play.html" method="POST">' in page
        assert 'name="guess"' in page
        assert 'id="answer"' not in page

    def test_scored_guess(self):
        page = PlayPage().render(score("TRACE", "CRANE"), "TRACE")

        assert '<div id="answer">' in page
        assert '<span class="non-existant-letter">T</span>' in page
        assert '<span class="existant-letter">C</span>' in page
        assert "Gameover!" not in page

    def test_game_over_note(self):
        page = PlayPage().render(score("CRANE", "CRANE"), "CRANE", game_over=True)

        assert '<p class="game-over">Gameover!</p>' in page

    def test_word_length_in_copy(self):
        page = PlayPage(word_length=4, max_attempts=8).render()

        assert "Guess the 4-letter word in 8 tries." in page
        assert 'maxlength="4"' in page

    def test_colour_guess(self):
        spans = colour_guess(score("TRACE", "CRANE"), "TRACE")

        assert spans == (
            '<span class="non-existant-letter">T</span>'
            '<span class="correct-letter">R</span>'
            '<span class="correct-letter">A</span>'
            '<span class="existant-letter">C</span>'
            '<span class="correct-letter">E</span>'
        )

    def test_colour_guess_escapes(self):
        spans = colour_guess(score("<ABC", "XABC"), "<ABC")

        assert "&lt;" in spans
        assert "<span class=\"non-existant-letter\">&lt;</span>" in spans


class TestStaticFileHandler:
    """Tests for StaticFileHandler class."""

    @pytest.fixture
    def root(self, tmp_path):
        (tmp_path / "play.html").write_text("<html>play</html>")
        (tmp_path / "style.css").write_text("body {}")
        (tmp_path / "img").mkdir()
        (tmp_path / "img" / "logo.png").write_bytes(b"\x89PNG")
        return tmp_path

    def test_missing_root(self, tmp_path):
        with pytest.raises(ValueError):
            StaticFileHandler(tmp_path / "nope")

    def test_serves_file_with_type(self, root):
        response = StaticFileHandler(root).handle(HTTPRequest("GET", "/style.css"))

        assert response.status == 200
        assert response.body == b"body {}"
        assert response.headers["Content-Type"].startswith("text/css")
        assert response.headers["Cache-Control"] == "no-cache"

    def test_binary_file(self, root):
        content, content_type = StaticFileHandler(root).load("/img/logo.png")

        assert content == b"\x89PNG"
        assert content_type == "image/png"

    def test_directory_serves_index(self, root):
        assert StaticFileHandler(root).resolve("/") == (root / "play.html").resolve()

    def test_missing_file_is_404(self, root):
        response = StaticFileHandler(root).handle(HTTPRequest("GET", "/missing.js"))

        assert response.status == 404
        assert response.body == b"File not found"

    def test_traversal_blocked(self, root):
        handler = StaticFileHandler(root / "img")

        with pytest.raises(ResourceNotFound):
            handler.resolve("/../play.html")

        response = handler.handle(HTTPRequest("GET", "/../play.html"))
        assert response.status == 404

    def test_cache_max_age(self, root):
        handler = StaticFileHandler(root, cache_max_age=60)

        response = handler.handle(HTTPRequest("GET", "/play.html"))

        assert response.headers["Cache-Control"] == "public, max-age=60"
