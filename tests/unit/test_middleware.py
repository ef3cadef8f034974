"""
Unit tests for the middleware pipeline and access logging.
"""

import json
import logging

import pytest

from wordleserver.http.request import HTTPRequest
from wordleserver.http.response import HTTPResponse, ResponseBuilder
from wordleserver.middleware import LoggingMiddleware, Middleware, MiddlewarePipeline
from wordleserver.middleware.logging import minted_token

ACCESS_LOGGER = "wordleserver.access"


def ok_handler(request: HTTPRequest) -> HTTPResponse:
    return ResponseBuilder().text("ok").build()


class Tag(Middleware):
    """Records the order in which it runs."""

    def __init__(self, label: str, calls: list):
        self.label = label
        self.calls = calls

    def __call__(self, request, next):
        self.calls.append(f"{self.label}:in")
        response = next(request)
        self.calls.append(f"{self.label}:out")
        return response


class ShortCircuit(Middleware):
    def __call__(self, request, next):
        return ResponseBuilder().status(400).text("blocked").build()


class TestMiddlewarePipeline:
    """Tests for MiddlewarePipeline class."""

    def test_empty_pipeline_is_handler(self):
        handler = MiddlewarePipeline().wrap(ok_handler)

        assert handler(HTTPRequest("GET", "/")).body == b"ok"

    def test_first_added_is_outermost(self):
        calls = []
        pipeline = MiddlewarePipeline().use(Tag("a", calls), Tag("b", calls))

        pipeline.wrap(ok_handler)(HTTPRequest("GET", "/"))

        assert calls == ["a:in", "b:in", "b:out", "a:out"]

    def test_short_circuit(self):
        pipeline = MiddlewarePipeline().add(ShortCircuit())

        response = pipeline.wrap(ok_handler)(HTTPRequest("GET", "/"))

        assert response.body == b"blocked"

    def test_len_and_name(self):
        calls = []
        a, b = Tag("a", calls), Tag("b", calls)
        pipeline = MiddlewarePipeline().use(a, b)

        assert len(pipeline) == 2
        assert a.name == "Tag"


class TestLoggingMiddleware:
    """Tests for LoggingMiddleware class."""

    def request(self, **kwargs) -> HTTPRequest:
        defaults = dict(
            method="GET",
            path="/play.html",
            query="guess=crane",
            headers={"User-Agent": "pytest"},
            client_address=("10.0.0.7", 5555),
        )
        defaults.update(kwargs)
        return HTTPRequest(**defaults)

    def test_text_line(self, caplog):
        middleware = LoggingMiddleware()

        with caplog.at_level(logging.INFO, logger=ACCESS_LOGGER):
            middleware(self.request(session_token="3f2a9c1e-aaaa"), ok_handler)

        message = caplog.records[-1].getMessage()
        assert message.startswith("10.0.0.7 - - [")
        assert '"GET /play.html?guess=crane" 200 2 ' in message
        assert message.endswith("session=3f2a9c1e")

    def test_json_line(self, caplog):
        middleware = LoggingMiddleware(log_format="json")

        with caplog.at_level(logging.INFO, logger=ACCESS_LOGGER):
            middleware(self.request(), ok_handler)

        entry = json.loads(caplog.records[-1].getMessage())
        assert entry["method"] == "GET"
        assert entry["status_code"] == 200
        assert entry["client_ip"] == "10.0.0.7"
        assert entry["user_agent"] == "pytest"
        assert entry["session"] == ""
        assert entry["new_session"] is False

    def test_minted_session_logged(self, caplog):
        def minting_handler(request):
            return ResponseBuilder().text("ok").session_cookie("abcdef123456").build()

        middleware = LoggingMiddleware(log_format="json")

        with caplog.at_level(logging.INFO, logger=ACCESS_LOGGER):
            middleware(self.request(), minting_handler)

        entry = json.loads(caplog.records[-1].getMessage())
        assert entry["session"] == "abcdef12"
        assert entry["new_session"] is True

    def test_skip_paths(self, caplog):
        middleware = LoggingMiddleware(skip_paths=["/favicon.ico"])

        with caplog.at_level(logging.INFO, logger=ACCESS_LOGGER):
            middleware(self.request(path="/favicon.ico", query=""), ok_handler)

        assert not [r for r in caplog.records if r.name == ACCESS_LOGGER]

    def test_request_id_header(self):
        middleware = LoggingMiddleware(include_request_id=True)

        response = middleware(self.request(), ok_handler)

        assert len(response.headers["X-Request-ID"]) == 8

    def test_exception_logged_and_reraised(self, caplog):
        def failing(request):
            raise RuntimeError("boom")

        middleware = LoggingMiddleware()

        with caplog.at_level(logging.INFO, logger=ACCESS_LOGGER):
            with pytest.raises(RuntimeError):
                middleware(self.request(), failing)

        assert caplog.records[-1].levelno == logging.ERROR
        assert "RuntimeError: boom" in caplog.records[-1].getMessage()

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            LoggingMiddleware(log_format="xml")


def test_minted_token():
    response = ResponseBuilder().session_cookie("tok-1").build()

    assert minted_token(response) == "tok-1"
    assert minted_token(HTTPResponse()) is None
    assert minted_token(HTTPResponse(headers={"Set-Cookie": "theme=dark"})) is None
