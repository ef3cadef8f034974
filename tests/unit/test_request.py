"""
Unit tests for HTTP request parsing.
"""

import io

import pytest

from wordleserver.http.request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    MalformedRequest,
    TruncatedBody,
    extract_session_token,
    find_header,
    parse_request,
    split_target,
)


def parse(raw: bytes, **kwargs) -> HTTPRequest:
    """Parse raw bytes through a BytesIO stream."""
    return RequestParser(**kwargs).parse(io.BytesIO(raw), ("127.0.0.1", 12345))


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Request line is split into method, path, query and version."""
        request = parse(sample_get_request)

        assert request.method == "GET"
        assert request.path == "/play.html"
        assert request.query == "guess=crane"
        assert request.version == "HTTP/1.1"
        assert request.client_address == ("127.0.0.1", 12345)
        assert request.body == b""

    def test_parse_headers(self, sample_get_request: bytes):
        """Header names keep their case; lookup ignores it."""
        request = parse(sample_get_request)

        assert request.headers["Host"] == "localhost:8021"
        assert request.get_header("host") == "localhost:8021"
        assert request.user_agent == "pytest"

    def test_session_token_from_cookie(self, sample_get_request: bytes):
        """SESSIONID is picked out of a multi-cookie header."""
        request = parse(sample_get_request)

        assert request.session_token == "abc-123"

    def test_no_cookie_means_no_token(self):
        request = parse(b"GET / HTTP/1.1\r\nHost: x\r\n\r\n")

        assert request.session_token is None

    def test_parse_post_with_body(self, sample_post_request: bytes):
        """Exactly Content-Length bytes are read as the body."""
        request = parse(sample_post_request)

        assert request.method == "POST"
        assert request.body == b"guess=slate"
        assert request.text == "guess=slate"
        assert request.content_length == 11

    def test_body_stops_at_content_length(self):
        """Bytes after the declared length are left on the stream."""
        stream = io.BytesIO(
            b"POST /play.html HTTP/1.1\r\nContent-Length: 5\r\n\r\nhelloEXTRA"
        )
        request = RequestParser().parse(stream)

        assert request.body == b"hello"
        assert stream.read() == b"EXTRA"

    def test_no_content_length_means_empty_body(self):
        request = parse(b"POST /play.html HTTP/1.1\r\nHost: x\r\n\r\nguess=crane")

        assert request.body == b""
        assert request.content_length is None

    def test_duplicate_header_last_wins(self):
        """A repeated header keeps its last value."""
        raw = (
            b"GET / HTTP/1.1\r\n"
            b"X-Player: first\r\n"
            b"X-Player: second\r\n"
            b"\r\n"
        )
        request = parse(raw)

        assert request.get_header("X-Player") == "second"

    def test_header_without_separator_is_skipped(self):
        """Lines that do not split on ': ' are ignored."""
        raw = b"GET / HTTP/1.1\r\nGarbage\r\nNoSpace:value\r\nHost: x\r\n\r\n"
        request = parse(raw)

        assert request.headers == {"Host": "x"}

    def test_header_block_may_end_at_eof(self):
        """A stream that ends without the blank line still parses."""
        request = parse(b"GET /play.html HTTP/1.1\r\nHost: x\r\n")

        assert request.path == "/play.html"
        assert request.get_header("Host") == "x"

    def test_bare_lf_line_endings(self):
        request = parse(b"GET /play.html HTTP/1.1\nHost: x\n\n")

        assert request.get_header("Host") == "x"

    def test_unknown_method_is_parsed(self):
        """Method policy belongs to the router, not the parser."""
        request = parse(b"DELETE /play.html HTTP/1.1\r\n\r\n")

        assert request.method == "DELETE"


class TestParseErrors:
    """Malformed input raises the right exception."""

    def test_empty_stream(self):
        with pytest.raises(MalformedRequest):
            parse(b"")

    @pytest.mark.parametrize("line", [
        b"GET\r\n",
        b"GET /play.html\r\n",
        b"GET /play.html HTTP/1.1 extra\r\n",
        b"GET  /play.html HTTP/1.1\r\n",
    ])
    def test_request_line_needs_three_tokens(self, line: bytes):
        with pytest.raises(MalformedRequest):
            parse(line + b"\r\n")

    def test_truncated_body(self):
        """Fewer body bytes than announced → TruncatedBody."""
        raw = b"POST /play.html HTTP/1.1\r\nContent-Length: 20\r\n\r\nguess=crane"

        with pytest.raises(TruncatedBody):
            parse(raw)

    @pytest.mark.parametrize("value", [b"abc", b"-1", b"1.5"])
    def test_invalid_content_length(self, value: bytes):
        raw = b"POST / HTTP/1.1\r\nContent-Length: " + value + b"\r\n\r\n"

        with pytest.raises(MalformedRequest):
            parse(raw)

    def test_body_over_limit(self):
        raw = b"POST / HTTP/1.1\r\nContent-Length: 100\r\n\r\n" + b"x" * 100

        with pytest.raises(MalformedRequest):
            parse(raw, max_body_size=10)

    def test_line_over_limit(self):
        raw = b"GET /" + b"a" * 300 + b" HTTP/1.1\r\n\r\n"

        with pytest.raises(MalformedRequest):
            parse(raw, max_line_length=100)

    def test_too_many_headers(self):
        headers = b"".join(f"X-{i}: v\r\n".encode() for i in range(5))

        with pytest.raises(MalformedRequest):
            parse(b"GET / HTTP/1.1\r\n" + headers + b"\r\n", max_headers=3)

    def test_errors_share_base_class(self):
        assert issubclass(MalformedRequest, HTTPParseError)
        assert issubclass(TruncatedBody, HTTPParseError)


class TestHelpers:
    """Tests for module-level helper functions."""

    def test_split_target(self):
        assert split_target("/play.html?guess=crane") == ("/play.html", "guess=crane")
        assert split_target("/play.html") == ("/play.html", "")
        assert split_target("/a?b=1?c=2") == ("/a", "b=1?c=2")

    def test_extract_session_token(self):
        assert extract_session_token("SESSIONID=xyz") == "xyz"
        assert extract_session_token("theme=dark; SESSIONID=xyz; lang=fr") == "xyz"
        assert extract_session_token("theme=dark") is None
        assert extract_session_token("SESSIONID=") is None
        assert extract_session_token(None) is None

    def test_extract_session_token_first_wins(self):
        assert extract_session_token("SESSIONID=one; SESSIONID=two") == "one"

    def test_find_header_case_insensitive(self):
        headers = {"content-length": "5"}

        assert find_header(headers, "Content-Length") == "5"
        assert find_header(headers, "X-Missing") is None
        assert find_header(headers, "X-Missing", "d") == "d"

    def test_parse_request_convenience(self, sample_get_request: bytes):
        request = parse_request(io.BytesIO(sample_get_request))

        assert request.target == "/play.html?guess=crane"
