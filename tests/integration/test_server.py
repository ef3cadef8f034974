"""
End-to-end tests: real sockets against a running server.
"""

import json
import socket
import threading
from typing import Optional

import pytest

from wordleserver import ServerConfig, WordleServer
from wordleserver.game import WordDictionary
from wordleserver.http.request import HTTPRequest


class Reply:
    """A raw HTTP response split into its parts."""

    def __init__(self, raw: bytes):
        head, _, self.raw_body = raw.partition(b"\r\n\r\n")
        lines = head.decode("utf-8").split("\r\n")
        self.status_line = lines[0]
        self.status = int(lines[0].split(" ")[1])
        self.headers = dict(line.split(": ", 1) for line in lines[1:])

    @property
    def body(self) -> bytes:
        if self.headers.get("Transfer-Encoding") == "chunked":
            return dechunk(self.raw_body)
        return self.raw_body

    @property
    def token(self) -> Optional[str]:
        cookie = self.headers.get("Set-Cookie")
        if cookie is None:
            return None
        return cookie.split(";")[0].split("=", 1)[1]


def dechunk(body: bytes) -> bytes:
    out = b""
    while True:
        size_line, _, rest = body.partition(b"\r\n")
        size = int(size_line, 16)
        if size == 0:
            return out
        out += rest[:size]
        body = rest[size + 2:]


def get(path: str, token: Optional[str] = None) -> bytes:
    cookie = f"Cookie: SESSIONID={token}\r\n" if token else ""
    return (
        f"GET {path} HTTP/1.1\r\n"
        f"Host: localhost\r\n"
        f"{cookie}"
        f"\r\n"
    ).encode()


def post(body: str, token: Optional[str] = None) -> bytes:
    cookie = f"Cookie: SESSIONID={token}\r\n" if token else ""
    data = body.encode()
    return (
        f"POST /play.html HTTP/1.1\r\n"
        f"Host: localhost\r\n"
        f"Content-Type: application/x-www-form-urlencoded\r\n"
        f"Content-Length: {len(data)}\r\n"
        f"{cookie}"
        f"\r\n"
    ).encode() + data


class TestGameOverHTTP:
    """A full game played over the wire."""

    def test_redirect(self, test_server):
        reply = Reply(test_server.request(get("/")))

        assert reply.status_line == "HTTP/1.1 302 Found"
        assert reply.headers["Location"] == "/play.html"
        assert reply.headers["Connection"] == "close"

    def test_full_game(self, test_server):
        first = Reply(test_server.request(get("/play.html")))
        token = first.token
        assert first.status == 200
        assert token

        miss = Reply(test_server.request(get("/play.html?guess=trace", token)))
        assert miss.token is None
        assert json.loads(miss.body) == {"result": "BGGYG", "attempts": ["TRACE"]}
        assert miss.headers["Content-Length"] == str(len(miss.body))

        win = Reply(test_server.request(get("/play.html?guess=crane", token)))
        assert json.loads(win.body) == {
            "result": "GGGGG GAMEOVER",
            "attempts": ["TRACE", "CRANE"],
        }

        after = Reply(test_server.request(get("/play.html", token)))
        assert after.token not in (None, token)

    def test_six_attempts_then_rejected(self, test_server):
        token = Reply(test_server.request(get("/play.html"))).token

        for _ in range(6):
            reply = Reply(test_server.request(get("/play.html?guess=slate", token)))
            assert reply.status == 200

        reply = Reply(test_server.request(get("/play.html?guess=slate", token)))
        assert reply.status == 400
        assert reply.body == b"Invalid request : you already tried too many Words"

    def test_post_form(self, test_server):
        reply = Reply(test_server.request(post("guess=trace")))

        assert reply.status == 200
        assert reply.headers["Content-Type"].startswith("text/html")
        assert b'<span class="correct-letter">R</span>' in reply.body
        assert reply.token

    def test_post_without_length(self, test_server):
        raw = b"POST /play.html HTTP/1.1\r\nHost: localhost\r\n\r\n"

        reply = Reply(test_server.request(raw))

        assert reply.status_line == "HTTP/1.1 411 Length Required"

    def test_unsupported_method(self, test_server):
        reply = Reply(test_server.request(b"PUT /play.html HTTP/1.1\r\n\r\n"))

        assert reply.status == 400
        assert reply.body == b"Invalid request : not a GET nor a POST method"

    def test_unsupported_version(self, test_server):
        reply = Reply(test_server.request(b"GET /play.html HTTP/2.0\r\n\r\n"))

        assert reply.status_line == "HTTP/1.1 505 HTTP Version Not Supported"

    def test_malformed_request_gets_no_response(self, test_server):
        assert test_server.request(b"GARBAGE\r\n\r\n") == b""

    def test_truncated_body_gets_no_response(self, test_server):
        raw = b"POST /play.html HTTP/1.1\r\nContent-Length: 50\r\n\r\nguess=crane"

        # The client closes its write side so the server sees EOF early
        with socket.create_connection(("127.0.0.1", test_server.port), timeout=5.0) as s:
            s.sendall(raw)
            s.shutdown(socket.SHUT_WR)
            assert s.recv(4096) == b""

    def test_concurrent_players(self, test_server):
        """Independent sessions on parallel connections."""
        results = {}
        errors = []

        def play(n: int):
            try:
                token = Reply(test_server.request(get("/play.html"))).token
                reply = Reply(test_server.request(get("/play.html?guess=crane", token)))
                results[n] = json.loads(reply.body)["result"]
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=play, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)

        assert not errors
        assert results == {i: "GGGGG GAMEOVER" for i in range(8)}


class TestChunkedServer:
    """Responses framed with chunked transfer coding."""

    def test_chunked_page(self, chunked_server):
        reply = Reply(chunked_server.request(get("/play.html")))

        assert reply.headers["Transfer-Encoding"] == "chunked"
        assert "Content-Length" not in reply.headers
        assert reply.raw_body.endswith(b"0\r\n\r\n")
        assert reply.body.startswith(b"<!DOCTYPE html>")
        assert reply.body.rstrip().endswith(b"</html>")

    def test_chunked_json(self, chunked_server):
        token = Reply(chunked_server.request(get("/play.html"))).token

        reply = Reply(chunked_server.request(get("/play.html?guess=trace", token)))

        assert json.loads(reply.body) == {"result": "BGGYG", "attempts": ["TRACE"]}

    def test_http10_client_gets_content_length(self, chunked_server):
        reply = Reply(chunked_server.request(b"GET /play.html HTTP/1.0\r\n\r\n"))

        assert reply.status == 200
        assert "Transfer-Encoding" not in reply.headers
        assert int(reply.headers["Content-Length"]) == len(reply.raw_body)
        assert reply.raw_body.startswith(b"<!DOCTYPE html>")


class TestHandleRequest:
    """WordleServer.handle_request without sockets."""

    @pytest.fixture
    def server(self, config: ServerConfig, dictionary: WordDictionary) -> WordleServer:
        return WordleServer(config, dictionary=dictionary)

    def test_routes_request(self, server: WordleServer):
        response = server.handle_request(HTTPRequest("GET", "/"))

        assert response.status == 302

    def test_handler_bug_is_500(self, server: WordleServer):
        def boom(request, session):
            raise RuntimeError("boom")

        server.router.add_route("boom", lambda r: True, boom, position=0)

        response = server.handle_request(HTTPRequest("GET", "/play.html"))

        assert response.status == 500

    def test_static_dir(self, config: ServerConfig, dictionary: WordDictionary, tmp_path):
        (tmp_path / "play.html").write_text("<html>disk</html>")
        config.static_dir = str(tmp_path)
        server = WordleServer(config, dictionary=dictionary)

        response = server.handle_request(HTTPRequest("GET", "/play.html"))

        assert response.body == b"<html>disk</html>"

    def test_invalid_config_rejected(self, dictionary: WordDictionary):
        with pytest.raises(ValueError):
            WordleServer(ServerConfig(workers=0), dictionary=dictionary)

    def test_word_file(self, config: ServerConfig, tmp_path):
        path = tmp_path / "words.txt"
        path.write_text("slate\n")
        config.word_file = str(path)

        server = WordleServer(config)

        assert list(server.dictionary) == ["SLATE"]
