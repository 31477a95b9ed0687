"""Tests for dispatch (minihttp.router)."""

import io
import json
from pathlib import Path

import pytest

from minihttp.handlers import PageNotFoundHandler, StaticPageHandler, WebServiceHandler
from minihttp.request import parse_request
from minihttp.router import Router


def request(method: str, path: str):
    return parse_request(f"{method} {path} HTTP/1.1\r\nHost: localhost:3000\r\n\r\n")


def split_response(raw: bytes) -> tuple[str, dict[str, str], str]:
    head, _, body = raw.decode("utf-8").partition("\r\n\r\n")
    status_line, *header_lines = head.split("\r\n")
    headers = {}
    for line in header_lines:
        key, _, value = line.partition(":")
        headers[key] = value.strip()
    return status_line, headers, body


class _ClosedSink:
    def write(self, data: bytes) -> None:
        raise ConnectionResetError("reset by peer")


class TestSelect:
    @pytest.mark.parametrize(
        ("method", "path", "handler"),
        [
            ("GET", "/", StaticPageHandler),
            ("GET", "/health", StaticPageHandler),
            ("GET", "/style.css", StaticPageHandler),
            ("GET", "/api/shipping/orders", WebServiceHandler),
            ("GET", "/api", WebServiceHandler),
            ("GET", "/apis/shipping/orders", StaticPageHandler),
            ("GET", "", StaticPageHandler),
            ("POST", "/api/shipping/orders", PageNotFoundHandler),
            ("POST", "/", PageNotFoundHandler),
            ("PUT", "/health", PageNotFoundHandler),
        ],
    )
    def test_handler_choice(self, method: str, path: str, handler: type) -> None:
        assert isinstance(Router().select(request(method, path)), handler)


class TestRoute:
    def test_orders_api(self, public_dir: Path, data_dir: Path) -> None:
        sink = io.BytesIO()
        Router().route(request("GET", "/api/shipping/orders"), sink)
        status, headers, body = split_response(sink.getvalue())
        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "application/json"
        assert int(headers["Content-Length"]) == len(body.encode())
        assert isinstance(json.loads(body), list)

    def test_post_is_not_found(self, public_dir: Path, data_dir: Path) -> None:
        sink = io.BytesIO()
        resp = Router().route(request("POST", "/api/shipping/orders"), sink)
        status, _, body = split_response(sink.getvalue())
        assert resp.status_code == "404"
        assert status == "HTTP/1.1 404 Not Found"
        assert body == "<h1>not found</h1>"

    def test_stylesheet(self, public_dir: Path) -> None:
        sink = io.BytesIO()
        Router().route(request("GET", "/style.css"), sink)
        status, headers, body = split_response(sink.getvalue())
        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "text/css"
        assert body == "h1 { color: red; }"

    def test_missing_stylesheet(self, public_dir: Path) -> None:
        (public_dir / "style.css").unlink()
        sink = io.BytesIO()
        Router().route(request("GET", "/style.css"), sink)
        status, headers, _ = split_response(sink.getvalue())
        assert status == "HTTP/1.1 404 Not Found"
        assert headers["Content-Type"] == "text/html"

    def test_failed_write_is_logged_not_raised(
        self, public_dir: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level("WARNING", logger="minihttp"):
            resp = Router().route(request("GET", "/health"), _ClosedSink())
        assert resp.status_code == "200"
        assert "Client went away" in caplog.text
