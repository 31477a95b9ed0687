"""Tests for the connection loop (minihttp.server), driven over socketpairs."""

import json
import socket
from pathlib import Path

import pytest

from minihttp.config import READ_BUFFER_SIZE
from minihttp.server import Server

CLIENT = ("127.0.0.1", 50000)


def exchange(server: Server, payload: bytes) -> bytes:
    """Send *payload* through a socketpair, let the server answer, return the reply."""
    client, conn = socket.socketpair()
    try:
        client.sendall(payload)
        server.handle_connection(conn, CLIENT)
        received = b""
        while chunk := client.recv(4096):
            received += chunk
        return received
    finally:
        client.close()


class TestHandleConnection:
    def test_orders(self, public_dir: Path, data_dir: Path) -> None:
        reply = exchange(Server(), b"GET /api/shipping/orders HTTP/1.1\r\nHost: x\r\n\r\n")
        head, _, body = reply.partition(b"\r\n\r\n")
        assert head.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"Content-Type:application/json" in head
        assert len(json.loads(body)) == 2

    def test_index(self, public_dir: Path) -> None:
        reply = exchange(Server(), b"GET / HTTP/1.1\r\n\r\n")
        assert reply == (
            b"HTTP/1.1 200 OK\r\nContent-Type:text/html\r\nContent-Length: 14\r\n\r\n<h1>index</h1>"
        )

    def test_garbage_degrades_to_404(self, public_dir: Path) -> None:
        reply = exchange(Server(), b"\x16\x03\x01garbage HTTP\r\n\r\n")
        assert reply.startswith(b"HTTP/1.1 404 Not Found\r\n")

    def test_only_first_buffer_is_parsed(self, public_dir: Path) -> None:
        filler = b"X-Pad: " + b"a" * READ_BUFFER_SIZE + b"\r\n"
        reply = exchange(Server(), b"GET /health HTTP/1.1\r\n" + filler + b"\r\n")
        assert reply.endswith(b"<h1>health</h1>")

    def test_oversized_request_is_drained_before_close(self, public_dir: Path) -> None:
        filler = b"X-Pad: " + b"a" * (8 * READ_BUFFER_SIZE) + b"\r\n"
        reply = exchange(Server(), b"GET / HTTP/1.1\r\n" + filler + b"\r\n")
        assert reply.startswith(b"HTTP/1.1 200 OK\r\n")
        assert reply.endswith(b"<h1>index</h1>")

    def test_nul_byte_in_path_is_404(self, public_dir: Path) -> None:
        reply = exchange(Server(), b"GET /index\x00.html HTTP/1.1\r\n\r\n")
        assert reply.startswith(b"HTTP/1.1 404 Not Found\r\n")

    def test_client_closing_without_data(self, public_dir: Path) -> None:
        client, conn = socket.socketpair()
        client.close()
        Server().handle_connection(conn, CLIENT)
        assert conn.fileno() == -1

    def test_read_timeout_drops_connection(
        self, public_dir: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        client, conn = socket.socketpair()
        try:
            with caplog.at_level("WARNING", logger="minihttp"):
                Server(read_timeout=0.05).handle_connection(conn, CLIENT)
            assert client.recv(1024) == b""
            assert "timed out" in caplog.text
        finally:
            client.close()

    def test_handler_crash_is_isolated(
        self, public_dir: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        class Exploding:
            def route(self, request, sink):
                raise RuntimeError("boom")

        client, conn = socket.socketpair()
        try:
            client.sendall(b"GET / HTTP/1.1\r\n\r\n")
            with caplog.at_level("ERROR", logger="minihttp"):
                Server(router=Exploding()).handle_connection(conn, CLIENT)
            assert client.recv(1024) == b""
            assert "Error while handling connection" in caplog.text
        finally:
            client.close()


class TestServe:
    def test_bind_failure_raises(self) -> None:
        holder = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        holder.bind(("127.0.0.1", 0))
        holder.listen(1)
        try:
            port = holder.getsockname()[1]
            server = Server("127.0.0.1", port)
            with pytest.raises(OSError):
                server.serve()
            assert server.should_exit
        finally:
            holder.close()

    def test_signal_exit(self) -> None:
        server = Server()
        server.signal_exit()
        assert server.should_exit
