"""
minihttp/server.py — Blocking single-threaded connection loop.

Each accepted connection gets exactly one read of READ_BUFFER_SIZE bytes,
is parsed, routed and answered, and is then closed before the next
connection is accepted. A failure on one connection is logged and only
drops that connection; the listener keeps running.
"""

import os
import socket
import sys
import logging
from typing import Optional

from minihttp.colors import format_request_log, format_response_log
from minihttp.config import (
    BACKLOG,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_READ_TIMEOUT,
    DRAIN_LIMIT,
    DRAIN_TIMEOUT,
    READ_BUFFER_SIZE,
)
from minihttp.request import parse_request
from minihttp.router import Router

log = logging.getLogger("minihttp")


class Server:
    """
    A configurable server instance.
    Attributes:
        host: Bind address
        port: Bind port
        read_timeout: Seconds to wait for a client's request bytes (None blocks forever)
        router: Dispatches parsed requests and writes responses
        should_exit: Flag to signal server shutdown
    """
    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        read_timeout: Optional[float] = DEFAULT_READ_TIMEOUT,
        router: Optional[Router] = None,
    ):
        self.host = host
        self.port = port
        self.read_timeout = read_timeout
        self.router = router or Router()
        self.should_exit = False
        self._server_socket: Optional[socket.socket] = None

    def signal_exit(self):
        """Signal the server to stop accepting new connections."""
        self.should_exit = True

    def shutdown(self):
        """Close the server socket if open."""
        self.should_exit = True
        if self._server_socket:
            try:
                self._server_socket.close()
            except OSError:
                pass
            self._server_socket = None

    def serve(self):
        """Create, bind, listen, and accept connections in a blocking loop."""
        self._server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        if sys.platform == "win32":
            self._server_socket.setsockopt(
                socket.SOL_SOCKET, socket.SO_EXCLUSIVEADDRUSE, 1  # type: ignore[attr-defined]
            )
        else:
            self._server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        try:
            self._server_socket.bind((self.host, self.port))
        except OSError as e:
            log.error("Failed to bind to %s:%s - %s", self.host, self.port, e)
            self.shutdown()
            raise

        self._server_socket.listen(BACKLOG)
        # Wake up periodically so should_exit is noticed
        self._server_socket.settimeout(1.0)

        log.info("Started server process [%d]", os.getpid())
        log.info("Listening on http://%s:%s", self.host, self.port)

        while not self.should_exit:
            try:
                client_socket, client_addr = self._server_socket.accept()
            except socket.timeout:
                continue
            except OSError:
                if self.should_exit:
                    break
                log.error("accept() failed", exc_info=True)
                continue

            log.debug("New connection from %s:%s", client_addr[0], client_addr[1])
            self.handle_connection(client_socket, client_addr)

        self.shutdown()
        log.info("Server stopped")

    def handle_connection(self, client_socket: socket.socket, client_addr: tuple):
        """Read one request from *client_socket*, answer it, and close it."""
        try:
            client_socket.settimeout(self.read_timeout)
            try:
                data = client_socket.recv(READ_BUFFER_SIZE)
            except socket.timeout:
                log.warning("%s:%s  timed out waiting for request data", client_addr[0], client_addr[1])
                return
            except OSError as exc:
                log.warning("%s:%s  recv error: %s", client_addr[0], client_addr[1], exc)
                return

            if not data:
                log.debug("%s:%s  closed connection without sending data", client_addr[0], client_addr[1])
                return

            request = parse_request(data)
            log.info(format_request_log(client_addr, request))

            response = self.router.route(request, client_socket)
            log.info(format_response_log(client_addr, request, response))
        except Exception:
            log.error("Error while handling connection from %s:%s", client_addr[0], client_addr[1], exc_info=True)
        finally:
            _close_quietly(client_socket)
            log.debug("%s:%s  connection closed", client_addr[0], client_addr[1])


def _close_quietly(sock: socket.socket):
    """
    Close *sock* without resetting the peer.

    Anything past the first READ_BUFFER_SIZE bytes is still sitting in the
    receive buffer; closing over unread data makes the kernel send RST, which
    can discard the response before the client reads it. Half-close first,
    then discard what is left (bounded by time and size).
    """
    try:
        sock.shutdown(socket.SHUT_WR)
        sock.settimeout(DRAIN_TIMEOUT)
        drained = 0
        while drained < DRAIN_LIMIT:
            chunk = sock.recv(READ_BUFFER_SIZE)
            if not chunk:
                break
            drained += len(chunk)
    except OSError:
        pass
    finally:
        try:
            sock.close()
        except OSError:
            pass
