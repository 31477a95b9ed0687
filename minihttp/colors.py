"""
minihttp/colors.py — Log formatting for the server and the CLI.

The level prefix and the request/response lines are ANSI-colored when stdout
is a terminal (``NO_COLOR`` turns color off, ``FORCE_COLOR`` turns it on).
A request the parser could not make sense of still gets logged; its method
or version is shown as ``???`` so it stands out from real traffic.
"""

import datetime
import logging
import os
import sys

from minihttp.request import HttpRequest, Method, Version
from minihttp.response import HttpResponse


def _supports_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


USE_COLOR = _supports_color()

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
CYAN = "\033[36m"

UNKNOWN = "???"


def _c(code: str, text: str) -> str:
    return f"{code}{text}{RESET}" if USE_COLOR else text


_LEVEL_STYLES = {
    logging.DEBUG: DIM + CYAN,
    logging.INFO: GREEN,
    logging.WARNING: YELLOW,
    logging.ERROR: BOLD + RED,
    logging.CRITICAL: BOLD + RED,
}


class ColorFormatter(logging.Formatter):
    """
    Formats records as ``LEVEL    message``, with the level colored per
    severity. Timestamps are prepended when *show_timestamp* is set (the CLI
    turns this on for ``--log-level debug``). Tracebacks passed through
    ``exc_info`` are appended below the message.
    """

    def __init__(self, show_timestamp: bool = False):
        super().__init__()
        self.show_timestamp = show_timestamp

    def format(self, record: logging.LogRecord) -> str:
        level = _c(_LEVEL_STYLES.get(record.levelno, ""), f"{record.levelname:<8}")

        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        if self.show_timestamp:
            ts = datetime.datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
            return f"{level} {_c(DIM, ts)} {message}"
        return f"{level} {message}"


# ── Request / response lines ───────────────────────────────────────────────

_METHOD_STYLES = {
    Method.GET: BOLD + GREEN,
    Method.POST: BOLD + BLUE,
}


def color_method(method: Method) -> str:
    """Method name padded to a fixed width; unrecognized methods show as ``???``."""
    if method is Method.UNINITIALIZED:
        return _c(BOLD + RED, f"{UNKNOWN:<4}")
    return _c(_METHOD_STYLES[method], f"{method.value:<4}")


def color_status(status_code: str) -> str:
    """Status code colored by class: 2xx green, 4xx yellow, 5xx red."""
    style = {"2": GREEN, "4": YELLOW, "5": RED}.get(str(status_code)[:1], "")
    return _c(BOLD + style, str(status_code))


def _prefix(client_addr: tuple, request: HttpRequest) -> str:
    addr = _c(DIM, f"{client_addr[0]}:{client_addr[1]}")
    return f"{addr} {_c(DIM, '-')} {color_method(request.method)} {_c(BOLD, request.resource.path)}"


def format_request_log(client_addr: tuple, request: HttpRequest) -> str:
    """
    Example output:
        127.0.0.1:51234 - GET  /api/shipping/orders HTTP/1.1
    """
    if request.version is Version.UNINITIALIZED:
        version = _c(RED, UNKNOWN)
    else:
        version = _c(DIM, request.version.value)
    return f"{_prefix(client_addr, request)} {version}"


def format_response_log(client_addr: tuple, request: HttpRequest, response: HttpResponse) -> str:
    """
    Example output:
        127.0.0.1:51234 - GET  /styles.css → 404 Not Found (0 bytes)
    """
    arrow = _c(DIM, "→")
    status = f"{color_status(response.status_code)} {response.status_text}"
    size = _c(DIM, f"({response.content_length} bytes)")
    return f"{_prefix(client_addr, request)} {arrow} {status} {size}"


# ── Startup banner ─────────────────────────────────────────────────────────

def format_banner(version: str, rows: list[tuple[str, str]], reload: bool = False) -> list[str]:
    """Lines of the startup banner: title, rule, then one ``label  value`` row each."""
    if reload:
        rows = rows + [("Mode", _c(BOLD + CYAN, "reload"))]
    lines = [
        _c(BOLD + CYAN, "  minihttp") + " " + _c(DIM, f"v{version}"),
        _c(DIM, "  " + "─" * 40),
    ]
    for label, value in rows:
        lines.append(_c(DIM, f"  {label:<12}") + f" {value}")
    return lines
