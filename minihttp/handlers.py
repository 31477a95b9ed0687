"""
minihttp/handlers.py — Request handlers.

Every handler turns an HttpRequest into an HttpResponse. They share
``load_file``, which reads a page from the public directory (``PUBLIC_PATH``
or the bundled ``public/``). The requested name is appended to the base
directory verbatim with no path-traversal check; the router only ever
passes a single path segment.
"""

import abc
import json
import logging
from dataclasses import asdict, dataclass
from typing import Optional

from minihttp import config
from minihttp.request import HttpRequest
from minihttp.response import HttpResponse

log = logging.getLogger("minihttp")

_CONTENT_TYPES = {
    ".css": "text/css",
    ".js": "text/javascript",
}


class OrderDataError(Exception):
    """Raised when the order data file is missing or malformed."""


@dataclass
class OrderStatus:
    order_id: int
    order_date: str
    order_status: str


def load_json_orders() -> list[OrderStatus]:
    """
    Load the order collection from ``orders.json`` under the data directory.

    Unknown keys on a record are ignored. Raises OrderDataError if the file
    cannot be read, is not valid JSON, or a record is missing a field or has
    the wrong type.
    """
    full_path = f"{config.data_path()}/{config.ORDERS_FILE}"
    try:
        with open(full_path, encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as exc:
        raise OrderDataError(f"Could not read {full_path}: {exc}") from exc
    except ValueError as exc:
        raise OrderDataError(f"Invalid JSON in {full_path}: {exc}") from exc

    if not isinstance(raw, list):
        raise OrderDataError(f"{full_path} must contain a JSON array")

    orders = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise OrderDataError(f"Order #{i} is not an object")
        try:
            order_id = item["order_id"]
            order_date = item["order_date"]
            order_status = item["order_status"]
        except KeyError as exc:
            raise OrderDataError(f"Order #{i} is missing field {exc}") from exc
        if not isinstance(order_id, int) or isinstance(order_id, bool):
            raise OrderDataError(f"Order #{i}: order_id must be an integer")
        if not isinstance(order_date, str) or not isinstance(order_status, str):
            raise OrderDataError(f"Order #{i}: order_date and order_status must be strings")
        orders.append(OrderStatus(order_id, order_date, order_status))
    return orders


def _segment(request: HttpRequest, index: int) -> Optional[str]:
    parts = request.resource.segments()
    return parts[index] if index < len(parts) else None


class Handler(abc.ABC):

    @abc.abstractmethod
    def handle(self, request: HttpRequest) -> HttpResponse:
        ...

    def load_file(self, file_name: str) -> Optional[str]:
        """Return the file's contents, or None if it cannot be read."""
        full_path = f"{config.public_path()}/{file_name}"
        try:
            with open(full_path, encoding="utf-8") as f:
                return f.read()
        except (OSError, ValueError):
            log.debug("Static file not available: %s", full_path)
            return None

    def not_found(self) -> HttpResponse:
        return HttpResponse.build("404", None, self.load_file("404.html"))


class PageNotFoundHandler(Handler):
    def handle(self, request: HttpRequest) -> HttpResponse:
        return self.not_found()


class StaticPageHandler(Handler):
    """Serves ``/`` → index.html, ``/health`` → health.html, ``/<name>`` → <name>."""

    def handle(self, request: HttpRequest) -> HttpResponse:
        name = _segment(request, 1)
        if name is None:
            return self.not_found()
        if name == "":
            return HttpResponse.build("200", None, self.load_file("index.html"))
        if name == "health":
            return HttpResponse.build("200", None, self.load_file("health.html"))

        contents = self.load_file(name)
        if contents is None:
            return self.not_found()
        return HttpResponse.build("200", {"Content-Type": content_type_for(name)}, contents)


class WebServiceHandler(Handler):
    """JSON API; ``/api/shipping/orders`` is the only resource."""

    def handle(self, request: HttpRequest) -> HttpResponse:
        if _segment(request, 2) == "shipping" and _segment(request, 3) == "orders":
            return self.orders()
        return self.not_found()

    def orders(self) -> HttpResponse:
        try:
            orders = load_json_orders()
        except OrderDataError:
            log.error("Failed to load order data", exc_info=True)
            return HttpResponse.build("500")

        body = json.dumps([asdict(o) for o in orders], separators=(",", ":"))
        return HttpResponse.build("200", {"Content-Type": "application/json"}, body)


def content_type_for(file_name: str) -> str:
    for suffix, content_type in _CONTENT_TYPES.items():
        if file_name.endswith(suffix):
            return content_type
    return "text/html"
