"""
minihttp/response.py — HTTP response model and wire serialization.

Wire format (byte-exact, existing clients and fixtures depend on it):

    HTTP/1.1 404 Not Found\\r\\n
    Content-Type:text/html\\r\\n
    Content-Length: 33\\r\\n
    \\r\\n
    <body>

Caller-supplied headers are written as ``key:value`` with no space, while
``Content-Length`` always follows them with a space after the colon.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

log = logging.getLogger("minihttp")

# Anything not listed here is labelled "Not Found".
_STATUS_PHRASES = {
    "200": "OK",
    "400": "Bad Request",
    "404": "Not Found",
    "500": "Internal Server Error",
}

DEFAULT_HEADERS = {"Content-Type": "text/html"}


def status_text(status_code: Union[str, int]) -> str:
    return _STATUS_PHRASES.get(str(status_code), "Not Found")


@dataclass
class HttpResponse:
    version: str = "HTTP/1.1"
    status_code: str = "200"
    status_text: str = "OK"
    headers: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HEADERS))
    body: Optional[str] = None

    @classmethod
    def build(
        cls,
        status_code: Union[str, int] = "200",
        headers: Optional[dict[str, str]] = None,
        body: Optional[str] = None,
    ) -> "HttpResponse":
        """
        Create a response for *status_code*.

        ``headers=None`` installs the single ``Content-Type: text/html``
        default; any mapping passed in (even an empty one) is copied as-is.
        """
        code = str(status_code)
        return cls(
            status_code=code,
            status_text=status_text(code),
            headers=dict(DEFAULT_HEADERS if headers is None else headers),
            body=body,
        )

    @property
    def content_length(self) -> int:
        return len(self.body.encode("utf-8")) if self.body else 0

    def __str__(self) -> str:
        header_lines = "".join(f"{k}:{v}\r\n" for k, v in self.headers.items())
        return (
            f"{self.version} {self.status_code} {self.status_text}\r\n"
            f"{header_lines}"
            f"Content-Length: {self.content_length}\r\n"
            f"\r\n"
            f"{self.body or ''}"
        )

    def serialize(self) -> bytes:
        return str(self).encode("utf-8")

    def send(self, sink: Any) -> bool:
        """
        Best-effort write of the serialized response to *sink*.

        Socket-like sinks are written with ``sendall``, anything else with
        ``write``. Returns False if the peer went away; the error itself is
        not raised.
        """
        data = self.serialize()
        try:
            if hasattr(sink, "sendall"):
                sink.sendall(data)
            else:
                sink.write(data)
            return True
        except OSError as exc:
            log.debug("Response write failed: %s", exc)
            return False
