"""
minihttp/request.py — Best-effort HTTP/1.1 request parsing.

A request is whatever fits in the single buffer read off the connection.
Parsing never raises: an unknown verb or version becomes UNINITIALIZED, a
missing request-target becomes an empty path, and anything past the first
blank line is ignored.
"""

import enum
from dataclasses import dataclass, field
from typing import Union


class Method(enum.Enum):
    GET = "GET"
    POST = "POST"
    UNINITIALIZED = "UNINITIALIZED"

    @classmethod
    def from_str(cls, value: str) -> "Method":
        if value == "GET":
            return cls.GET
        if value == "POST":
            return cls.POST
        return cls.UNINITIALIZED


class Version(enum.Enum):
    V1_1 = "HTTP/1.1"
    V2_0 = "HTTP/2.0"               # placeholder, parsing never produces it
    UNINITIALIZED = "UNINITIALIZED"

    @classmethod
    def from_str(cls, value: str) -> "Version":
        if value == "HTTP/1.1":
            return cls.V1_1
        return cls.UNINITIALIZED


@dataclass(frozen=True)
class Resource:
    """The request-target, kept exactly as received."""
    path: str = ""

    def segments(self) -> list[str]:
        return self.path.split("/")


@dataclass
class HttpRequest:
    method: Method = Method.UNINITIALIZED
    version: Version = Version.UNINITIALIZED
    resource: Resource = field(default_factory=Resource)
    headers: dict[str, str] = field(default_factory=dict)
    # Only the last body line seen before the blank line is kept.
    body: str = ""


def parse_request(raw: Union[bytes, str]) -> HttpRequest:
    """
    Parse one request buffer into an HttpRequest.

    Lines are classified in order: anything containing ``HTTP`` is the
    request line, anything else containing ``:`` is a header, an empty line
    ends parsing, and every other line replaces the retained body line.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    text = raw.rstrip("\x00")

    request = HttpRequest()
    for line in text.split("\n"):
        if line.endswith("\r"):
            line = line[:-1]

        if "HTTP" in line:
            request.method, request.resource, request.version = _parse_request_line(line)
        elif ":" in line:
            key, value = _parse_header_line(line)
            request.headers[key] = value
        elif not line:
            break
        else:
            request.body = line

    return request


def _parse_request_line(line: str) -> tuple[Method, Resource, Version]:
    # Missing tokens degrade instead of failing
    words = line.split()
    method = words[0] if len(words) > 0 else ""
    target = words[1] if len(words) > 1 else ""
    version = words[2] if len(words) > 2 else ""
    return Method.from_str(method), Resource(target), Version.from_str(version)


def _parse_header_line(line: str) -> tuple[str, str]:
    key, _, value = line.partition(":")
    return key.strip(), value.strip()
