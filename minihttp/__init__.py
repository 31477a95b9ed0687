"""
minihttp — A minimal HTTP/1.1 server built on raw sockets.

Parses one request per connection, routes GET requests to static pages or
the shipping orders JSON API, and writes a Content-Length framed response.
"""

__version__ = "0.1.0"
__all__ = [
    "HttpRequest",
    "HttpResponse",
    "Method",
    "Resource",
    "Router",
    "Server",
    "Version",
    "parse_request",
]

from minihttp.request import HttpRequest, Method, Resource, Version, parse_request
from minihttp.response import HttpResponse
from minihttp.router import Router
from minihttp.server import Server
