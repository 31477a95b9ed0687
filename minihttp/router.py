"""
minihttp/router.py — Method and path dispatch.

Only GET is routed: ``/api/...`` goes to the JSON web service and every
other path to the static page handler. Any other method gets the 404 page.
"""

import logging
from typing import Any

from minihttp.handlers import (
    Handler,
    PageNotFoundHandler,
    StaticPageHandler,
    WebServiceHandler,
)
from minihttp.request import HttpRequest, Method
from minihttp.response import HttpResponse

log = logging.getLogger("minihttp")


class Router:
    def __init__(self):
        self.static = StaticPageHandler()
        self.web_service = WebServiceHandler()
        self.not_found = PageNotFoundHandler()

    def select(self, request: HttpRequest) -> Handler:
        if request.method is not Method.GET:
            return self.not_found
        segments = request.resource.segments()
        if len(segments) > 1 and segments[1] == "api":
            return self.web_service
        return self.static

    def dispatch(self, request: HttpRequest) -> HttpResponse:
        return self.select(request).handle(request)

    def route(self, request: HttpRequest, sink: Any) -> HttpResponse:
        """Handle *request* and write the response to *sink*.

        The response is returned for logging; a failed write is logged and
        otherwise ignored.
        """
        response = self.dispatch(request)
        if not response.send(sink):
            log.warning(
                "Client went away before the %s response was written",
                response.status_code,
            )
        return response
