"""
Leaf HTTP handlers that expose generated JSON to the browser front-end.
"""

from __future__ import annotations

from typing import Callable

from fastapi import Request, Response
from starlette.applications import Starlette
from starlette.routing import Router

DataProducer = Callable[[], str]

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


class JsonDataResponder:
    """
    Serve the output of a zero-argument producer as an uncached JSON response.

    The producer is called anew for every request and the request itself is
    never inspected.
    """

    def __init__(self, producer: DataProducer, *, product: str, version: str) -> None:
        self._producer = producer
        self._server = f"{product} v{version}"

    def handle(self, request: Request) -> Response:
        return Response(
            content=self._producer(),
            status_code=200,
            media_type="application/json",
            headers={
                "Server": self._server,
                "Cache-Control": "no-cache",
            },
        )

    def mount(self, router: Starlette | Router, path: str) -> None:
        """Register the handler on ``router`` for every HTTP method."""
        router.add_route(path, self.handle, methods=ALL_METHODS, include_in_schema=False)
