"""Test utilities for code that fetches loaders.

``StaticTransport`` serves loader modules from a dict and records every
request, so tests can assert whether a fallback was attempted::

    transport = StaticTransport({
        "/_expo/loaders/posts/[id].js": 'export default {"id": "[id]"}',
    })
    data = await fetch_loader(transport, "/posts/1", ["posts", "[id]"])
    assert transport.requests == [
        "/_expo/loaders/posts/1.js",
        "/_expo/loaders/posts/[id].js",
    ]
"""

from collections.abc import Mapping
from typing import TypeAlias

import anyio

from perch.errors import TransportFailure
from perch.transport.protocol import TransportResponse

Route: TypeAlias = str | tuple[int, str] | Exception


class StaticTransport:
    __test__ = False  # Tell pytest this is not a test class
    """In-memory transport.

    Each path maps to a body (served with 200), a ``(status, body)`` pair,
    or an exception instance to raise. Unknown paths answer 404.
    ``delays`` holds per-path latencies in seconds.
    """

    __slots__ = ("delays", "requests", "routes")

    def __init__(
        self,
        routes: Mapping[str, Route] | None = None,
        *,
        delays: Mapping[str, float] | None = None,
    ) -> None:
        self.routes: dict[str, Route] = dict(routes or {})
        self.delays: dict[str, float] = dict(delays or {})
        self.requests: list[str] = []

    async def get(self, path: str) -> TransportResponse:
        self.requests.append(path)
        delay = self.delays.get(path)
        if delay:
            await anyio.sleep(delay)

        route = self.routes.get(path)
        if route is None:
            return TransportResponse(404, "Not Found")
        if isinstance(route, TransportFailure):
            raise route
        if isinstance(route, Exception):
            raise TransportFailure(str(route), resource_path=path) from route
        if isinstance(route, tuple):
            status, body = route
            return TransportResponse(status, body)
        return TransportResponse(200, route)
