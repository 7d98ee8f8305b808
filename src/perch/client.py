"""Configured loader client.

Bundles a ``LoaderConfig`` with a transport so call sites only pass the
route::

    async with LoaderClient(LoaderConfig(base_url="http://localhost:8081")) as loaders:
        data = await loaders.fetch("/posts/1", ["posts", "[id]"])
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from perch.config import LoaderConfig
from perch.fallback import derive_fallback
from perch.fetch import LoaderResult, fetch_loader, resolve_loader
from perch.paths import to_resource_path, to_route_pathname
from perch.transport.httpx_transport import HTTPXTransport
from perch.transport.protocol import Transport


class LoaderClient:
    """Fetch loader payloads with a fixed config and transport.

    Without an explicit ``transport`` an ``HTTPXTransport`` is built from
    the config and closed with the client. A supplied transport is never
    closed here.
    """

    __slots__ = ("_owned", "config", "transport")

    def __init__(
        self, config: LoaderConfig | None = None, *, transport: Transport | None = None
    ) -> None:
        self.config = config or LoaderConfig()
        if transport is None:
            self._owned: HTTPXTransport | None = HTTPXTransport.from_config(self.config)
            self.transport: Transport = self._owned
        else:
            self._owned = None
            self.transport = transport

    def resource_path(self, pathname: str) -> str:
        return to_resource_path(pathname, config=self.config)

    def route_pathname(self, resource_path: str) -> str:
        return to_route_pathname(resource_path, config=self.config)

    def fallback_for(self, pathname: str, segments: Sequence[str] | None) -> str | None:
        return derive_fallback(pathname, segments)

    async def resolve(
        self, pathname: str, segments: Sequence[str] | None = None
    ) -> LoaderResult:
        return await resolve_loader(self.transport, pathname, segments, config=self.config)

    async def fetch(self, pathname: str, segments: Sequence[str] | None = None) -> Any:
        return await fetch_loader(self.transport, pathname, segments, config=self.config)

    async def aclose(self) -> None:
        if self._owned is not None:
            await self._owned.aclose()

    async def __aenter__(self) -> LoaderClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
