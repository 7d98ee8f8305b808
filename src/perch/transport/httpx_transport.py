"""httpx-backed transport.

Issues plain GET requests for loader resources against a base URL. The
timeout lives here: the orchestrator waits as long as the transport does.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from perch.errors import TransportFailure
from perch.transport.protocol import TransportResponse

if TYPE_CHECKING:
    from perch.config import LoaderConfig

logger = logging.getLogger("perch.transport")


class HTTPXTransport:
    """Fetch loader resources over HTTP with ``httpx.AsyncClient``.

    Usage::

        async with HTTPXTransport("http://localhost:8081") as transport:
            response = await transport.get("/_expo/loaders/index.js")

    A caller-supplied ``client`` is used as is and left open on close.
    """

    __slots__ = ("_client", "_owns_client", "base_url")

    def __init__(
        self,
        base_url: str = "",
        *,
        timeout: float | None = 30.0,
        headers: tuple[tuple[str, str], ...] = (),
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        if client is None:
            self._client = httpx.AsyncClient(timeout=timeout, headers=list(headers))
            self._owns_client = True
        else:
            self._client = client
            self._owns_client = False

    @classmethod
    def from_config(
        cls, config: LoaderConfig, *, client: httpx.AsyncClient | None = None
    ) -> HTTPXTransport:
        return cls(
            config.base_url,
            timeout=config.timeout,
            headers=config.headers,
            client=client,
        )

    def url_for(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def get(self, path: str) -> TransportResponse:
        url = self.url_for(path)
        logger.debug("GET %s", url)
        try:
            response = await self._client.get(url)
            body = response.text
        except httpx.HTTPError as exc:
            # Connection errors, timeouts, redirect loops, and undecodable
            # Content-Encoding all count as transport failures
            raise TransportFailure(
                f"{type(exc).__name__}: {exc}", resource_path=path
            ) from exc
        return TransportResponse(status=response.status_code, body=body)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HTTPXTransport:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
