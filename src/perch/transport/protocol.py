"""Transport protocol and response type.

A transport is any object with an async ``get``::

    async def get(self, path: str) -> TransportResponse: ...

No base class required. The orchestrator checks the shape, not the
lineage. Network-level failures must surface as ``TransportFailure``;
non-success statuses are returned, not raised.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class TransportResponse:
    """Status and text body of a single GET."""

    status: int
    body: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@runtime_checkable
class Transport(Protocol):
    """Protocol for loader transports.

    Accepts both the bundled transports and ad-hoc objects::

        class FromDisk:
            async def get(self, path: str) -> TransportResponse:
                file = root / path.lstrip("/")
                if not file.is_file():
                    return TransportResponse(404)
                return TransportResponse(200, file.read_text())
    """

    async def get(self, path: str) -> TransportResponse: ...
