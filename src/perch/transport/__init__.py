"""Transports deliver loader resources to the fetch orchestrator.

- ``Transport`` — the protocol every transport satisfies
- ``HTTPXTransport`` — HTTP GET via ``httpx.AsyncClient``
- ``perch.testing.StaticTransport`` — in-memory, for tests
"""

from perch.transport.httpx_transport import HTTPXTransport
from perch.transport.protocol import Transport, TransportResponse

__all__ = ["HTTPXTransport", "Transport", "TransportResponse"]
