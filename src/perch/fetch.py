"""Loader fetch orchestrator.

Resolves a route pathname to its loader module, fetches it, and decodes
the payload. Works the same against a dev server, statically generated
files, or a server renderer, since all of them serve the same path
convention.

Flow::

    pathname ─► to_resource_path ─► GET ─► decode ─► PrimaryResult
                                       │
                                    failure
                                       │
    derive_fallback(pathname, segments) ─► GET ─► decode ─► FallbackResult
                                       │
                                    failure / no candidate
                                       │
                              raise the *primary* error

The fallback is best-effort: its own failure is logged at DEBUG and
dropped so the surfaced error always names the resource the caller
asked for.

Strategies:
    ``sequential`` issues the fallback only after the primary fails.
    ``race`` issues both at once when a fallback candidate exists; a
    primary success still wins and cancels the fallback.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, TypeAlias

import anyio

from perch.config import LoaderConfig
from perch.decode import decode_loader_module
from perch.errors import LoaderError, LoaderFetchFailed, TransportFailure
from perch.fallback import derive_fallback
from perch.paths import to_resource_path
from perch.transport.protocol import Transport

logger = logging.getLogger("perch.loaders")

_DEFAULT_CONFIG = LoaderConfig()


@dataclass(frozen=True, slots=True)
class PrimaryResult:
    """Payload served by the loader module for the requested route."""

    payload: Any
    resource_path: str


@dataclass(frozen=True, slots=True)
class FallbackResult:
    """Payload served by the route template's loader after the primary failed."""

    payload: Any
    resource_path: str
    route_pathname: str
    primary_error: LoaderError


LoaderResult: TypeAlias = PrimaryResult | FallbackResult


async def fetch_loader_module(transport: Transport, resource_path: str) -> Any:
    """GET *resource_path* and decode its payload.

    Raises ``LoaderFetchFailed`` for non-success statuses,
    ``InvalidLoaderFormat`` / ``PayloadDecodeFailed`` for bad bodies,
    and ``TransportFailure`` for network errors.
    """
    try:
        response = await transport.get(resource_path)
    except TransportFailure:
        raise
    except OSError as exc:
        raise TransportFailure(str(exc), resource_path=resource_path) from exc

    if not response.ok:
        raise LoaderFetchFailed(response.status, resource_path=resource_path)
    return decode_loader_module(response.body, resource_path=resource_path)


@dataclass(slots=True)
class _Attempt:
    """Outcome of one fetch, captured instead of raised."""

    resource_path: str
    payload: Any = None
    error: LoaderError | None = None
    done: bool = False

    @property
    def ok(self) -> bool:
        return self.done and self.error is None


async def _attempt(transport: Transport, attempt: _Attempt) -> None:
    try:
        attempt.payload = await fetch_loader_module(transport, attempt.resource_path)
    except LoaderError as exc:
        attempt.error = exc
    attempt.done = True


async def resolve_loader(
    transport: Transport,
    pathname: str,
    segments: Sequence[str] | None = None,
    *,
    config: LoaderConfig | None = None,
) -> LoaderResult:
    """Fetch the loader for *pathname*, falling back once to its route template.

    Args:
        transport: Any object satisfying the ``Transport`` protocol.
        pathname: Route pathname, e.g. ``/posts/1``.
        segments: Matched route segments, e.g. ``["posts", "[id]"]``.
        config: Prefix, extension, and strategy. Defaults to ``LoaderConfig()``.

    Returns:
        ``PrimaryResult`` or ``FallbackResult`` depending on which
        resource produced the payload.

    Raises:
        LoaderError: The primary failure, when no fallback applies or
            the fallback failed too.
    """
    cfg = config or _DEFAULT_CONFIG
    primary = _Attempt(to_resource_path(pathname, config=cfg))
    fallback_route = derive_fallback(pathname, segments)

    if fallback_route is None:
        logger.debug("Loader %s (no fallback candidate)", primary.resource_path)
        await _attempt(transport, primary)
        return _finish(primary, None, None)

    fallback = _Attempt(to_resource_path(fallback_route, config=cfg))
    logger.debug(
        "Loader %s (fallback %s, strategy=%s)",
        primary.resource_path,
        fallback.resource_path,
        cfg.strategy,
    )

    if cfg.strategy == "race":
        await _race(transport, primary, fallback)
    else:
        await _attempt(transport, primary)
        if not primary.ok:
            logger.debug(
                "Loader %s failed (%s); trying %s",
                primary.resource_path,
                primary.error,
                fallback.resource_path,
            )
            await _attempt(transport, fallback)

    return _finish(primary, fallback, fallback_route)


async def _race(transport: Transport, primary: _Attempt, fallback: _Attempt) -> None:
    """Run both attempts concurrently; cancel the fallback once the primary succeeds.

    Only non-loader errors (bugs) escape ``_attempt``; a lone one is
    re-raised bare so callers see the same exception as in sequential mode.
    """
    try:
        async with anyio.create_task_group() as tg:
            tg.start_soon(_attempt, transport, fallback)
            await _attempt(transport, primary)
            if primary.ok:
                tg.cancel_scope.cancel()
    except BaseExceptionGroup as group:
        if len(group.exceptions) == 1:
            raise group.exceptions[0] from None
        raise


def _finish(
    primary: _Attempt, fallback: _Attempt | None, fallback_route: str | None
) -> LoaderResult:
    error = primary.error
    if error is None:
        return PrimaryResult(payload=primary.payload, resource_path=primary.resource_path)

    if fallback is not None and fallback_route is not None:
        if fallback.ok:
            logger.debug(
                "Loader %s served from fallback %s",
                primary.resource_path,
                fallback.resource_path,
            )
            return FallbackResult(
                payload=fallback.payload,
                resource_path=fallback.resource_path,
                route_pathname=fallback_route,
                primary_error=error,
            )
        logger.debug(
            "Fallback %s failed (%s); surfacing primary error",
            fallback.resource_path,
            fallback.error,
        )
    raise error


async def fetch_loader(
    transport: Transport,
    pathname: str,
    segments: Sequence[str] | None = None,
    *,
    config: LoaderConfig | None = None,
) -> Any:
    """Fetch and decode the loader payload for *pathname*.

    Same contract as :func:`resolve_loader`, returning only the payload.
    """
    result = await resolve_loader(transport, pathname, segments, config=config)
    return result.payload
