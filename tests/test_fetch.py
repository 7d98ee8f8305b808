"""Tests for perch.fetch — primary/fallback loader orchestration."""

import asyncio
import logging
import time

import pytest

from perch.config import LoaderConfig
from perch.errors import (
    InvalidLoaderFormat,
    LoaderFetchFailed,
    PayloadDecodeFailed,
    TransportFailure,
)
from perch.fetch import (
    FallbackResult,
    PrimaryResult,
    fetch_loader,
    fetch_loader_module,
    resolve_loader,
)
from perch.testing import StaticTransport
from perch.transport.protocol import TransportResponse

POST_1 = "/_expo/loaders/posts/1.js"
POST_TEMPLATE = "/_expo/loaders/posts/[id].js"
SEGMENTS = ["posts", "[id]"]

RACE = LoaderConfig(strategy="race")


class _RaisingTransport:
    def __init__(self, exc: BaseException) -> None:
        self.exc = exc
        self.requests: list[str] = []

    async def get(self, path: str) -> TransportResponse:
        self.requests.append(path)
        raise self.exc


class TestFetchLoaderModule:
    @pytest.mark.asyncio
    async def test_success(self) -> None:
        transport = StaticTransport({POST_1: 'export default {"title":"Hello"}'})
        assert await fetch_loader_module(transport, POST_1) == {"title": "Hello"}

    @pytest.mark.asyncio
    async def test_non_success_status(self) -> None:
        transport = StaticTransport({POST_1: (503, "busy")})
        with pytest.raises(LoaderFetchFailed) as exc_info:
            await fetch_loader_module(transport, POST_1)
        assert exc_info.value.status == 503
        assert exc_info.value.resource_path == POST_1

    @pytest.mark.asyncio
    async def test_error_status_body_not_decoded(self) -> None:
        transport = StaticTransport({POST_1: (500, 'export default {"a": 1}')})
        with pytest.raises(LoaderFetchFailed):
            await fetch_loader_module(transport, POST_1)

    @pytest.mark.asyncio
    async def test_invalid_format(self) -> None:
        transport = StaticTransport({POST_1: "<!doctype html><p>SPA shell</p>"})
        with pytest.raises(InvalidLoaderFormat):
            await fetch_loader_module(transport, POST_1)

    @pytest.mark.asyncio
    async def test_os_error_becomes_transport_failure(self) -> None:
        transport = _RaisingTransport(ConnectionRefusedError("refused"))
        with pytest.raises(TransportFailure) as exc_info:
            await fetch_loader_module(transport, POST_1)
        assert isinstance(exc_info.value.__cause__, ConnectionRefusedError)
        assert exc_info.value.resource_path == POST_1


class TestSequential:
    @pytest.mark.asyncio
    async def test_primary_success_skips_fallback(self) -> None:
        transport = StaticTransport({
            POST_1: 'export default {"title":"Hello"}',
            POST_TEMPLATE: 'export default {"id":"[id]"}',
        })

        result = await resolve_loader(transport, "/posts/1", SEGMENTS)

        assert result == PrimaryResult(payload={"title": "Hello"}, resource_path=POST_1)
        assert transport.requests == [POST_1]

    @pytest.mark.asyncio
    async def test_404_falls_back_to_template(self) -> None:
        transport = StaticTransport({POST_TEMPLATE: 'export default {"id":"[id]"}'})

        assert await fetch_loader(transport, "/posts/1", SEGMENTS) == {"id": "[id]"}
        assert transport.requests == [POST_1, POST_TEMPLATE]

    @pytest.mark.asyncio
    async def test_fallback_result_records_primary_error(self) -> None:
        transport = StaticTransport({POST_TEMPLATE: 'export default {"id":"[id]"}'})

        result = await resolve_loader(transport, "/posts/1", SEGMENTS)

        assert isinstance(result, FallbackResult)
        assert result.resource_path == POST_TEMPLATE
        assert result.route_pathname == "/posts/[id]"
        assert isinstance(result.primary_error, LoaderFetchFailed)
        assert result.primary_error.status == 404

    @pytest.mark.asyncio
    async def test_no_segments_propagates_primary(self) -> None:
        transport = StaticTransport({POST_TEMPLATE: 'export default {"id":"[id]"}'})

        with pytest.raises(LoaderFetchFailed) as exc_info:
            await fetch_loader(transport, "/posts/1")

        assert exc_info.value.status == 404
        assert transport.requests == [POST_1]

    @pytest.mark.asyncio
    async def test_static_segments_propagate_primary(self) -> None:
        transport = StaticTransport()

        with pytest.raises(LoaderFetchFailed):
            await fetch_loader(transport, "/posts/1", ["posts", "1"])

        assert transport.requests == [POST_1]

    @pytest.mark.asyncio
    async def test_template_route_itself_has_no_fallback(self) -> None:
        transport = StaticTransport()

        with pytest.raises(LoaderFetchFailed):
            await fetch_loader(transport, "/posts/[id]", SEGMENTS)

        assert transport.requests == [POST_TEMPLATE]

    @pytest.mark.asyncio
    async def test_both_fail_surfaces_primary(self) -> None:
        transport = StaticTransport({POST_1: (500, "boom"), POST_TEMPLATE: (404, "")})

        with pytest.raises(LoaderFetchFailed) as exc_info:
            await fetch_loader(transport, "/posts/1", SEGMENTS)

        assert exc_info.value.status == 500
        assert exc_info.value.resource_path == POST_1
        assert transport.requests == [POST_1, POST_TEMPLATE]

    @pytest.mark.asyncio
    async def test_fallback_decode_error_surfaces_primary(self) -> None:
        transport = StaticTransport({POST_TEMPLATE: "export default {oops}"})

        with pytest.raises(LoaderFetchFailed):
            await fetch_loader(transport, "/posts/1", SEGMENTS)

    @pytest.mark.asyncio
    async def test_invalid_primary_format_falls_back(self) -> None:
        transport = StaticTransport({
            POST_1: "<html>index.html served for every path</html>",
            POST_TEMPLATE: 'export default {"id":"[id]"}',
        })

        result = await resolve_loader(transport, "/posts/1", SEGMENTS)

        assert isinstance(result, FallbackResult)
        assert isinstance(result.primary_error, InvalidLoaderFormat)

    @pytest.mark.asyncio
    async def test_primary_decode_failure_surfaces_when_no_fallback(self) -> None:
        transport = StaticTransport({POST_1: "export default {nope}"})

        with pytest.raises(PayloadDecodeFailed):
            await fetch_loader(transport, "/posts/1")

    @pytest.mark.asyncio
    async def test_transport_failure_falls_back(self) -> None:
        transport = StaticTransport({
            POST_1: ConnectionResetError("reset"),
            POST_TEMPLATE: 'export default {"id":"[id]"}',
        })

        result = await resolve_loader(transport, "/posts/1", SEGMENTS)

        assert isinstance(result.primary_error, TransportFailure)  # type: ignore[union-attr]
        assert result.payload == {"id": "[id]"}

    @pytest.mark.asyncio
    async def test_transport_failure_surfaces_unchanged(self) -> None:
        failure = TransportFailure("DNS lookup failed", resource_path=POST_1)
        transport = StaticTransport({POST_1: failure})

        with pytest.raises(TransportFailure) as exc_info:
            await fetch_loader(transport, "/posts/1", SEGMENTS)

        assert exc_info.value is failure

    @pytest.mark.asyncio
    async def test_falsy_fallback_payload_is_success(self) -> None:
        transport = StaticTransport({POST_TEMPLATE: "export default null"})

        result = await resolve_loader(transport, "/posts/1", SEGMENTS)

        assert isinstance(result, FallbackResult)
        assert result.payload is None

    @pytest.mark.asyncio
    async def test_programming_errors_propagate(self) -> None:
        transport = _RaisingTransport(RuntimeError("bug in transport"))

        with pytest.raises(RuntimeError, match="bug in transport"):
            await fetch_loader(transport, "/posts/1", SEGMENTS)

        assert transport.requests == [POST_1]

    @pytest.mark.asyncio
    async def test_root_route(self) -> None:
        transport = StaticTransport({"/_expo/loaders/index.js": 'export default {"home": true}'})
        assert await fetch_loader(transport, "/") == {"home": True}

    @pytest.mark.asyncio
    async def test_trailing_slash_and_query(self) -> None:
        transport = StaticTransport({POST_1: 'export default {"title":"Hello"}'})
        assert await fetch_loader(transport, "/posts/1/?ref=feed") == {"title": "Hello"}

    @pytest.mark.asyncio
    async def test_custom_convention(self) -> None:
        config = LoaderConfig(prefix="/data", extension=".mjs")
        transport = StaticTransport({"/data/posts/[id].mjs": "export default [1]"})

        assert await fetch_loader(transport, "/posts/1", SEGMENTS, config=config) == [1]
        assert transport.requests == ["/data/posts/1.mjs", "/data/posts/[id].mjs"]

    @pytest.mark.asyncio
    async def test_fallback_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        transport = StaticTransport({POST_TEMPLATE: "export default {}"})

        with caplog.at_level(logging.DEBUG, logger="perch.loaders"):
            await fetch_loader(transport, "/posts/1", SEGMENTS)

        assert any("served from fallback" in r.getMessage() for r in caplog.records)


class TestConcurrentCalls:
    @pytest.mark.asyncio
    async def test_calls_are_independent(self) -> None:
        transport = StaticTransport(
            {
                POST_1: 'export default {"n": 1}',
                "/_expo/loaders/posts/2.js": 'export default {"n": 2}',
            },
            delays={POST_1: 0.02},
        )

        first, second = await asyncio.gather(
            fetch_loader(transport, "/posts/1", SEGMENTS),
            fetch_loader(transport, "/posts/2", SEGMENTS),
        )

        assert first == {"n": 1}
        assert second == {"n": 2}

    @pytest.mark.asyncio
    async def test_identical_calls_are_not_deduplicated(self) -> None:
        transport = StaticTransport({POST_1: 'export default {"n": 1}'})

        await asyncio.gather(
            fetch_loader(transport, "/posts/1"),
            fetch_loader(transport, "/posts/1"),
        )

        assert transport.requests == [POST_1, POST_1]


class TestRace:
    @pytest.mark.asyncio
    async def test_primary_success_cancels_fallback(self) -> None:
        transport = StaticTransport(
            {
                POST_1: 'export default {"title":"Hello"}',
                POST_TEMPLATE: 'export default {"id":"[id]"}',
            },
            delays={POST_1: 0.01, POST_TEMPLATE: 5.0},
        )

        started = time.monotonic()
        result = await resolve_loader(transport, "/posts/1", SEGMENTS, config=RACE)

        assert isinstance(result, PrimaryResult)
        assert result.payload == {"title": "Hello"}
        assert set(transport.requests) == {POST_1, POST_TEMPLATE}
        assert time.monotonic() - started < 2.0

    @pytest.mark.asyncio
    async def test_primary_wins_even_when_fallback_is_faster(self) -> None:
        transport = StaticTransport(
            {
                POST_1: 'export default {"title":"Hello"}',
                POST_TEMPLATE: 'export default {"id":"[id]"}',
            },
            delays={POST_1: 0.05},
        )

        result = await resolve_loader(transport, "/posts/1", SEGMENTS, config=RACE)

        assert isinstance(result, PrimaryResult)

    @pytest.mark.asyncio
    async def test_primary_failure_uses_fallback(self) -> None:
        transport = StaticTransport(
            {POST_TEMPLATE: 'export default {"id":"[id]"}'},
            delays={POST_TEMPLATE: 0.01},
        )

        result = await resolve_loader(transport, "/posts/1", SEGMENTS, config=RACE)

        assert isinstance(result, FallbackResult)
        assert result.payload == {"id": "[id]"}

    @pytest.mark.asyncio
    async def test_both_fail_surfaces_primary(self) -> None:
        transport = StaticTransport({POST_1: (410, ""), POST_TEMPLATE: (500, "")})

        with pytest.raises(LoaderFetchFailed) as exc_info:
            await fetch_loader(transport, "/posts/1", SEGMENTS, config=RACE)

        assert exc_info.value.status == 410

    @pytest.mark.asyncio
    async def test_without_candidate_behaves_like_sequential(self) -> None:
        transport = StaticTransport()

        with pytest.raises(LoaderFetchFailed):
            await fetch_loader(transport, "/about", ["about"], config=RACE)

        assert transport.requests == ["/_expo/loaders/about.js"]

    @pytest.mark.asyncio
    async def test_fallback_bug_raised_bare(self) -> None:
        class _BrokenTemplateTransport:
            async def get(self, path: str) -> TransportResponse:
                if path == POST_TEMPLATE:
                    raise RuntimeError("bug in transport")
                await asyncio.sleep(0.01)
                return TransportResponse(200, 'export default {"title":"Hello"}')

        with pytest.raises(RuntimeError, match="bug in transport") as exc_info:
            await fetch_loader(_BrokenTemplateTransport(), "/posts/1", SEGMENTS, config=RACE)

        assert not isinstance(exc_info.value, BaseExceptionGroup)
