import asyncio
import time

import httpx
import pytest

from src.geodist.models.domain import RouteSummary
from src.geodist.services.cache import ResultCache
from src.geodist.services.cancellation import CancellationToken
from src.geodist.services.routing import OSRMClient, Router, check_health


def _router(handler, calls: list) -> Router:
    def recording_handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return handler(request)

    client = OSRMClient(base_url="http://osrm.test", profile="driving", transport=httpx.MockTransport(recording_handler))
    return Router(ResultCache(), client=client)


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"code": "Ok", "routes": [{"distance": 1877000.0, "duration": 1800.0}, {"distance": 1.0, "duration": 1.0}]})


def test_route_converts_first_route_to_km_and_minutes():
    calls: list = []
    router = _router(_ok, calls)

    summary = asyncio.run(router.route(28.6139, 77.2090, 15.2993, 74.1240))

    assert summary == RouteSummary(distance_km=1877.0, duration_min=30.0)
    assert len(calls) == 1
    assert calls[0].startswith("/route/v1/driving/")
    # OSRM expects lon,lat order
    assert "77.209,28.6139" in calls[0]


def test_route_requests_within_rounding_share_cache_entry():
    calls: list = []
    router = _router(_ok, calls)

    async def run():
        first = await router.route(28.61391, 77.20901, 15.29931, 74.12401)
        second = await router.route(28.61389, 77.20899, 15.29929, 74.12399)
        return first, second

    first, second = asyncio.run(run())

    assert first == second
    assert len(calls) == 1


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"code": "NoRoute", "message": "Impossible route between points"}),
        httpx.Response(200, json={"code": "Ok", "routes": []}),
        httpx.Response(500, text="upstream failure"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json=[{"code": "Ok", "routes": []}]),
    ],
)
def test_route_failures_yield_none_without_retry(response):
    calls: list = []
    router = _router(lambda request: response, calls)

    assert asyncio.run(router.route(0.0, 0.0, 40.0, -30.0)) is None
    assert len(calls) == 1
    assert len(router.cache) == 0


def test_route_transport_error_yields_none():
    calls: list = []

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    router = _router(handler, calls)

    assert asyncio.run(router.route(1.0, 1.0, 2.0, 2.0)) is None
    assert len(calls) == 1


def test_route_with_cancelled_token_skips_request():
    calls: list = []
    router = _router(_ok, calls)

    async def run():
        token = CancellationToken()
        token.cancel()
        return await router.route(1.0, 1.0, 2.0, 2.0, token)

    assert asyncio.run(run()) is None
    assert calls == []


def test_check_health_reports_status():
    healthy = httpx.MockTransport(_ok)
    broken = httpx.MockTransport(lambda request: httpx.Response(503))

    assert asyncio.run(check_health(base_url="http://osrm.test", transport=healthy)) is True
    assert asyncio.run(check_health(base_url="http://osrm.test", transport=broken)) is False


def test_route_in_flight_is_abandoned_on_cancel(slow_transport):
    client = OSRMClient(base_url="http://osrm.test", profile="driving", transport=slow_transport)
    router = Router(ResultCache(), client=client)

    async def run():
        token = CancellationToken()
        asyncio.get_running_loop().call_later(0.05, token.cancel)
        start = time.monotonic()
        summary = await router.route(28.6139, 77.2090, 15.2993, 74.1240, token)
        return summary, time.monotonic() - start

    summary, elapsed = asyncio.run(run())

    assert summary is None
    assert elapsed < 2.0
    assert slow_transport.started == 1
    assert slow_transport.finished == 0
    assert len(router.cache) == 0
