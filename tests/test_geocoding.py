import asyncio
import time

import httpx
import pytest

from src.geodist.models.domain import Coordinates
from src.geodist.services.cache import ResultCache
from src.geodist.services.cancellation import CancellationToken
from src.geodist.services.geocoding import Geocoder, NominatimClient

PLACES = {
    "Delhi, India": {
        "display_name": "New Delhi, Delhi, India",
        "lat": "28.6139",
        "lon": "77.2090",
        "address": {"country": "India", "state": "Delhi", "city": "New Delhi"},
    },
    "Goa, India": {
        "display_name": "Goa, India",
        "lat": "15.2993",
        "lon": "74.1240",
        "address": {"country": "India", "state": "Goa"},
    },
}


def _nominatim(calls: list, responses=None) -> NominatimClient:
    """Client backed by a mock transport; `responses` overrides the first replies in order."""
    queued = list(responses or [])

    def handler(request: httpx.Request) -> httpx.Response:
        query = request.url.params["q"]
        calls.append(query)
        if queued:
            reply = queued.pop(0)
            if isinstance(reply, Exception):
                raise reply
            return reply
        place = PLACES.get(query)
        return httpx.Response(200, json=[place] if place else [])

    return NominatimClient(base_url="http://geocoder.test", transport=httpx.MockTransport(handler))


def _geocoder(client: NominatimClient, **kwargs) -> Geocoder:
    kwargs.setdefault("backoff_seconds", 0.0)
    return Geocoder(ResultCache(), client=client, **kwargs)


def test_search_parses_ranked_candidates():
    calls: list = []
    candidates = asyncio.run(_nominatim(calls).search("Delhi, India", limit=6))

    assert calls == ["Delhi, India"]
    assert len(candidates) == 1
    assert candidates[0].lat == pytest.approx(28.6139)
    assert candidates[0].lon == pytest.approx(77.2090)
    assert candidates[0].country == "India"
    assert candidates[0].state == "Delhi"
    assert candidates[0].city == "New Delhi"


def test_geocode_is_cached_after_first_lookup():
    calls: list = []
    geocoder = _geocoder(_nominatim(calls))

    async def lookup_twice():
        return await geocoder.geocode("Goa, India"), await geocoder.geocode("Goa, India")

    first, second = asyncio.run(lookup_twice())

    assert first == second == Coordinates(15.2993, 74.124)
    assert calls == ["Goa, India"]
    assert geocoder.cache.get("Goa, India") == first


def test_geocode_blank_name_skips_network():
    calls: list = []
    geocoder = _geocoder(_nominatim(calls))

    assert asyncio.run(geocoder.geocode("")) is None
    assert asyncio.run(geocoder.geocode(None)) is None
    assert calls == []


def test_geocode_retries_transient_failures():
    calls: list = []
    client = _nominatim(calls, responses=[httpx.Response(503), httpx.Response(502)])
    geocoder = _geocoder(client, max_retries=2)

    result = asyncio.run(geocoder.geocode("Delhi, India"))

    assert result == Coordinates(28.6139, 77.209)
    assert len(calls) == 3


def test_geocode_gives_up_after_retry_budget(caplog):
    calls: list = []
    client = _nominatim(calls, responses=[httpx.Response(500)] * 5)
    geocoder = _geocoder(client, max_retries=2)

    result = asyncio.run(geocoder.geocode("Delhi, India"))

    assert result is None
    assert len(calls) == 3
    assert "Delhi, India" not in geocoder.cache
    assert any("failed after 3 attempts" in record.getMessage() for record in caplog.records)


def test_geocode_retries_transport_errors():
    calls: list = []
    request = httpx.Request("GET", "http://geocoder.test/search")
    errors = [httpx.ConnectError("connection refused", request=request) for _ in range(3)]
    geocoder = _geocoder(_nominatim(calls, responses=errors), max_retries=2)

    assert asyncio.run(geocoder.geocode("Goa, India")) is None
    assert len(calls) == 3


def test_geocode_empty_match_is_not_retried():
    calls: list = []
    geocoder = _geocoder(_nominatim(calls), max_retries=2)

    assert asyncio.run(geocoder.geocode("Atlantis")) is None
    assert calls == ["Atlantis"]


def test_geocode_with_cancelled_token_returns_none_without_request():
    calls: list = []
    geocoder = _geocoder(_nominatim(calls))

    async def run():
        token = CancellationToken()
        token.cancel()
        return await geocoder.geocode("Goa, India", token)

    assert asyncio.run(run()) is None
    assert calls == []


def test_geocode_cancellation_during_backoff_stops_retrying():
    calls: list = []
    holder: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.params["q"])
        holder["token"].cancel()
        return httpx.Response(503)

    client = NominatimClient(base_url="http://geocoder.test", transport=httpx.MockTransport(handler))
    geocoder = Geocoder(ResultCache(), client=client, max_retries=2, backoff_seconds=30.0)

    async def run():
        holder["token"] = CancellationToken()
        return await asyncio.wait_for(geocoder.geocode("Goa, India", holder["token"]), timeout=5)

    assert asyncio.run(run()) is None
    assert len(calls) == 1


def test_geocode_in_flight_is_abandoned_on_cancel(slow_transport):
    client = NominatimClient(base_url="http://geocoder.test", transport=slow_transport)
    geocoder = Geocoder(ResultCache(), client=client, max_retries=2, backoff_seconds=0.0)

    async def run():
        token = CancellationToken()
        asyncio.get_running_loop().call_later(0.05, token.cancel)
        start = time.monotonic()
        result = await geocoder.geocode("Goa, India", token)
        return result, time.monotonic() - start

    result, elapsed = asyncio.run(run())

    assert result is None
    assert elapsed < 2.0
    assert slow_transport.started == 1
    assert slow_transport.finished == 0
    assert "Goa, India" not in geocoder.cache
