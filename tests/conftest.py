import asyncio

import httpx
import pytest


class SlowTransport(httpx.AsyncBaseTransport):
    """Async transport whose requests stay in flight for `delay` seconds."""

    def __init__(self, delay: float = 10.0) -> None:
        self.delay = delay
        self.started = 0
        self.finished = 0

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.started += 1
        await asyncio.sleep(self.delay)
        self.finished += 1
        return httpx.Response(200, json={"code": "Ok", "routes": [{"distance": 1000.0, "duration": 60.0}]})


@pytest.fixture()
def slow_transport() -> SlowTransport:
    return SlowTransport()
