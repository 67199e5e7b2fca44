"""HTTP client for interacting with OSRM services."""

from __future__ import annotations

import logging
from typing import Sequence

import httpx

from ...config import settings
from ..cancellation import CancellationToken

logger = logging.getLogger(__name__)


class OSRMRouteError(Exception):
    """OSRM answered but did not return a usable route."""


class OSRMClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.osrm_base_url).rstrip("/")
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self._transport,
        )

    async def route(
        self,
        coordinates: Sequence[tuple[float, float]],
        *,
        token: CancellationToken | None = None,
    ) -> dict:
        """Get the driving route through `coordinates` from the OSRM route endpoint.

        Args:
            coordinates: Sequence of (lat, lon) tuples for the route waypoints
            token: Optional cancellation token raced against the request

        Returns:
            The first route: ``{"distance": metres, "duration": seconds}``

        Raises:
            httpx.HTTPError: transport failure or non-2xx status.
            OSRMRouteError: OSRM reported an error code or no routes.
            OperationCancelled: `token` fired while the request was in flight.
        """
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required for OSRM route.")

        # OSRM route endpoint expects coordinates as "lon,lat;lon,lat;..."
        coordinate_str = ";".join(f"{lon},{lat}" for lat, lon in coordinates)
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"
        params = {"overview": "false"}

        async with self._get_client() as client:
            request = client.get(url, params=params)
            response = await (token.run(request) if token is not None else request)
            response.raise_for_status()
            try:
                data = response.json()
            except ValueError as exc:
                raise OSRMRouteError("OSRM route response is not JSON") from exc

        if not isinstance(data, dict):
            raise OSRMRouteError("OSRM route response is not a JSON object")
        if data.get("code") != "Ok":
            raise OSRMRouteError(f"OSRM route request failed: {data.get('message', data.get('code', 'Unknown error'))}")
        routes = data.get("routes") or []
        if not routes:
            raise OSRMRouteError("OSRM returned no routes.")
        route = routes[0]
        return {
            "distance": float(route["distance"]),
            "duration": float(route["duration"]),
        }


async def check_health(
    base_url: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bool:
    """Check OSRM service health with a minimal two-point route request.

    Public OSRM endpoints may not have a /health endpoint, so we test
    connectivity with a short route in central Berlin.
    """
    base = (base_url or settings.osrm_base_url).rstrip("/")
    if not base:
        return False
    test_coords = "13.388860,52.517037;13.385983,52.496891"
    url = f"{base}/route/v1/{settings.osrm_profile}/{test_coords}"
    try:
        async with httpx.AsyncClient(timeout=5.0, transport=transport) as client:
            response = await client.get(url, params={"overview": "false"})
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning(f"OSRM health check failed: {exc}")
        return False
    return data.get("code") == "Ok"
