"""HTTP client for interacting with a Nominatim-compatible geocoding service."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from ...config import settings
from ..cancellation import CancellationToken

logger = logging.getLogger(__name__)


class GeocodingServiceError(Exception):
    """The geocoding service answered, but not with a usable result set."""


@dataclass(frozen=True, slots=True)
class GeocodeCandidate:
    display_name: str
    lat: float
    lon: float
    country: str = ""
    state: str = ""
    city: str = ""


def _parse_candidate(place: dict) -> GeocodeCandidate:
    address = place.get("address") or {}
    return GeocodeCandidate(
        display_name=place.get("display_name", ""),
        lat=float(place["lat"]),
        lon=float(place["lon"]),
        country=address.get("country", ""),
        state=address.get("state") or address.get("city") or address.get("suburb") or "",
        city=address.get("city") or address.get("town") or address.get("village") or "",
    )


class NominatimClient:
    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.nominatim_base_url).rstrip("/")
        if not self.base_url:
            raise ValueError("Geocoding base URL is not configured.")
        self.user_agent = user_agent or settings.nominatim_user_agent
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
        )

    async def search(
        self,
        query: str,
        *,
        limit: int = 1,
        token: CancellationToken | None = None,
    ) -> list[GeocodeCandidate]:
        """Look up `query` and return ranked candidates (best first).

        Raises:
            httpx.HTTPError: transport failure or non-2xx status.
            GeocodingServiceError: the body is not a candidate list.
            OperationCancelled: `token` fired while the request was in flight.
        """
        params = {
            "format": "json",
            "limit": str(limit),
            "q": query,
            "addressdetails": "1",
        }
        url = f"{self.base_url}/search"
        async with self._get_client() as client:
            request = client.get(url, params=params)
            response = await (token.run(request) if token is not None else request)
            response.raise_for_status()
            try:
                data = response.json()
            except ValueError as exc:
                raise GeocodingServiceError(f"Geocoding response for '{query}' is not JSON") from exc

        if not isinstance(data, list):
            raise GeocodingServiceError(f"Unexpected geocoding payload for '{query}': {type(data).__name__}")
        candidates: list[GeocodeCandidate] = []
        for place in data:
            try:
                candidates.append(_parse_candidate(place))
            except (KeyError, TypeError, ValueError) as exc:
                logger.debug(f"Skipping malformed geocoding candidate for '{query}': {exc}")
        return candidates
