"""Cache-or-fetch geocoding with bounded retry."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ...config import settings
from ...models.domain import Coordinates
from ..cache import ResultCache
from ..cancellation import CancellationToken, OperationCancelled
from .nominatim_client import GeocodingServiceError, NominatimClient

logger = logging.getLogger(__name__)


class Geocoder:
    """Resolves free-text locations to coordinates.

    Transient failures (transport errors, non-2xx responses, unreadable
    bodies) are retried with a linear backoff. An empty candidate list is a
    definitive miss and is not retried. Nothing raises to the caller: every
    failure comes back as ``None``.
    """

    def __init__(
        self,
        cache: ResultCache[str, Coordinates],
        client: NominatimClient | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
    ) -> None:
        self.cache = cache
        self.client = client or NominatimClient()
        self.max_retries = max_retries if max_retries is not None else settings.geocode_max_retries
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else settings.geocode_backoff_ms / 1000.0
        )

    async def geocode(self, name: str | None, token: CancellationToken | None = None) -> Optional[Coordinates]:
        if not name:
            return None
        cached = self.cache.get(name)
        if cached is not None:
            return cached

        token = token or CancellationToken()
        attempt = 0
        while True:
            if token.cancelled:
                return None
            try:
                candidates = await self.client.search(name, limit=1, token=token)
            except OperationCancelled:
                return None
            except (httpx.HTTPError, GeocodingServiceError) as error:
                if attempt >= self.max_retries:
                    logger.warning(f"Geocoding '{name}' failed after {attempt + 1} attempts: {error}")
                    return None
                attempt += 1
                logger.debug(f"Geocoding '{name}' failed, retrying (attempt {attempt}/{self.max_retries}): {error}")
                if await token.sleep(self.backoff_seconds * attempt):
                    return None
                continue

            if not candidates:
                logger.info(f"No geocoding match for '{name}'")
                return None
            best = candidates[0]
            coordinates = Coordinates(best.lat, best.lon)
            self.cache.put(name, coordinates)
            return coordinates
