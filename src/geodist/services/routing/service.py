"""Cache-or-fetch road routing."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ...models.domain import RouteSummary
from ..cache import ResultCache, route_cache_key
from ..cancellation import CancellationToken, OperationCancelled
from .osrm_client import OSRMClient, OSRMRouteError

logger = logging.getLogger(__name__)


class Router:
    """Resolves a coordinate pair to a driving distance and duration.

    Failures are not retried: a missing route usually means the endpoints
    are not connected by road, so ``None`` is a result, not a fault.
    """

    def __init__(self, cache: ResultCache[str, RouteSummary], client: OSRMClient | None = None) -> None:
        self.cache = cache
        self.client = client or OSRMClient()

    async def route(
        self,
        from_lat: float,
        from_lon: float,
        to_lat: float,
        to_lon: float,
        token: CancellationToken | None = None,
    ) -> Optional[RouteSummary]:
        key = route_cache_key(from_lat, from_lon, to_lat, to_lon)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        if token is not None and token.cancelled:
            return None

        try:
            data = await self.client.route([(from_lat, from_lon), (to_lat, to_lon)], token=token)
        except OperationCancelled:
            return None
        except (httpx.HTTPError, OSRMRouteError, KeyError, TypeError, ValueError) as error:
            logger.info(f"Road route not available for {key}: {error}")
            return None

        summary = RouteSummary(
            distance_km=data["distance"] / 1000.0,
            duration_min=data["duration"] / 60.0,
        )
        self.cache.put(key, summary)
        return summary
