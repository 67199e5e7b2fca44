"""Distance between one pair of locations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..models.domain import Coordinates, LocationInput, RouteSummary, TravelMode
from .cancellation import CancellationToken
from .geocoding import Geocoder
from .geospatial import bearing_degrees, flight_time_hours, haversine_km, km_to_miles
from .routing import Router

ROAD_ERROR_MESSAGE = (
    "Unable to calculate road distance. The locations may be too far apart, "
    "not connected by road, or separated by water."
)


class LocationNotFoundError(ValueError):
    """An endpoint has no coordinates and its name could not be geocoded."""


@dataclass(slots=True)
class PairDistance:
    origin: Coordinates
    destination: Coordinates
    distance_km: float
    distance_miles: float
    flight_time_hours: float
    bearing_degrees: float
    road: Optional[RouteSummary] = None
    road_error: Optional[str] = None


async def _locate(location: LocationInput, geocoder: Geocoder, token: CancellationToken | None) -> Coordinates:
    if location.coordinates is not None:
        return location.coordinates
    coordinates = await geocoder.geocode(location.name, token)
    if coordinates is None:
        raise LocationNotFoundError(f"Location '{location.name or ''}' could not be found.")
    return coordinates


async def calculate_pair(
    origin: LocationInput,
    destination: LocationInput,
    mode: TravelMode | str,
    geocoder: Geocoder,
    router: Router,
    token: CancellationToken | None = None,
) -> PairDistance:
    """Air distance for the pair, plus the road route when `mode` is road."""
    mode = TravelMode(mode)
    start = await _locate(origin, geocoder, token)
    end = await _locate(destination, geocoder, token)

    distance = haversine_km(start.lat, start.lon, end.lat, end.lon)
    result = PairDistance(
        origin=start,
        destination=end,
        distance_km=distance,
        distance_miles=km_to_miles(distance),
        flight_time_hours=flight_time_hours(distance),
        bearing_degrees=bearing_degrees(start.lat, start.lon, end.lat, end.lon),
    )
    if mode is TravelMode.ROAD:
        result.road = await router.route(start.lat, start.lon, end.lat, end.lon, token)
        if result.road is None:
            result.road_error = ROAD_ERROR_MESSAGE
    return result
