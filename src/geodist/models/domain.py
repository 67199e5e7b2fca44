"""Domain models for location pairs, resolved routes and bulk progress."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class TravelMode(str, Enum):
    AIR = "air"
    ROAD = "road"


class Phase(str, Enum):
    PARSING = "parsing"
    GEOCODING = "geocoding"
    CALCULATING = "calculating"
    ROUTING = "routing"
    ROUTING_COORDS = "routing-coords"
    DONE = "done"
    CANCELLED = "cancelled"


GEOCODING_FAILED = "Geocoding failed"
ROUTE_NOT_AVAILABLE = "Road route not available"


@dataclass(frozen=True, slots=True)
class Coordinates:
    lat: float
    lon: float


@dataclass(frozen=True, slots=True)
class RouteSummary:
    """Driving distance and duration for one coordinate pair."""

    distance_km: float
    duration_min: float


@dataclass(frozen=True, slots=True)
class LocationInput:
    """A route endpoint given by name, coordinates, or both."""

    name: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None

    @property
    def coordinates(self) -> Optional[Coordinates]:
        if self.lat is None or self.lon is None:
            return None
        return Coordinates(self.lat, self.lon)

    @property
    def is_usable(self) -> bool:
        return bool(self.name) or self.coordinates is not None


@dataclass(frozen=True, slots=True)
class RouteRow:
    """One parsed input row; `extra` carries unrecognised columns unchanged."""

    origin: LocationInput
    destination: LocationInput
    extra: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class ResolvedRoute:
    """A route row plus everything the pipeline resolved for it.

    Numeric fields left as ``None`` are unavailable. ``error`` explains why.
    """

    row: RouteRow
    from_name: str
    to_name: str
    from_lat: Optional[float] = None
    from_lon: Optional[float] = None
    to_lat: Optional[float] = None
    to_lon: Optional[float] = None
    distance_km: Optional[float] = None
    duration_min: Optional[float] = None
    error: Optional[str] = None

    @property
    def has_coordinates(self) -> bool:
        return None not in (self.from_lat, self.from_lon, self.to_lat, self.to_lon)


@dataclass(slots=True)
class ProcessProgress:
    current: int = 0
    total: int = 0
    phase: Phase = Phase.PARSING
    percentage: int = 0

    def update(
        self,
        *,
        current: Optional[int] = None,
        total: Optional[int] = None,
        phase: Optional[Phase] = None,
        percentage: Optional[int] = None,
    ) -> None:
        """Apply a partial update; percentage follows current/total unless given."""
        if total is not None:
            self.total = total
        if phase is not None:
            self.phase = phase
        if current is not None:
            self.current = current
            if percentage is None and self.total:
                percentage = round(self.current / self.total * 100)
        if percentage is not None:
            self.percentage = max(0, min(100, percentage))

    def reset(self, phase: Phase = Phase.PARSING) -> None:
        self.current = 0
        self.total = 0
        self.phase = phase
        self.percentage = 0

    def snapshot(self) -> dict:
        return {
            "current": self.current,
            "total": self.total,
            "phase": self.phase.value,
            "percentage": self.percentage,
        }
