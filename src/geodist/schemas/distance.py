"""Single-pair distance request/response schemas."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

from ..models.domain import LocationInput


class LocationModel(BaseModel):
    name: Optional[str] = Field(default=None, description="Free-text place name to geocode.")
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lon: Optional[float] = Field(default=None, ge=-180, le=180)

    @model_validator(mode="after")
    def _require_name_or_coordinates(self) -> "LocationModel":
        has_name = bool(self.name and self.name.strip())
        has_coordinates = self.lat is not None and self.lon is not None
        if not has_name and not has_coordinates:
            raise ValueError("Provide a name or both lat and lon.")
        return self

    def to_domain(self) -> LocationInput:
        return LocationInput(name=(self.name or "").strip() or None, lat=self.lat, lon=self.lon)


class DistanceRequest(BaseModel):
    origin: LocationModel = Field(..., alias="from")
    destination: LocationModel = Field(..., alias="to")
    mode: Literal["air", "road"] = "air"

    model_config = {"populate_by_name": True}


class CoordinatesModel(BaseModel):
    lat: float
    lon: float


class RoadDistanceModel(BaseModel):
    distance_km: float
    distance_miles: float
    duration_min: float


class DistanceResponse(BaseModel):
    origin: CoordinatesModel
    destination: CoordinatesModel
    mode: Literal["air", "road"]
    distance_km: float
    distance_miles: float
    flight_time_hours: float
    bearing_degrees: float
    road: Optional[RoadDistanceModel] = None
    road_error: Optional[str] = None
