"""Single-pair distance endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ...schemas.distance import CoordinatesModel, DistanceRequest, DistanceResponse, RoadDistanceModel
from ...services.bulk import BulkSession
from ...services.distance import LocationNotFoundError, calculate_pair
from ...services.geospatial import km_to_miles
from .bulk import get_bulk_session

router = APIRouter(tags=["distance"])


@router.post("/distance", response_model=DistanceResponse, status_code=status.HTTP_200_OK)
async def distance(payload: DistanceRequest, session: BulkSession = Depends(get_bulk_session)) -> DistanceResponse:
    try:
        result = await calculate_pair(
            payload.origin.to_domain(),
            payload.destination.to_domain(),
            payload.mode,
            session.geocoder,
            session.router,
        )
    except LocationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    road = None
    if result.road is not None:
        road = RoadDistanceModel(
            distance_km=result.road.distance_km,
            distance_miles=km_to_miles(result.road.distance_km),
            duration_min=result.road.duration_min,
        )
    return DistanceResponse(
        origin=CoordinatesModel(lat=result.origin.lat, lon=result.origin.lon),
        destination=CoordinatesModel(lat=result.destination.lat, lon=result.destination.lon),
        mode=payload.mode,
        distance_km=result.distance_km,
        distance_miles=result.distance_miles,
        flight_time_hours=result.flight_time_hours,
        bearing_degrees=result.bearing_degrees,
        road=road,
        road_error=result.road_error,
    )
