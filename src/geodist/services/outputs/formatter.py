"""Utilities to serialize bulk distance results into records and CSV."""

from __future__ import annotations

import csv
import io
import math
from datetime import datetime, timezone
from typing import Optional, Sequence

from ...models.domain import ROUTE_NOT_AVAILABLE, ResolvedRoute, TravelMode
from ..geospatial import flight_time_hours, km_to_miles

UNRESOLVED = "-"
NOT_AVAILABLE = "N/A"

BASE_HEADERS = ["from", "to", "from_lat", "from_lon", "to_lat", "to_lon", "distance_km", "distance_miles"]
AIR_HEADERS = BASE_HEADERS + ["flight_time_hours"]
ROAD_HEADERS = BASE_HEADERS + ["drive_time_hours", "drive_time_minutes"]


def headers_for_mode(mode: TravelMode | str) -> list[str]:
    return AIR_HEADERS if TravelMode(mode) is TravelMode.AIR else ROAD_HEADERS


def _fixed(value: Optional[float], digits: int, missing: str = UNRESOLVED) -> str:
    return missing if value is None else f"{value:.{digits}f}"


def result_to_record(resolved: ResolvedRoute, mode: TravelMode | str) -> dict[str, str]:
    """Flatten one result into display strings (4-decimal coordinates, 2-decimal distances)."""
    mode = TravelMode(mode)
    missing = NOT_AVAILABLE if resolved.error == ROUTE_NOT_AVAILABLE else UNRESOLVED
    km = resolved.distance_km
    record = {
        **resolved.row.extra,
        "from": resolved.from_name,
        "to": resolved.to_name,
        "from_lat": _fixed(resolved.from_lat, 4),
        "from_lon": _fixed(resolved.from_lon, 4),
        "to_lat": _fixed(resolved.to_lat, 4),
        "to_lon": _fixed(resolved.to_lon, 4),
        "distance_km": _fixed(km, 2, missing),
        "distance_miles": _fixed(km_to_miles(km) if km is not None else None, 2, missing),
    }
    if mode is TravelMode.AIR:
        record["flight_time_hours"] = _fixed(flight_time_hours(km) if km is not None else None, 1, missing)
    else:
        duration = resolved.duration_min
        record["drive_time_hours"] = _fixed(duration / 60 if duration is not None else None, 1, missing)
        record["drive_time_minutes"] = missing if duration is None else str(math.floor(duration))
    record["error"] = resolved.error or ""
    return record


def results_to_csv(results: Sequence[ResolvedRoute], mode: TravelMode | str) -> str:
    headers = headers_for_mode(mode)
    extra_headers: list[str] = []
    for resolved in results:
        for column in resolved.row.extra:
            if column not in extra_headers and column not in headers and column != "error":
                extra_headers.append(column)
    fieldnames = headers + extra_headers + ["error"]

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(fieldnames)
    for resolved in results:
        record = result_to_record(resolved, mode)
        writer.writerow([record.get(column) or UNRESOLVED for column in fieldnames])
    return buffer.getvalue()


def results_filename(mode: TravelMode | str, now: datetime | None = None) -> str:
    moment = now or datetime.now(timezone.utc)
    return f"distance_results_{TravelMode(mode).value}_{int(moment.timestamp() * 1000)}.csv"
