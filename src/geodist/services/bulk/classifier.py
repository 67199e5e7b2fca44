"""Normalisation and partitioning of parsed bulk-upload rows."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Sequence

from ...models.domain import LocationInput, RouteRow

COORDINATES_LABEL = "Coordinates"
LOCATION_COLUMNS = ("from", "to", "from_lat", "from_lon", "to_lat", "to_lon")


def parse_coordinate(value: object) -> Optional[float]:
    """Return `value` as a finite float, or None when it is blank or not numeric."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def is_numeric_coordinate(value: object) -> bool:
    return parse_coordinate(value) is not None


def normalize_row(row: Mapping[str, str]) -> dict[str, str]:
    """Expand a single-column "a, b" or "lat,lon,lat,lon" row into named columns."""
    if len(row) != 1:
        return dict(row)
    (value,) = row.values()
    if not isinstance(value, str) or "," not in value:
        return dict(row)

    parts = [part.strip() for part in value.replace('"', "").strip().split(",")]
    if len(parts) == 2:
        return {"from": parts[0], "to": parts[1]}
    if len(parts) == 4 and all(is_numeric_coordinate(part) for part in parts):
        return {
            "from_lat": parts[0],
            "from_lon": parts[1],
            "to_lat": parts[2],
            "to_lon": parts[3],
            "from": COORDINATES_LABEL,
            "to": COORDINATES_LABEL,
        }
    return dict(row)


def is_usable(row: Mapping[str, str]) -> bool:
    has_location_field = any(row.get(column) for column in ("from", "from_lat", "to", "to_lat"))
    has_value = any(value and str(value).strip() for value in row.values())
    return has_location_field and has_value


def _location(row: Mapping[str, str], prefix: str) -> LocationInput:
    return LocationInput(
        name=(row.get(prefix) or "").strip() or None,
        lat=parse_coordinate(row.get(f"{prefix}_lat")),
        lon=parse_coordinate(row.get(f"{prefix}_lon")),
    )


def to_route_row(row: Mapping[str, str]) -> RouteRow:
    extra = {key: value for key, value in row.items() if key not in LOCATION_COLUMNS}
    return RouteRow(origin=_location(row, "from"), destination=_location(row, "to"), extra=extra)


def prepare_rows(raw_rows: Iterable[Mapping[str, str]]) -> list[RouteRow]:
    """Normalise raw parsed rows and drop those without any usable location field."""
    prepared: list[RouteRow] = []
    for raw in raw_rows:
        row = normalize_row(raw)
        if is_usable(row):
            prepared.append(to_route_row(row))
    return prepared


def has_both_coordinates(row: RouteRow) -> bool:
    return row.origin.coordinates is not None and row.destination.coordinates is not None


def all_have_coordinates(rows: Sequence[RouteRow]) -> bool:
    return all(has_both_coordinates(row) for row in rows)


@dataclass
class Classification:
    """Rows split by whether they can skip geocoding; indices are input positions."""

    coordinate_rows: list[tuple[int, RouteRow]] = field(default_factory=list)
    geocoding_rows: list[tuple[int, RouteRow]] = field(default_factory=list)
    unique_names: list[str] = field(default_factory=list)


def classify_rows(rows: Sequence[RouteRow]) -> Classification:
    result = Classification()
    names: dict[str, None] = {}
    for index, row in enumerate(rows):
        if has_both_coordinates(row):
            result.coordinate_rows.append((index, row))
            continue
        result.geocoding_rows.append((index, row))
        for location in (row.origin, row.destination):
            if location.coordinates is None and location.name:
                names.setdefault(location.name, None)
    result.unique_names = list(names)
    return result
