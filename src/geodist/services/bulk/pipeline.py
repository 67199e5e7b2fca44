"""Bulk distance orchestration: classify, geocode, route, assemble."""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping, Optional

from ...config import settings
from ...models.domain import (
    GEOCODING_FAILED,
    ROUTE_NOT_AVAILABLE,
    Coordinates,
    LocationInput,
    Phase,
    ProcessProgress,
    ResolvedRoute,
    RouteRow,
    TravelMode,
)
from ..cancellation import CancellationToken
from ..errors import BulkProcessingError, InvalidUploadError, NoValidRowsError
from ..geocoding import Geocoder
from ..geospatial import haversine_km
from ..routing import Router
from .classifier import COORDINATES_LABEL, all_have_coordinates, classify_rows, prepare_rows
from .scheduler import run_batches

logger = logging.getLogger(__name__)

# Progress is pushed every this many rows during the per-row phases.
PROGRESS_EVERY_ROWS = 3


@dataclass
class BulkOutcome:
    status: Phase
    mode: TravelMode
    results: list[ResolvedRoute] = field(default_factory=list)

    @property
    def cancelled(self) -> bool:
        return self.status is Phase.CANCELLED


def _endpoint(location: LocationInput, table: Mapping[str, Coordinates]) -> tuple[str, Optional[Coordinates]]:
    if location.coordinates is not None:
        return location.name or COORDINATES_LABEL, location.coordinates
    if location.name and location.name in table:
        return location.name, table[location.name]
    return location.name or "Unknown", None


def resolve_row(row: RouteRow, table: Mapping[str, Coordinates]) -> ResolvedRoute:
    """Fill in endpoint coordinates from the row itself or the geocoded `table`."""
    from_name, origin = _endpoint(row.origin, table)
    to_name, destination = _endpoint(row.destination, table)
    resolved = ResolvedRoute(row=row, from_name=from_name, to_name=to_name)
    if origin is not None:
        resolved.from_lat, resolved.from_lon = origin.lat, origin.lon
    if destination is not None:
        resolved.to_lat, resolved.to_lon = destination.lat, destination.lon
    return resolved


def apply_air_distance(resolved: ResolvedRoute) -> ResolvedRoute:
    resolved.distance_km = haversine_km(resolved.from_lat, resolved.from_lon, resolved.to_lat, resolved.to_lon)
    return resolved


class BulkPipeline:
    """Runs one upload through the phases parsing -> ... -> done.

    Progress is written to a single `ProcessProgress` owned by this pipeline
    and pushed to `on_progress` after each update.
    """

    def __init__(
        self,
        geocoder: Geocoder,
        router: Router,
        *,
        progress: ProcessProgress | None = None,
        on_progress: Callable[[ProcessProgress], None] | None = None,
        batch_size: int | None = None,
        batch_delay_seconds: float | None = None,
        road_delay_seconds: float | None = None,
    ) -> None:
        self.geocoder = geocoder
        self.router = router
        self.progress = progress or ProcessProgress()
        self.on_progress = on_progress
        self.batch_size = batch_size or settings.geocode_batch_size
        self.batch_delay_seconds = (
            batch_delay_seconds if batch_delay_seconds is not None else settings.geocode_batch_delay_ms / 1000.0
        )
        self.road_delay_seconds = (
            road_delay_seconds if road_delay_seconds is not None else settings.road_request_delay_ms / 1000.0
        )

    def _set_progress(self, **changes) -> None:
        self.progress.update(**changes)
        if self.on_progress is not None:
            self.on_progress(self.progress)

    async def run(
        self,
        raw_rows: Iterable[Mapping[str, str]],
        mode: TravelMode | str,
        token: CancellationToken | None = None,
    ) -> BulkOutcome:
        """Process parsed rows and return results in input order.

        Raises:
            NoValidRowsError: no row survives filtering.
            BulkProcessingError: anything unexpected; the run stops cleanly.
        """
        mode = TravelMode(mode)
        token = token or CancellationToken()
        self.progress.reset(Phase.PARSING)
        self._set_progress()
        try:
            return await self._run(raw_rows, mode, token)
        except (InvalidUploadError, NoValidRowsError):
            raise
        except Exception as exc:
            logger.exception(f"Bulk processing failed: {exc}")
            self.progress.reset(Phase.PARSING)
            self._set_progress()
            raise BulkProcessingError(f"Error processing file: {exc}") from exc

    async def _run(self, raw_rows: Iterable[Mapping[str, str]], mode: TravelMode, token: CancellationToken) -> BulkOutcome:
        rows = prepare_rows(raw_rows)
        if not rows:
            raise NoValidRowsError("No valid data found in CSV file")
        total = len(rows)
        logger.info(f"Processing {total} rows in {mode.value} mode")

        if mode is TravelMode.AIR and all_have_coordinates(rows):
            logger.info("All rows carry coordinates, computing air distances directly")
            self._set_progress(current=0, total=total, phase=Phase.CALCULATING, percentage=0)
            return self._finish([apply_air_distance(resolve_row(row, {})) for row in rows], mode)

        classification = classify_rows(rows)
        coordinate_rows = classification.coordinate_rows
        geocoding_rows = classification.geocoding_rows
        unique_names = classification.unique_names
        logger.info(
            f"{len(coordinate_rows)} rows with coordinates, {len(geocoding_rows)} need geocoding "
            f"({len(unique_names)} unique locations)"
        )
        slots: list[Optional[ResolvedRoute]] = [None] * total

        if coordinate_rows:
            self._set_progress(current=0, total=total, phase=Phase.CALCULATING, percentage=0)
            for index, row in coordinate_rows:
                if token.cancelled:
                    break
                resolved = resolve_row(row, {})
                if mode is TravelMode.AIR:
                    apply_air_distance(resolved)
                slots[index] = resolved
            self._set_progress(current=len(coordinate_rows))
        if token.cancelled:
            return self._cancelled(mode)

        table: dict[str, Coordinates] = {}
        if unique_names:
            self._set_progress(phase=Phase.GEOCODING, total=total)

            def report(processed: int) -> None:
                done = len(coordinate_rows) + (processed * len(geocoding_rows)) // len(unique_names)
                self._set_progress(current=done)

            tasks = [functools.partial(self.geocoder.geocode, name) for name in unique_names]
            geocoded = await run_batches(tasks, self.batch_size, self.batch_delay_seconds, token, report)
            for name, coordinates in zip(unique_names, geocoded):
                if coordinates is not None:
                    table[name] = coordinates
            logger.info(f"Geocoded {len(table)}/{len(unique_names)} locations")
        if token.cancelled:
            return self._cancelled(mode)

        self._set_progress(phase=Phase.CALCULATING if mode is TravelMode.AIR else Phase.ROUTING)
        processed = len(coordinate_rows)
        for index, row in geocoding_rows:
            if token.cancelled:
                break
            resolved = resolve_row(row, table)
            if not resolved.has_coordinates:
                resolved.error = GEOCODING_FAILED
            elif mode is TravelMode.AIR:
                apply_air_distance(resolved)
            else:
                await self._apply_road_distance(resolved, token)
            slots[index] = resolved
            processed += 1
            if processed % PROGRESS_EVERY_ROWS == 0 or processed == total:
                self._set_progress(current=processed)
        if token.cancelled:
            return self._cancelled(mode)

        if mode is TravelMode.ROAD and coordinate_rows:
            self._set_progress(phase=Phase.ROUTING_COORDS)
            for index, _row in coordinate_rows:
                if token.cancelled:
                    break
                await self._apply_road_distance(slots[index], token)
            if token.cancelled:
                return self._cancelled(mode)

        return self._finish(slots, mode)

    async def _apply_road_distance(self, resolved: ResolvedRoute, token: CancellationToken) -> None:
        summary = await self.router.route(
            resolved.from_lat, resolved.from_lon, resolved.to_lat, resolved.to_lon, token
        )
        if summary is not None:
            resolved.distance_km = summary.distance_km
            resolved.duration_min = summary.duration_min
        else:
            resolved.error = ROUTE_NOT_AVAILABLE
        await token.sleep(self.road_delay_seconds)

    def _finish(self, slots: list[Optional[ResolvedRoute]], mode: TravelMode) -> BulkOutcome:
        results = [resolved for resolved in slots if resolved is not None]
        self._set_progress(current=len(slots), total=len(slots), phase=Phase.DONE, percentage=100)
        logger.info(f"Processing complete: {len(results)} rows")
        return BulkOutcome(status=Phase.DONE, mode=mode, results=results)

    def _cancelled(self, mode: TravelMode) -> BulkOutcome:
        # Partial results are dropped; cache entries written so far stay valid.
        logger.info("Bulk processing cancelled")
        self.progress.reset(Phase.CANCELLED)
        self._set_progress()
        return BulkOutcome(status=Phase.CANCELLED, mode=mode)
