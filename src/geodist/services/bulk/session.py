"""Process-lifetime state shared by successive bulk uploads."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from ...data.uploads import parse_upload
from ...models.domain import Phase, ProcessProgress, TravelMode
from ..cache import SessionCache
from ..cancellation import CancellationToken
from ..geocoding import Geocoder, NominatimClient
from ..routing import OSRMClient, Router
from .pipeline import BulkOutcome, BulkPipeline

logger = logging.getLogger(__name__)


class BulkSession:
    """Owns the caches, the active cancellation token and the latest progress.

    Only one upload is active at a time: starting another cancels the one
    in flight. Cache entries written by a superseded run are kept and reused.
    """

    def __init__(
        self,
        cache: SessionCache | None = None,
        geocoding_client: NominatimClient | None = None,
        routing_client: OSRMClient | None = None,
        **pipeline_options,
    ) -> None:
        self.cache = cache or SessionCache()
        self.geocoder = Geocoder(self.cache.geocodes, client=geocoding_client)
        self.router = Router(self.cache.routes, client=routing_client)
        self.pipeline_options = pipeline_options
        self.progress = ProcessProgress()
        self.last_outcome: Optional[BulkOutcome] = None
        self._token: Optional[CancellationToken] = None

    @property
    def running(self) -> bool:
        return self._token is not None and not self._token.cancelled

    def begin(self) -> CancellationToken:
        if self._token is not None and not self._token.cancelled:
            logger.info("New upload supersedes the bulk run in progress")
            self._token.cancel()
        self._token = CancellationToken()
        self.progress = ProcessProgress()
        return self._token

    def cancel(self) -> bool:
        """Cancel the active run. Returns False when nothing was running."""
        if not self.running:
            return False
        self._token.cancel()
        self.progress.reset(Phase.CANCELLED)
        return True

    async def process_rows(self, raw_rows: Iterable[Mapping[str, str]], mode: TravelMode | str) -> BulkOutcome:
        token = self.begin()
        pipeline = BulkPipeline(self.geocoder, self.router, progress=self.progress, **self.pipeline_options)
        try:
            outcome = await pipeline.run(raw_rows, mode, token)
        finally:
            current = self._token is token
            if current:
                self._token = None
        # A superseded run must not replace the outcome of the run that replaced it.
        if current:
            self.last_outcome = outcome
        return outcome

    async def process_upload(self, filename: str, payload: bytes, mode: TravelMode | str) -> BulkOutcome:
        """Parse an uploaded CSV/XLSX file and run it through the pipeline."""
        mode = TravelMode(mode)
        rows = parse_upload(filename, payload)
        logger.info(f"Parsed {len(rows)} rows from '{filename}'")
        return await self.process_rows(rows, mode)
