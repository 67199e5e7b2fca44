"""Grouped concurrent execution of asynchronous tasks."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

from ..cancellation import CancellationToken

T = TypeVar("T")

Task = Callable[[CancellationToken], Awaitable[T]]

logger = logging.getLogger(__name__)


async def run_batches(
    tasks: Sequence[Task[T]],
    batch_size: int,
    delay_seconds: float,
    token: CancellationToken,
    on_progress: Optional[Callable[[int], None]] = None,
) -> list[Optional[T]]:
    """Run `tasks` in consecutive groups of at most `batch_size`.

    Every task in a group starts together and the whole group settles before
    the next one starts. A task that raises leaves ``None`` in its slot
    without disturbing its siblings. Slots follow input order, whatever order
    the tasks finish in.

    Cancellation is checked before each group. Tasks that never started get
    no slot at all, so the result can be shorter than `tasks`.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1.")

    results: list[Optional[T]] = []
    total_batches = (len(tasks) + batch_size - 1) // batch_size
    for batch_index, start in enumerate(range(0, len(tasks), batch_size)):
        if token.cancelled:
            logger.info(f"Batch run cancelled after {len(results)}/{len(tasks)} tasks")
            break

        batch = tasks[start : start + batch_size]
        settled = await asyncio.gather(*(task(token) for task in batch), return_exceptions=True)
        for outcome in settled:
            if isinstance(outcome, BaseException):
                logger.warning(f"Batch task failed: {outcome!r}")
                results.append(None)
            else:
                results.append(outcome)

        logger.debug(f"Batch {batch_index + 1}/{total_batches} settled ({len(results)}/{len(tasks)} tasks)")
        if on_progress is not None:
            on_progress(len(results))

        if start + batch_size < len(tasks):
            await token.sleep(delay_seconds)
    return results
