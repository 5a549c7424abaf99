from __future__ import annotations

import asyncio
import logging

from pymongo.errors import PyMongoError

from greencredits.services.submission import ReportSubmissionService

logger = logging.getLogger(__name__)


async def reward_reconciler_loop(
    service: ReportSubmissionService, interval_seconds: int, stop_event: asyncio.Event
) -> None:
    """Periodically re-apply rewards for reports saved without them."""
    while not stop_event.is_set():
        try:
            await service.reconcile_backlog()
        except PyMongoError:
            logger.exception("reward backlog scan failed")
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
        except asyncio.TimeoutError:
            continue
