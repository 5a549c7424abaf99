from __future__ import annotations

import asyncio
import logging
from typing import Dict

from greencredits.repositories.report_repository import ReportRepository
from greencredits.services.zone_classifier import ZoneClassifier, parse_coordinates, zone_classifier

logger = logging.getLogger(__name__)


async def backfill_zones(
    reports: ReportRepository, classifier: ZoneClassifier = zone_classifier
) -> Dict[str, int]:
    """
    Assign a zone to reports stored without one, from their address and
    coordinates. Returns the number of reports updated per zone.
    """
    updated: Dict[str, int] = {}
    for doc in await reports.find_missing_zone():
        zone = classifier.classify(doc.get("address"), parse_coordinates(doc.get("lat"), doc.get("lng")))
        await reports.set_fields(doc["report_id"], {"assigned_zone": zone})
        updated[zone] = updated.get(zone, 0) + 1
    logger.info("zone backfill done: %s", updated or "nothing to do")
    return updated


async def main() -> None:
    from greencredits.db.mongo import reports_collection

    logging.basicConfig(level=logging.INFO)
    await backfill_zones(ReportRepository(reports_collection))


if __name__ == "__main__":
    asyncio.run(main())
