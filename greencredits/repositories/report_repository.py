from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument


def _zone_filter(zones: Optional[Sequence[str]]) -> Dict[str, Any]:
    if zones is None:
        return {}
    return {"assigned_zone": {"$in": list(zones)}}


class ReportRepository:
    def __init__(self, col):
        self.col = col

    async def insert(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        res = await self.col.insert_one(doc)
        doc["_id"] = res.inserted_id
        return doc

    async def find_by_report_id(self, report_id: int) -> Optional[Dict[str, Any]]:
        return await self.col.find_one({"report_id": report_id})

    async def max_report_id(self) -> Optional[int]:
        last = await self.col.find_one({}, {"report_id": 1}, sort=[("report_id", DESCENDING)])
        return int(last["report_id"]) if last else None

    async def list_for_user(self, user_id: ObjectId, limit: int = 200) -> List[Dict[str, Any]]:
        cursor = self.col.find({"user_id": user_id}).sort("timestamps.created_at", DESCENDING)
        return await cursor.to_list(length=limit)

    async def list_in_zones(
        self,
        zones: Optional[Sequence[str]],
        statuses: Optional[Sequence[str]] = None,
        limit: int = 500,
    ) -> List[Dict[str, Any]]:
        filt = _zone_filter(zones)
        if statuses:
            filt["status"] = {"$in": list(statuses)}
        cursor = self.col.find(filt).sort("timestamps.created_at", DESCENDING)
        return await cursor.to_list(length=limit)

    async def count_in_zones(
        self, zones: Optional[Sequence[str]], status: Optional[str] = None
    ) -> int:
        filt = _zone_filter(zones)
        if status:
            filt["status"] = status
        return await self.col.count_documents(filt)

    async def zone_breakdown(self, zones: Optional[Sequence[str]]) -> List[Dict[str, Any]]:
        pipeline = [
            {"$match": _zone_filter(zones)},
            {"$group": {
                "_id": "$assigned_zone",
                "total": {"$sum": 1},
                "pending": {"$sum": {"$cond": [{"$eq": ["$status", "pending"]}, 1, 0]}},
                "resolved": {"$sum": {"$cond": [{"$eq": ["$status", "resolved"]}, 1, 0]}},
            }},
            {"$sort": {"_id": 1}},
        ]
        rows = await self.col.aggregate(pipeline).to_list(length=None)
        return [
            {"zone": r["_id"], "total": r["total"], "pending": r["pending"], "resolved": r["resolved"]}
            for r in rows
        ]

    async def update_if_status(
        self, report_id: int, expected_status: str, sets: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Compare-and-set on status so two reviewers cannot both move a report."""
        return await self.col.find_one_and_update(
            {"report_id": report_id, "status": expected_status},
            {"$set": sets},
            return_document=ReturnDocument.AFTER,
        )

    async def set_fields(self, report_id: int, sets: Dict[str, Any]) -> None:
        await self.col.update_one({"report_id": report_id}, {"$set": sets})

    async def record_reward_failure(self, report_id: int, error: str, at: datetime) -> None:
        await self.col.update_one(
            {"report_id": report_id},
            {
                "$set": {"rewards.state": "failed", "rewards.error": error, "timestamps.updated_at": at},
                "$inc": {"rewards.attempts": 1},
            },
        )

    async def find_reward_backlog(self, created_before: datetime, limit: int = 100) -> List[Dict[str, Any]]:
        cursor = self.col.find(
            {
                "rewards.state": {"$in": ["pending", "failed"]},
                "timestamps.created_at": {"$lt": created_before},
            }
        ).sort("report_id", 1)
        return await cursor.to_list(length=limit)

    async def find_missing_zone(self, limit: int = 1000) -> List[Dict[str, Any]]:
        cursor = self.col.find(
            {"$or": [
                {"assigned_zone": {"$exists": False}},
                {"assigned_zone": None},
                {"assigned_zone": ""},
            ]}
        )
        return await cursor.to_list(length=limit)
