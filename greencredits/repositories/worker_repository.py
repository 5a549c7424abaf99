from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, ReturnDocument


class WorkerRepository:
    def __init__(self, col):
        self.col = col

    async def find_by_id(self, worker_id: ObjectId) -> Optional[Dict[str, Any]]:
        return await self.col.find_one({"_id": worker_id})

    async def find_by_mobile(self, mobile: str) -> Optional[Dict[str, Any]]:
        return await self.col.find_one({"mobile": mobile})

    async def insert(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        res = await self.col.insert_one(doc)
        doc["_id"] = res.inserted_id
        return doc

    async def list_by_status(
        self, status: str, zones: Optional[Sequence[str]] = None
    ) -> List[Dict[str, Any]]:
        filt: Dict[str, Any] = {"status": status}
        if zones is not None:
            filt["assigned_zone"] = {"$in": list(zones)}
        if status == "pending":
            cursor = self.col.find(filt).sort("applied_at", DESCENDING)
        else:
            cursor = self.col.find(filt).sort("name", ASCENDING)
        return await cursor.to_list(length=500)

    async def update(self, worker_id: ObjectId, sets: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self.col.find_one_and_update(
            {"_id": worker_id},
            {"$set": sets},
            return_document=ReturnDocument.AFTER,
        )

    async def increment_completed(self, worker_id: ObjectId) -> None:
        await self.col.update_one({"_id": worker_id}, {"$inc": {"total_reports_completed": 1}})
