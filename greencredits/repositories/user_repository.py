from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from bson import ObjectId


class UserRepository:
    def __init__(self, col):
        self.col = col

    async def find_by_id(self, user_id: ObjectId) -> Optional[Dict[str, Any]]:
        return await self.col.find_one({"_id": user_id})

    async def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return await self.col.find_one({"email": email})

    async def insert(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        res = await self.col.insert_one(doc)
        doc["_id"] = res.inserted_id
        return doc

    async def delete(self, user_id: ObjectId) -> None:
        await self.col.delete_one({"_id": user_id})

    async def apply_streak(
        self,
        user_id: ObjectId,
        report_id: int,
        submitted_at: datetime,
        current_streak: int,
        longest_streak: int,
    ) -> bool:
        """
        Store the streak computed for ``report_id``. Matches nothing when this
        report was already applied or a later report has superseded it.
        """
        res = await self.col.update_one(
            {
                "_id": user_id,
                "last_report_id": {"$ne": report_id},
                "$or": [
                    {"last_report_at": None},
                    {"last_report_at": {"$lte": submitted_at}},
                ],
            },
            {
                "$set": {
                    "current_streak": current_streak,
                    "last_report_at": submitted_at,
                    "last_report_id": report_id,
                },
                "$max": {"longest_streak": longest_streak},
            },
        )
        return res.modified_count == 1

    async def get_names(self, ids: Iterable[ObjectId]) -> Dict[ObjectId, str]:
        ids = list(ids)
        if not ids:
            return {}
        names = {}
        async for u in self.col.find({"_id": {"$in": ids}}, {"name": 1}):
            names[u["_id"]] = u.get("name") or "Anonymous"
        return names

    async def count(self) -> int:
        return await self.col.count_documents({})
