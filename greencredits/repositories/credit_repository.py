from __future__ import annotations

from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument


class CreditRepository:
    def __init__(self, col):
        self.col = col

    async def find_by_user(self, user_id: ObjectId) -> Optional[Dict[str, Any]]:
        return await self.col.find_one({"user_id": user_id})

    async def insert(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        res = await self.col.insert_one(doc)
        doc["_id"] = res.inserted_id
        return doc

    async def post(
        self,
        user_id: ObjectId,
        transactions: List[Dict[str, Any]],
        counters: Dict[str, int],
        ref: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Balance increments and their transaction entries in one document
        update. With ``ref`` set, a second post under the same ref matches
        nothing and returns None.
        """
        filt: Dict[str, Any] = {"user_id": user_id}
        if ref:
            filt["transactions.ref"] = {"$ne": ref}

        return await self.col.find_one_and_update(
            filt,
            {
                "$inc": counters,
                "$push": {"transactions": {"$each": transactions}},
            },
            return_document=ReturnDocument.AFTER,
        )

    async def spend(
        self, user_id: ObjectId, cost: int, transaction: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        return await self.col.find_one_and_update(
            {"user_id": user_id, "available_credits": {"$gte": cost}},
            {
                "$inc": {"available_credits": -cost},
                "$push": {"transactions": transaction},
            },
            return_document=ReturnDocument.AFTER,
        )

    async def add_badge(self, user_id: ObjectId, badge: Dict[str, Any]) -> bool:
        res = await self.col.update_one(
            {"user_id": user_id, "badges.key": {"$ne": badge["key"]}},
            {"$push": {"badges": badge}},
        )
        return res.modified_count == 1

    async def top_by_total(self, limit: int) -> List[Dict[str, Any]]:
        cursor = self.col.find(
            {},
            {"user_id": 1, "total_credits": 1, "report_count": 1, "badges.key": 1},
        ).sort("total_credits", DESCENDING).limit(limit)
        return await cursor.to_list(length=limit)
