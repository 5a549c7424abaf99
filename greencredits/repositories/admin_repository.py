from __future__ import annotations

from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import DESCENDING


class AdminRepository:
    def __init__(self, col):
        self.col = col

    async def find_by_id(self, admin_id: ObjectId) -> Optional[Dict[str, Any]]:
        return await self.col.find_one({"_id": admin_id})

    async def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return await self.col.find_one({"email": email})

    async def insert(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        res = await self.col.insert_one(doc)
        doc["_id"] = res.inserted_id
        return doc

    async def list_by_role(self, role: str) -> List[Dict[str, Any]]:
        cursor = self.col.find({"role": role}, {"password_hash": 0}).sort("created_at", DESCENDING)
        return await cursor.to_list(length=500)

    async def delete(self, admin_id: ObjectId, role: str) -> bool:
        res = await self.col.delete_one({"_id": admin_id, "role": role})
        return res.deleted_count == 1
