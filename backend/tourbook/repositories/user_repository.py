from __future__ import annotations

from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from tourbook.repositories.base_repository import get_collection
from tourbook.utils import now_utc, parse_object_id


class UserRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db
        self._col = get_collection(db, "users")

    async def get_by_id(self, user_id: Any) -> Optional[Dict[str, Any]]:
        oid = parse_object_id(user_id)
        if oid is None:
            return None
        return await self._col.find_one({"_id": oid})

    async def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return await self._col.find_one({"email": email.strip().lower()})

    async def create(self, *, name: str, email: str, password_hash: str, role: str = "user") -> Dict[str, Any]:
        now = now_utc()
        doc: Dict[str, Any] = {
            "name": name.strip(),
            "email": email.strip().lower(),
            "passwordHash": password_hash,
            "role": role,
            "status": "active",
            "createdAt": now,
            "updatedAt": now,
        }
        res = await self._col.insert_one(doc)
        doc["_id"] = res.inserted_id
        return doc

    async def get_many(self, user_ids: List[Any]) -> Dict[str, Dict[str, Any]]:
        oids = [oid for oid in (parse_object_id(u) for u in user_ids) if oid is not None]
        if not oids:
            return {}
        docs = await self._col.find({"_id": {"$in": oids}}, {"name": 1, "email": 1}).to_list(len(oids))
        return {str(d["_id"]): d for d in docs}

    async def list_all(self, *, limit: int = 500) -> List[Dict[str, Any]]:
        cursor = self._col.find({}, {"passwordHash": 0}).sort("createdAt", -1).limit(limit)
        return await cursor.to_list(limit)

    async def set_status(self, user_id: Any, status: str) -> Optional[Dict[str, Any]]:
        oid = parse_object_id(user_id)
        if oid is None:
            return None
        return await self._col.find_one_and_update(
            {"_id": oid},
            {"$set": {"status": status, "updatedAt": now_utc()}},
            projection={"passwordHash": 0},
            return_document=ReturnDocument.AFTER,
        )

    async def delete(self, user_id: Any) -> bool:
        oid = parse_object_id(user_id)
        if oid is None:
            return False
        res = await self._col.delete_one({"_id": oid})
        return res.deleted_count == 1
