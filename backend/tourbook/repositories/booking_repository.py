from __future__ import annotations

from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from tourbook.repositories.base_repository import get_collection
from tourbook.utils import now_utc, parse_object_id


class BookingRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db
        self._col = get_collection(db, "bookings")

    async def insert(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        now = now_utc()
        doc = dict(doc)
        doc.setdefault("bookingDate", now)
        doc.setdefault("createdAt", now)
        doc.setdefault("updatedAt", now)
        res = await self._col.insert_one(doc)
        doc["_id"] = res.inserted_id
        return doc

    async def get_by_id(self, booking_id: Any) -> Optional[Dict[str, Any]]:
        oid = parse_object_id(booking_id)
        if oid is None:
            return None
        return await self._col.find_one({"_id": oid})

    async def list_for_user(self, user_id: str, *, limit: int = 200) -> List[Dict[str, Any]]:
        cursor = self._col.find({"user": user_id}).sort("createdAt", -1).limit(limit)
        return await cursor.to_list(limit)

    async def count_for_user(self, user_id: str, statuses: List[str]) -> int:
        return await self._col.count_documents({"user": user_id, "status": {"$in": statuses}})

    async def list_all(self, *, status: Optional[str] = None, limit: int = 500) -> List[Dict[str, Any]]:
        flt: Dict[str, Any] = {}
        if status:
            flt["status"] = status
        cursor = self._col.find(flt).sort("createdAt", -1).limit(limit)
        return await cursor.to_list(limit)

    async def compare_and_set_status(
        self,
        booking_id: Any,
        expected: str,
        new_status: str,
        extra_updates: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Move a booking from `expected` to `new_status` in one update.

        Returns the updated document, or None when the booking is gone or
        its status is no longer `expected`.
        """

        oid = parse_object_id(booking_id)
        if oid is None:
            return None
        updates: Dict[str, Any] = {"status": new_status, "updatedAt": now_utc()}
        if extra_updates:
            updates.update(extra_updates)
        return await self._col.find_one_and_update(
            {"_id": oid, "status": expected},
            {"$set": updates},
            return_document=ReturnDocument.AFTER,
        )

    async def delete(self, booking_id: Any) -> Optional[Dict[str, Any]]:
        """Remove a booking and return the deleted document (None if absent)."""

        oid = parse_object_id(booking_id)
        if oid is None:
            return None
        return await self._col.find_one_and_delete({"_id": oid})
