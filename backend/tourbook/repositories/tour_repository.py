from __future__ import annotations

from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from tourbook.repositories.base_repository import get_collection
from tourbook.utils import now_utc, parse_object_id


class TourRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db
        self._col = get_collection(db, "tours")

    async def get_by_id(self, tour_id: Any) -> Optional[Dict[str, Any]]:
        oid = parse_object_id(tour_id)
        if oid is None:
            return None
        return await self._col.find_one({"_id": oid})

    async def list_tours(self, *, limit: int = 200) -> List[Dict[str, Any]]:
        cursor = self._col.find({}).sort("createdAt", -1).limit(limit)
        return await cursor.to_list(limit)

    async def get_many(self, tour_ids: List[Any], projection: Optional[Dict[str, int]] = None) -> Dict[str, Dict[str, Any]]:
        oids = [oid for oid in (parse_object_id(t) for t in tour_ids) if oid is not None]
        if not oids:
            return {}
        docs = await self._col.find({"_id": {"$in": oids}}, projection).to_list(len(oids))
        return {str(d["_id"]): d for d in docs}

    async def reserve_seats(self, tour_id: Any, seats: int) -> Optional[Dict[str, Any]]:
        """Atomically take `seats` from the tour's counter.

        The guard and the decrement happen in one update, so concurrent
        reservations can never drive availableSeats below zero. Returns the
        updated tour, or None when the tour is missing or short on seats.
        """

        oid = parse_object_id(tour_id)
        if oid is None or seats < 1:
            return None
        return await self._col.find_one_and_update(
            {"_id": oid, "availableSeats": {"$gte": seats}},
            {"$inc": {"availableSeats": -seats}, "$set": {"updatedAt": now_utc()}},
            return_document=ReturnDocument.AFTER,
        )

    async def release_seats(self, tour_id: Any, seats: int) -> bool:
        """Give `seats` back to a tour that tracks a seat counter."""

        oid = parse_object_id(tour_id)
        if oid is None or seats < 1:
            return False
        res = await self._col.update_one(
            {"_id": oid, "availableSeats": {"$ne": None}},
            {"$inc": {"availableSeats": seats}, "$set": {"updatedAt": now_utc()}},
        )
        return res.modified_count == 1
