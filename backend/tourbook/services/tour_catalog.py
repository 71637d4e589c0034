from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from tourbook.errors import not_found
from tourbook.repositories.tour_repository import TourRepository
from tourbook.utils import serialize_doc

# Fields embedded into bookings for confirmation screens.
BOOKING_SUMMARY_FIELDS = ("title", "location", "price", "images")
MY_BOOKINGS_SUMMARY_FIELDS = ("title", "location", "images")


async def fetch_tour(db: AsyncIOMotorDatabase, tour_id: Any) -> Dict[str, Any]:
    """Return the raw tour document or raise NotFound."""

    tour = await TourRepository(db).get_by_id(tour_id)
    if not tour:
        raise not_found("Tour package not found", tour_id=str(tour_id))
    return tour


async def list_tours(db: AsyncIOMotorDatabase) -> List[Dict[str, Any]]:
    docs = await TourRepository(db).list_tours()
    return [serialize_doc(d) for d in docs]


async def get_tour(db: AsyncIOMotorDatabase, tour_id: Any) -> Dict[str, Any]:
    return serialize_doc(await fetch_tour(db, tour_id))


def tour_summary(tour: Optional[Dict[str, Any]], fields: Iterable[str] = BOOKING_SUMMARY_FIELDS) -> Optional[Dict[str, Any]]:
    if not tour:
        return None
    out: Dict[str, Any] = {"id": str(tour["_id"])}
    for f in fields:
        out[f] = tour.get(f)
    return out
