from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from tourbook.auth import get_current_user
from tourbook.db import get_db
from tourbook.schemas import BookingCreateIn
from tourbook.services import booking_lifecycle

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


@router.post("", status_code=201)
async def create_booking(
    payload: BookingCreateIn,
    user=Depends(get_current_user),
    db=Depends(get_db),
) -> Dict[str, Any]:
    """Book a tour for the signed-in user; the booking starts as pending."""

    return await booking_lifecycle.create_booking(
        db,
        user_id=user["id"],
        tour_id=payload.tour_package_id,
        number_of_guests=payload.number_of_guests,
        tour_date=payload.tour_date,
        customer_info=payload.customer_info.model_dump(by_alias=True),
        guests=[g.model_dump(by_alias=True) for g in payload.guests],
        special_requests=payload.special_requests,
        emergency_contact=payload.emergency_contact.model_dump(by_alias=True) if payload.emergency_contact else None,
    )


@router.get("/mybookings")
async def my_bookings(user=Depends(get_current_user), db=Depends(get_db)) -> List[Dict[str, Any]]:
    return await booking_lifecycle.list_user_bookings(db, user["id"])
