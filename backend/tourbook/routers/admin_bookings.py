from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request

from tourbook.auth import require_roles
from tourbook.db import get_db
from tourbook.schemas import BookingStatusIn
from tourbook.services import booking_lifecycle

router = APIRouter(prefix="/api/admin/bookings", tags=["admin_bookings"])

AdminUser = Depends(require_roles(["admin"]))


@router.get("")
async def list_bookings(status: Optional[str] = None, admin=AdminUser, db=Depends(get_db)) -> List[Dict[str, Any]]:
    return await booking_lifecycle.list_all_bookings(db, status=status)


@router.get("/{booking_id}")
async def get_booking(booking_id: str, admin=AdminUser, db=Depends(get_db)) -> Dict[str, Any]:
    return await booking_lifecycle.get_booking(db, booking_id)


@router.put("/{booking_id}/status")
async def update_booking_status(
    booking_id: str,
    payload: BookingStatusIn,
    request: Request,
    admin=AdminUser,
    db=Depends(get_db),
) -> Dict[str, Any]:
    return await booking_lifecycle.transition_status(db, booking_id, payload.status, actor=admin, request=request)


@router.delete("/{booking_id}")
async def delete_booking(booking_id: str, request: Request, admin=AdminUser, db=Depends(get_db)) -> Dict[str, Any]:
    return await booking_lifecycle.delete_booking(db, booking_id, actor=admin, request=request)
