from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request

from tourbook.auth import require_roles
from tourbook.db import get_db
from tourbook.domain.booking_state_machine import SEAT_HOLDING_STATUSES
from tourbook.errors import INVALID_STATUS, USER_DELETE_BLOCKED, AppError, not_found
from tourbook.repositories.booking_repository import BookingRepository
from tourbook.repositories.user_repository import UserRepository
from tourbook.schemas import USER_STATUSES, UserStatusIn
from tourbook.services.audit import write_audit_log_best_effort
from tourbook.utils import serialize_doc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/users", tags=["admin_users"])

AdminUser = Depends(require_roles(["admin"]))


@router.get("")
async def list_users(admin=AdminUser, db=Depends(get_db)) -> List[Dict[str, Any]]:
    docs = await UserRepository(db).list_all()
    return [serialize_doc(d) for d in docs]


@router.put("/{user_id}/status")
async def update_user_status(
    user_id: str,
    payload: UserStatusIn,
    request: Request,
    admin=AdminUser,
    db=Depends(get_db),
) -> Dict[str, Any]:
    """Activate or deactivate an account.

    An inactive user's existing tokens stop working on the next request.
    """

    if payload.status not in USER_STATUSES:
        raise AppError(400, INVALID_STATUS, "Invalid status", {"status": payload.status})

    repo = UserRepository(db)
    before = await repo.get_by_id(user_id)
    if not before:
        raise not_found("User not found", user_id=user_id)

    updated = await repo.set_status(user_id, payload.status)
    if not updated:
        raise not_found("User not found", user_id=user_id)

    logger.info("User %s status %s -> %s", before.get("email"), before.get("status"), payload.status)
    await write_audit_log_best_effort(
        db,
        actor=admin,
        request=request,
        action="USER_STATUS_CHANGED",
        target_type="user",
        target_id=str(before["_id"]),
        before={"status": before.get("status")},
        after={"status": updated.get("status")},
    )
    return serialize_doc(updated)


@router.delete("/{user_id}")
async def delete_user(user_id: str, request: Request, admin=AdminUser, db=Depends(get_db)) -> Dict[str, Any]:
    repo = UserRepository(db)
    user = await repo.get_by_id(user_id)
    if not user:
        raise not_found("User not found", user_id=user_id)

    if user.get("role") == "admin":
        raise AppError(400, USER_DELETE_BLOCKED, "Cannot delete admin user")

    active = await BookingRepository(db).count_for_user(str(user["_id"]), sorted(SEAT_HOLDING_STATUSES))
    if active:
        raise AppError(
            400,
            USER_DELETE_BLOCKED,
            "Cannot delete user with active bookings",
            {"active_bookings": active},
        )

    await repo.delete(user["_id"])
    logger.info("User %s deleted", user.get("email"))
    await write_audit_log_best_effort(
        db,
        actor=admin,
        request=request,
        action="USER_DELETED",
        target_type="user",
        target_id=str(user["_id"]),
        before={"email": user.get("email"), "role": user.get("role"), "status": user.get("status")},
        after=None,
    )
    return {"success": True, "message": "User deleted successfully"}
