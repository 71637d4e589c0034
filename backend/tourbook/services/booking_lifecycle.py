from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from tourbook import config
from tourbook.domain.booking_state_machine import (
    SEAT_HOLDING_STATUSES,
    BookingStateTransitionError,
    is_valid_status,
    status_message,
    validate_transition,
)
from tourbook.errors import (
    guest_count_mismatch,
    insufficient_inventory,
    invalid_date,
    invalid_guest_data,
    invalid_status,
    invalid_transition,
    not_found,
)
from tourbook.repositories.booking_repository import BookingRepository
from tourbook.repositories.tour_repository import TourRepository
from tourbook.repositories.user_repository import UserRepository
from tourbook.services.audit import write_audit_log_best_effort
from tourbook.services.tour_catalog import MY_BOOKINGS_SUMMARY_FIELDS, fetch_tour, tour_summary
from tourbook.utils import calendar_day, serialize_doc, to_utc_datetime
from tourbook.utils_ids import generate_booking_reference

logger = logging.getLogger(__name__)

GUEST_REQUIRED_FIELDS = ("name", "email", "phone")
ADMIN_TOUR_SUMMARY_FIELDS = ("title", "location", "price", "duration", "images")


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _as_day(value: Any) -> Optional[date]:
    if isinstance(value, (date, datetime)):
        return calendar_day(value)
    if isinstance(value, str) and value.strip():
        try:
            return calendar_day(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
        except ValueError:
            return None
    return None


def _is_date_available(tour: Dict[str, Any], requested: date) -> bool:
    available = tour.get("availableDates") or []
    if not available:
        return True
    return any(_as_day(d) == requested for d in available)


def _clean(record: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if record is None:
        return None
    return {k: v for k, v in record.items() if v is not None}


def _validate_guests(guests: List[Dict[str, Any]], number_of_guests: int) -> None:
    if not guests:
        raise guest_count_mismatch("Guest details are required", expected=number_of_guests, received=0)

    if len(guests) != number_of_guests:
        raise guest_count_mismatch(
            "Number of guest details must match number of guests",
            expected=number_of_guests,
            received=len(guests),
        )

    for idx, guest in enumerate(guests):
        missing = [f for f in GUEST_REQUIRED_FIELDS if not str((guest or {}).get(f) or "").strip()]
        if missing:
            raise invalid_guest_data(
                f"Guest {idx + 1} is missing required fields: {', '.join(missing)}",
                guest_index=idx,
                missing=missing,
            )


async def _release_seats(db: AsyncIOMotorDatabase, tour_id: Any, seats: int, *, reason: str) -> None:
    if seats < 1:
        return
    released = await TourRepository(db).release_seats(tour_id, seats)
    if released:
        logger.info("Released %d seat(s) on tour %s (%s)", seats, tour_id, reason)
    else:
        logger.warning("Could not release %d seat(s) on tour %s (%s)", seats, tour_id, reason)


async def _release_committed_seats(db: AsyncIOMotorDatabase, booking: Dict[str, Any], seats: int, *, reason: str) -> None:
    # The booking write is already committed; a failure here is logged for
    # manual reconciliation instead of failing the request.
    try:
        await _release_seats(db, booking.get("tourPackage"), seats, reason=reason)
    except Exception:
        logger.exception(
            "seat_release_failed booking=%s reference=%s tour=%s seats=%d reason=%s",
            booking.get("_id"),
            booking.get("bookingReference"),
            booking.get("tourPackage"),
            seats,
            reason,
        )


# ------------------------------------------------------------------
# Creation
# ------------------------------------------------------------------


async def create_booking(
    db: AsyncIOMotorDatabase,
    *,
    user_id: str,
    tour_id: str,
    number_of_guests: int,
    tour_date: date | datetime | str,
    customer_info: Dict[str, Any],
    guests: List[Dict[str, Any]],
    special_requests: Optional[str] = None,
    emergency_contact: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Validate a booking request, reserve seats and persist the booking.

    Checks run in a fixed order and each raises its own AppError:
    tour exists -> date offered -> seats left -> guest count -> guest data.

    Seat reservation is a single conditional decrement on the tour. If the
    booking insert fails afterwards, the seats are handed back before the
    error propagates.
    """

    tour = await fetch_tour(db, tour_id)

    requested_day = _as_day(tour_date)
    if requested_day is None or not _is_date_available(tour, requested_day):
        raise invalid_date(tour_date=str(tour_date))

    seats_left = tour.get("availableSeats")
    limited = seats_left is not None
    if limited and seats_left < number_of_guests:
        raise insufficient_inventory(available=seats_left, requested=number_of_guests)

    _validate_guests(guests, number_of_guests)

    tour_repo = TourRepository(db)
    seats_reserved = 0
    if limited:
        updated = await tour_repo.reserve_seats(tour["_id"], number_of_guests)
        if updated is None:
            latest = await tour_repo.get_by_id(tour["_id"])
            if latest is None:
                raise not_found("Tour package not found", tour_id=str(tour_id))
            logger.info(
                "Seat reservation rejected for tour %s: requested=%d available=%s",
                tour["_id"],
                number_of_guests,
                latest.get("availableSeats"),
            )
            raise insufficient_inventory(available=latest.get("availableSeats"), requested=number_of_guests)
        seats_reserved = number_of_guests

    doc: Dict[str, Any] = {
        "user": str(user_id),
        "tourPackage": str(tour["_id"]),
        "tourDate": to_utc_datetime(tour_date if isinstance(tour_date, (date, datetime)) else requested_day),
        "numberOfGuests": number_of_guests,
        "totalAmount": tour["price"] * number_of_guests,
        "status": "pending",
        "paymentStatus": "pending",
        "guests": [_clean(g) for g in guests],
        "customerInfo": _clean(customer_info),
        "emergencyContact": _clean(emergency_contact),
        "specialRequests": special_requests,
        "bookingReference": generate_booking_reference(),
        "seatsReserved": seats_reserved,
    }

    try:
        created = await BookingRepository(db).insert(doc)
    except Exception:
        logger.exception("Booking insert failed for tour %s; rolling back seat reservation", tour["_id"])
        await _release_seats(db, tour["_id"], seats_reserved, reason="booking insert failed")
        raise

    logger.info(
        "Booking %s created: user=%s tour=%s guests=%d total=%s",
        created["bookingReference"],
        user_id,
        tour["_id"],
        number_of_guests,
        created["totalAmount"],
    )

    out = serialize_doc(created)
    out["tourPackage"] = tour_summary(tour)
    return out


# ------------------------------------------------------------------
# Queries
# ------------------------------------------------------------------


async def list_user_bookings(db: AsyncIOMotorDatabase, user_id: str) -> List[Dict[str, Any]]:
    docs = await BookingRepository(db).list_for_user(str(user_id))
    tours = await TourRepository(db).get_many([d.get("tourPackage") for d in docs])

    out: List[Dict[str, Any]] = []
    for d in docs:
        item = serialize_doc(d)
        item["tourPackage"] = tour_summary(tours.get(str(d.get("tourPackage"))), MY_BOOKINGS_SUMMARY_FIELDS)
        out.append(item)
    return out


def _user_summary(user: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not user:
        return None
    return {"id": str(user["_id"]), "name": user.get("name"), "email": user.get("email")}


async def _populate_admin_view(db: AsyncIOMotorDatabase, docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    tours = await TourRepository(db).get_many([d.get("tourPackage") for d in docs])
    users = await UserRepository(db).get_many([d.get("user") for d in docs])

    out: List[Dict[str, Any]] = []
    for d in docs:
        item = serialize_doc(d)
        item["user"] = _user_summary(users.get(str(d.get("user"))))
        item["tourPackage"] = tour_summary(tours.get(str(d.get("tourPackage"))), ADMIN_TOUR_SUMMARY_FIELDS)
        out.append(item)
    return out


async def list_all_bookings(db: AsyncIOMotorDatabase, *, status: Optional[str] = None) -> List[Dict[str, Any]]:
    if status is not None and not is_valid_status(status):
        raise invalid_status(status)
    docs = await BookingRepository(db).list_all(status=status)
    return await _populate_admin_view(db, docs)


async def get_booking(db: AsyncIOMotorDatabase, booking_id: str) -> Dict[str, Any]:
    doc = await BookingRepository(db).get_by_id(booking_id)
    if not doc:
        raise not_found("Booking not found", booking_id=str(booking_id))

    out = serialize_doc(doc)
    users = await UserRepository(db).get_many([doc.get("user")])
    out["user"] = _user_summary(users.get(str(doc.get("user"))))
    tour = await TourRepository(db).get_by_id(doc.get("tourPackage"))
    out["tourPackage"] = serialize_doc(tour)
    return out


# ------------------------------------------------------------------
# Status transitions and deletion
# ------------------------------------------------------------------


async def transition_status(
    db: AsyncIOMotorDatabase,
    booking_id: str,
    new_status: Any,
    *,
    actor: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> Dict[str, Any]:
    """Apply an admin status change.

    Re-applying the current status succeeds without writing. The write is a
    compare-and-set on the status read here, so two admins racing on the
    same booking cannot both apply a transition (or release seats twice).
    """

    if not is_valid_status(new_status):
        raise invalid_status(new_status)

    repo = BookingRepository(db)
    booking = await repo.get_by_id(booking_id)
    if not booking:
        raise not_found("Booking not found", booking_id=str(booking_id))

    current = str(booking.get("status") or "pending")
    try:
        validate_transition(current, new_status)
    except BookingStateTransitionError as exc:
        raise invalid_transition(exc.current, exc.target)

    updated = booking
    if current != new_status:
        seats = int(booking.get("seatsReserved") or 0)
        release = new_status == "cancelled" and config.RESTORE_SEATS_ON_CANCEL and seats > 0
        extra = {"seatsReserved": 0} if release else None

        result = await repo.compare_and_set_status(booking["_id"], current, new_status, extra)
        if result is None:
            latest = await repo.get_by_id(booking["_id"])
            if not latest:
                raise not_found("Booking not found", booking_id=str(booking_id))
            if latest.get("status") != new_status:
                raise invalid_transition(str(latest.get("status")), new_status)
            updated = latest
        else:
            updated = result
            if release:
                await _release_committed_seats(db, booking, seats, reason=f"booking {booking_id} cancelled")

            logger.info("Booking %s status %s -> %s", booking.get("bookingReference"), current, new_status)
            await write_audit_log_best_effort(
                db,
                actor=actor,
                request=request,
                action="BOOKING_STATUS_CHANGED",
                target_type="booking",
                target_id=str(booking["_id"]),
                before=booking,
                after=updated,
                meta={"from": current, "to": new_status, "seats_released": seats if release else 0},
            )

    populated = (await _populate_admin_view(db, [updated]))[0]
    return {"success": True, "message": status_message(new_status), "booking": populated}


async def delete_booking(
    db: AsyncIOMotorDatabase,
    booking_id: str,
    *,
    actor: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> Dict[str, Any]:
    """Hard-delete a booking.

    A booking that still holds seats (pending/confirmed) returns them to
    its tour; cancelled and completed bookings leave the counter alone.
    """

    doc = await BookingRepository(db).delete(booking_id)
    if not doc:
        raise not_found("Booking not found", booking_id=str(booking_id))

    seats = int(doc.get("seatsReserved") or 0)
    if seats and doc.get("status") in SEAT_HOLDING_STATUSES:
        await _release_committed_seats(db, doc, seats, reason=f"booking {booking_id} deleted")

    logger.info("Booking %s deleted (status=%s)", doc.get("bookingReference"), doc.get("status"))
    await write_audit_log_best_effort(
        db,
        actor=actor,
        request=request,
        action="BOOKING_DELETED",
        target_type="booking",
        target_id=str(doc["_id"]),
        before=doc,
        after=None,
        meta={"bookingReference": doc.get("bookingReference")},
    )

    return {"success": True, "message": "Booking deleted successfully"}
