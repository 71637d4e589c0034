from __future__ import annotations

BOOKING_STATUSES = ("pending", "confirmed", "cancelled", "completed")

# Statuses in which a booking still holds seats on its tour.
SEAT_HOLDING_STATUSES = frozenset({"pending", "confirmed"})


_ALLOWED_TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"completed", "cancelled"},
    "cancelled": set(),
    "completed": set(),
}

_STATUS_MESSAGES = {
    "pending": "pending",
    "confirmed": "approved",
    "cancelled": "cancelled",
    "completed": "completed",
}


class BookingStateTransitionError(ValueError):
    """Raised when an invalid booking status transition is requested."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Invalid booking status transition: {current} -> {target}")
        self.current = current
        self.target = target


def is_valid_status(value: object) -> bool:
    return isinstance(value, str) and value in BOOKING_STATUSES


def validate_transition(current: str, target: str) -> None:
    """Validate that a transition from current -> target is allowed.

    Staying in the same status is always allowed (idempotent no-op).
    Raises BookingStateTransitionError if not allowed.
    """

    if current == target:
        return
    allowed = _ALLOWED_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise BookingStateTransitionError(current=current, target=target)


def status_message(status: str) -> str:
    return f"Booking {_STATUS_MESSAGES.get(status, status)} successfully"
