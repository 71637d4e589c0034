from __future__ import annotations

import pytest

from tourbook.domain.booking_state_machine import (
    BookingStateTransitionError,
    is_valid_status,
    status_message,
    validate_transition,
)


@pytest.mark.parametrize(
    "current,target",
    [
        ("pending", "confirmed"),
        ("pending", "cancelled"),
        ("confirmed", "completed"),
        ("confirmed", "cancelled"),
        ("pending", "pending"),
        ("completed", "completed"),
    ],
)
def test_allowed_transitions(current: str, target: str) -> None:
    validate_transition(current, target)


@pytest.mark.parametrize(
    "current,target",
    [
        ("pending", "completed"),
        ("confirmed", "pending"),
        ("cancelled", "pending"),
        ("cancelled", "confirmed"),
        ("completed", "pending"),
        ("completed", "cancelled"),
    ],
)
def test_backward_or_skipping_transitions_rejected(current: str, target: str) -> None:
    with pytest.raises(BookingStateTransitionError) as exc:
        validate_transition(current, target)
    assert exc.value.current == current
    assert exc.value.target == target


def test_status_validation() -> None:
    assert is_valid_status("confirmed")
    assert not is_valid_status("approved")
    assert not is_valid_status(None)


def test_status_messages() -> None:
    assert status_message("confirmed") == "Booking approved successfully"
    assert status_message("cancelled") == "Booking cancelled successfully"
    assert status_message("completed") == "Booking completed successfully"
