from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class AppError(Exception):
    status_code: int
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


def error_response(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
        }
    }


# ---------------------------------------------------------------------------
# Error taxonomy
# ---------------------------------------------------------------------------

NOT_FOUND = "not_found"
INVALID_DATE = "invalid_date"
INSUFFICIENT_INVENTORY = "insufficient_inventory"
GUEST_COUNT_MISMATCH = "guest_count_mismatch"
INVALID_GUEST_DATA = "invalid_guest_data"
INVALID_STATUS = "invalid_status"
INVALID_TRANSITION = "invalid_transition"
UNAUTHORIZED = "unauthorized"
FORBIDDEN = "forbidden"
EMAIL_TAKEN = "email_taken"
USER_DELETE_BLOCKED = "user_delete_blocked"


def not_found(message: str, **details: Any) -> AppError:
    return AppError(404, NOT_FOUND, message, details or None)


def invalid_date(message: str = "Selected tour date is not available", **details: Any) -> AppError:
    return AppError(400, INVALID_DATE, message, details or None)


def insufficient_inventory(message: str = "Not enough available seats for this tour", **details: Any) -> AppError:
    return AppError(400, INSUFFICIENT_INVENTORY, message, details or None)


def guest_count_mismatch(message: str, **details: Any) -> AppError:
    return AppError(400, GUEST_COUNT_MISMATCH, message, details or None)


def invalid_guest_data(message: str, **details: Any) -> AppError:
    return AppError(400, INVALID_GUEST_DATA, message, details or None)


def invalid_status(status: Any) -> AppError:
    return AppError(400, INVALID_STATUS, "Invalid status", {"status": status})


def invalid_transition(current: str, target: str) -> AppError:
    return AppError(
        409,
        INVALID_TRANSITION,
        f"Cannot change booking status from {current} to {target}",
        {"current": current, "target": target},
    )


def unauthorized(message: str = "Not authorized") -> AppError:
    return AppError(401, UNAUTHORIZED, message)


def forbidden(message: str = "Not authorized as an admin") -> AppError:
    return AppError(403, FORBIDDEN, message)
