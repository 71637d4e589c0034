"""Application configuration.

Everything is read from the process environment. ``server.py`` loads a
``.env`` file (when present) before this module is imported.
"""

from __future__ import annotations

import os


def _env_flag(name: str, default: bool = True) -> bool:
    """Read a boolean-like flag from environment.

    Accepted falsy values: "0", "false", "off", "no" (case-insensitive).
    Anything else (or unset) falls back to `default`.
    """

    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in {"0", "false", "off", "no"}:
        return False
    if value in {"1", "true", "on", "yes"}:
        return True
    return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


# Application constants
APP_NAME = "Tour Booking API"
APP_VERSION = "1.0.0"
CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]

# Persistence
MONGO_URL = os.environ.get("MONGO_URL", "mongodb://localhost:27017")
DB_NAME = os.environ.get("DB_NAME", "tour_booking")

# Auth
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_MINUTES: int = _env_int("ACCESS_TOKEN_MINUTES", 60 * 24 * 30)

BOOTSTRAP_ADMIN_EMAIL = os.environ.get("BOOTSTRAP_ADMIN_EMAIL", "")
BOOTSTRAP_ADMIN_PASSWORD = os.environ.get("BOOTSTRAP_ADMIN_PASSWORD", "")
BOOTSTRAP_ADMIN_NAME = os.environ.get("BOOTSTRAP_ADMIN_NAME", "Admin")

# Bookings
BOOKING_REFERENCE_PREFIX = os.environ.get("BOOKING_REFERENCE_PREFIX", "TRV")
RESTORE_SEATS_ON_CANCEL: bool = _env_flag("RESTORE_SEATS_ON_CANCEL", default=True)


def jwt_secret() -> str:
    # Default only for dev/testing.
    return os.environ.get("JWT_SECRET", "dev_jwt_secret_change_me")
