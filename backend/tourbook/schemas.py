from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Wire models use camelCase keys; Python code uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=180)
    password: str = Field(..., min_length=6, max_length=256)


class LoginRequest(BaseModel):
    email: str
    password: str


class AuthResponse(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    role: str
    token: str
    token_type: str = "bearer"


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------


class GuestIn(CamelModel):
    # name/email/phone are checked by the booking service so that a blank
    # guest is reported as invalid guest data rather than a schema error.
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0, le=130)
    address: Optional[str] = None
    id_type: Optional[Literal["passport", "aadhar", "driving_license", "voter_id"]] = None
    id_number: Optional[str] = None


class CustomerInfoIn(CamelModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: str = Field(..., min_length=3)
    address: Optional[str] = None


class EmergencyContactIn(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    relationship: Optional[str] = None


class BookingCreateIn(CamelModel):
    tour_package_id: str
    number_of_guests: int = Field(..., ge=1)
    tour_date: datetime | date
    customer_info: CustomerInfoIn
    guests: list[GuestIn] = Field(default_factory=list)
    special_requests: Optional[str] = Field(default=None, max_length=2000)
    emergency_contact: Optional[EmergencyContactIn] = None


class BookingStatusIn(BaseModel):
    # Free-form so unknown values surface as invalid_status (400), not 422.
    status: Optional[str] = None


# ---------------------------------------------------------------------------
# Admin users
# ---------------------------------------------------------------------------

USER_STATUSES = ("active", "inactive")


class UserStatusIn(BaseModel):
    status: Optional[str] = None
