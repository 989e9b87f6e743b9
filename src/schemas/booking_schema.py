"""Booking and service data models."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from src.utils import utc_now


class BookingStatus(str, Enum):
    """Lifecycle states of a booking."""
    PENDING = "pending"
    ASSIGNED = "assigned"
    NOT_SERVICEABLE = "not_serviceable"
    NO_PROFESSIONALS_AVAILABLE = "no_professionals_available"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Every allocation attempt ends in exactly one of these.
FINAL_ALLOCATION_STATUSES = frozenset({
    BookingStatus.ASSIGNED,
    BookingStatus.NOT_SERVICEABLE,
    BookingStatus.NO_PROFESSIONALS_AVAILABLE,
})

# Bookings in these states no longer block a professional's calendar.
INACTIVE_BOOKING_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED})


def _require_aware(value: datetime) -> datetime:
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError("scheduled_time must be timezone-aware")
    return value


class Service(BaseModel):
    """Catalog entry for a car-wash service."""
    service_id: int
    name: str
    duration_minutes: int = Field(gt=0)
    base_price: float = 0.0
    service_type: str = ""


class BookingRequest(BaseModel):
    """Validated booking data as submitted by a customer."""
    customer_id: str = Field(min_length=1)
    service_id: int
    area_id: int
    scheduled_time: datetime
    location_address: str = Field(min_length=1)
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None

    @field_validator("scheduled_time")
    @classmethod
    def _must_be_future(cls, value: datetime) -> datetime:
        value = _require_aware(value)
        if value <= utc_now():
            raise ValueError("scheduled_time must be in the future")
        return value


class Booking(BaseModel):
    """Persisted booking record."""
    booking_id: str
    customer_id: str
    service_id: int
    area_id: Optional[int]
    scheduled_time: datetime
    duration_minutes: int = Field(gt=0)
    status: BookingStatus = BookingStatus.PENDING
    location_address: str = ""
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    service_name: str = ""
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("scheduled_time")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return _require_aware(value)

    @property
    def end_time(self) -> datetime:
        return self.scheduled_time + timedelta(minutes=self.duration_minutes)
