"""Allocation ledger models."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from src.schemas.booking_schema import BookingStatus
from src.schemas.professional_schema import Professional
from src.utils import utc_now


class AllocationStatus(str, Enum):
    """Lifecycle states of a professional/booking allocation."""
    ASSIGNED = "assigned"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


# Allocations in these states occupy the professional's calendar.
ACTIVE_ALLOCATION_STATUSES = frozenset({AllocationStatus.ASSIGNED, AllocationStatus.CONFIRMED})


class Allocation(BaseModel):
    """Links one booking to one assigned professional."""
    allocation_id: str
    booking_id: str
    professional_id: str
    assigned_at: datetime = Field(default_factory=utc_now)
    status: AllocationStatus = AllocationStatus.ASSIGNED


class ActiveInterval(BaseModel):
    """An occupied [start, end) window on a professional's calendar."""
    booking_id: str
    start: datetime
    duration_minutes: int = Field(gt=0)

    @property
    def end(self) -> datetime:
        return self.start + timedelta(minutes=self.duration_minutes)


class RankedCandidate(BaseModel):
    """A candidate professional annotated with current workload."""
    professional: Professional
    open_allocations: int = Field(ge=0)


class Assignment(BaseModel):
    """Professional-facing view of an allocation and its booking."""
    allocation_id: str
    booking_id: str
    professional_id: str
    allocation_status: AllocationStatus
    booking_status: BookingStatus
    assigned_at: datetime
    scheduled_time: datetime
    duration_minutes: int
    location_address: str = ""
    service_name: str = ""
    customer_name: Optional[str] = None
