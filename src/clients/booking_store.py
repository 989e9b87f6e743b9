"""
Booking store contract and in-memory implementation.

In production this contract is backed by the relational booking database
(Bookings, Services and ProfessionalAllocation tables). The in-memory store
enforces the same guarantees the database must: an allocation that would
overlap another active allocation of the same professional is rejected
atomically at commit time.
"""

import asyncio
import logging
import uuid
from typing import Iterable, Optional, Protocol

from src.allocation.availability import intervals_overlap
from src.allocation.errors import (
    AllocationConflictError,
    AllocationPersistenceError,
    BookingInputError,
)
from src.schemas.allocation_schema import (
    ACTIVE_ALLOCATION_STATUSES,
    ActiveInterval,
    Allocation,
    AllocationStatus,
)
from src.schemas.booking_schema import (
    INACTIVE_BOOKING_STATUSES,
    Booking,
    BookingRequest,
    BookingStatus,
    Service,
)
from src.utils import utc_now

logger = logging.getLogger(__name__)


class BookingStore(Protocol):
    """Narrow query contract the allocator uses against the booking store."""

    async def get_service(self, service_id: int) -> Optional[Service]: ...

    async def get_service_duration(self, service_id: int) -> int: ...

    async def get_booking(self, booking_id: str) -> Optional[Booking]: ...

    async def set_booking_status(self, booking_id: str, status: BookingStatus) -> Booking: ...

    async def create_allocation(self, booking_id: str, professional_id: str) -> Allocation: ...

    async def get_allocation(self, allocation_id: str) -> Optional[Allocation]: ...

    async def set_allocation_status(
        self, allocation_id: str, status: AllocationStatus
    ) -> Allocation: ...

    async def cancel_allocation(self, allocation_id: str) -> Allocation: ...

    async def get_active_allocation_for_booking(self, booking_id: str) -> Optional[Allocation]: ...

    async def list_rejected_professionals(self, booking_id: str) -> set[str]: ...

    async def list_active_allocations_for_professional(
        self, professional_id: str
    ) -> list[ActiveInterval]: ...

    async def count_open_allocations(
        self, professional_id: str, closed_statuses: Iterable[str]
    ) -> int: ...

    async def list_allocations_for_professional(self, professional_id: str) -> list[Allocation]: ...


class InMemoryBookingStore:
    """Booking store kept in process memory.

    ``create_allocation`` holds a single lock across the overlap re-check
    and the insert, so two concurrent allocation attempts can never both
    commit overlapping work for one professional.
    """

    def __init__(self, services: Optional[Iterable[Service]] = None) -> None:
        self._services: dict[int, Service] = {}
        self._bookings: dict[str, Booking] = {}
        self._allocations: dict[str, Allocation] = {}
        self._commit_lock = asyncio.Lock()
        for service in services or []:
            self.add_service(service)

    async def start(self) -> None:
        logger.info("Booking store ready (%d services)", len(self._services))

    async def close(self) -> None:
        logger.info("Booking store closed")

    # ------------------------------------------------------------------ #
    # Services and bookings
    # ------------------------------------------------------------------ #

    def add_service(self, service: Service) -> None:
        self._services[service.service_id] = service

    async def get_service(self, service_id: int) -> Optional[Service]:
        return self._services.get(service_id)

    async def get_service_duration(self, service_id: int) -> int:
        service = self._services.get(service_id)
        if service is None:
            raise BookingInputError(f"Unknown service id: {service_id}")
        return service.duration_minutes

    async def create_booking(self, request: BookingRequest) -> Booking:
        """Persist a new pending booking from a validated request."""
        service = self._services.get(request.service_id)
        if service is None:
            raise BookingInputError(f"Unknown service id: {request.service_id}")
        booking = Booking(
            booking_id=f"BK-{uuid.uuid4().hex[:8].upper()}",
            customer_id=request.customer_id,
            service_id=service.service_id,
            area_id=request.area_id,
            scheduled_time=request.scheduled_time,
            duration_minutes=service.duration_minutes,
            location_address=request.location_address,
            customer_name=request.customer_name,
            customer_email=request.customer_email,
            service_name=service.name,
        )
        self._bookings[booking.booking_id] = booking
        logger.info(
            "Booking created: %s for service %s at %s",
            booking.booking_id, service.name, booking.scheduled_time.isoformat(),
        )
        return booking

    def add_booking(self, booking: Booking) -> Booking:
        """Insert an already-built booking record (seeding and tests)."""
        self._bookings[booking.booking_id] = booking
        return booking

    async def get_booking(self, booking_id: str) -> Optional[Booking]:
        return self._bookings.get(booking_id)

    async def set_booking_status(self, booking_id: str, status: BookingStatus) -> Booking:
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise AllocationPersistenceError(f"Booking {booking_id} not found")
        updated = booking.model_copy(update={"status": status, "updated_at": utc_now()})
        self._bookings[booking_id] = updated
        logger.debug("Booking %s status: %s -> %s", booking_id, booking.status.value, status.value)
        return updated

    # ------------------------------------------------------------------ #
    # Allocation ledger
    # ------------------------------------------------------------------ #

    def _active_intervals(self, professional_id: str) -> list[ActiveInterval]:
        intervals: list[ActiveInterval] = []
        for allocation in self._allocations.values():
            if allocation.professional_id != professional_id:
                continue
            if allocation.status not in ACTIVE_ALLOCATION_STATUSES:
                continue
            booking = self._bookings.get(allocation.booking_id)
            if booking is None or booking.status in INACTIVE_BOOKING_STATUSES:
                continue
            intervals.append(ActiveInterval(
                booking_id=booking.booking_id,
                start=booking.scheduled_time,
                duration_minutes=booking.duration_minutes,
            ))
        return intervals

    async def create_allocation(self, booking_id: str, professional_id: str) -> Allocation:
        async with self._commit_lock:
            booking = self._bookings.get(booking_id)
            if booking is None:
                raise AllocationPersistenceError(f"Booking {booking_id} not found")

            existing = self._active_allocation_for_booking(booking_id)
            if existing is not None:
                raise AllocationPersistenceError(
                    f"Booking {booking_id} already has active allocation "
                    f"{existing.allocation_id}"
                )

            for interval in self._active_intervals(professional_id):
                if intervals_overlap(
                    booking.scheduled_time, booking.end_time, interval.start, interval.end
                ):
                    raise AllocationConflictError(professional_id, booking_id)

            allocation = Allocation(
                allocation_id=f"AL-{uuid.uuid4().hex[:8].upper()}",
                booking_id=booking_id,
                professional_id=professional_id,
                assigned_at=utc_now(),
                status=AllocationStatus.ASSIGNED,
            )
            self._allocations[allocation.allocation_id] = allocation

        logger.info(
            "Allocation created: %s (booking %s -> professional %s)",
            allocation.allocation_id, booking_id, professional_id,
        )
        return allocation

    def add_allocation(self, allocation: Allocation) -> Allocation:
        """Insert an allocation without constraint checks (seeding and tests)."""
        self._allocations[allocation.allocation_id] = allocation
        return allocation

    async def get_allocation(self, allocation_id: str) -> Optional[Allocation]:
        return self._allocations.get(allocation_id)

    async def set_allocation_status(
        self, allocation_id: str, status: AllocationStatus
    ) -> Allocation:
        allocation = self._allocations.get(allocation_id)
        if allocation is None:
            raise AllocationPersistenceError(f"Allocation {allocation_id} not found")
        updated = allocation.model_copy(update={"status": status})
        self._allocations[allocation_id] = updated
        return updated

    async def cancel_allocation(self, allocation_id: str) -> Allocation:
        return await self.set_allocation_status(allocation_id, AllocationStatus.CANCELLED)

    def _active_allocation_for_booking(self, booking_id: str) -> Optional[Allocation]:
        for allocation in self._allocations.values():
            if (allocation.booking_id == booking_id
                    and allocation.status in ACTIVE_ALLOCATION_STATUSES):
                return allocation
        return None

    async def get_active_allocation_for_booking(self, booking_id: str) -> Optional[Allocation]:
        return self._active_allocation_for_booking(booking_id)

    async def list_rejected_professionals(self, booking_id: str) -> set[str]:
        """Professionals who already turned this booking down."""
        return {
            a.professional_id for a in self._allocations.values()
            if a.booking_id == booking_id and a.status == AllocationStatus.REJECTED
        }

    async def list_active_allocations_for_professional(
        self, professional_id: str
    ) -> list[ActiveInterval]:
        return self._active_intervals(professional_id)

    async def count_open_allocations(
        self, professional_id: str, closed_statuses: Iterable[str]
    ) -> int:
        closed = {AllocationStatus(s) for s in closed_statuses}
        return sum(
            1 for a in self._allocations.values()
            if a.professional_id == professional_id and a.status not in closed
        )

    async def list_allocations_for_professional(self, professional_id: str) -> list[Allocation]:
        return [a for a in self._allocations.values() if a.professional_id == professional_id]

    def reset(self) -> None:
        """Clear all bookings and allocations. Used by test fixtures for isolation."""
        self._bookings.clear()
        self._allocations.clear()
