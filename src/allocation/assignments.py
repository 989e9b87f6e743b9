"""Professional-facing assignment listing and status updates."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.allocation.errors import AllocationPersistenceError, InvalidAllocationTransitionError
from src.schemas.allocation_schema import Allocation, AllocationStatus, Assignment
from src.schemas.booking_schema import BookingStatus

if TYPE_CHECKING:
    from src.clients.booking_store import BookingStore
    from src.clients.notifier import NotificationSender

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[AllocationStatus, frozenset[AllocationStatus]] = {
    AllocationStatus.ASSIGNED: frozenset({
        AllocationStatus.CONFIRMED, AllocationStatus.REJECTED, AllocationStatus.CANCELLED,
    }),
    AllocationStatus.CONFIRMED: frozenset({
        AllocationStatus.COMPLETED, AllocationStatus.CANCELLED,
    }),
    AllocationStatus.COMPLETED: frozenset(),
    AllocationStatus.CANCELLED: frozenset(),
    AllocationStatus.REJECTED: frozenset(),
}

# A rejected job goes back to pending so the booking can be allocated again.
BOOKING_STATUS_FOR: dict[AllocationStatus, BookingStatus] = {
    AllocationStatus.CONFIRMED: BookingStatus.CONFIRMED,
    AllocationStatus.COMPLETED: BookingStatus.COMPLETED,
    AllocationStatus.CANCELLED: BookingStatus.CANCELLED,
    AllocationStatus.REJECTED: BookingStatus.PENDING,
}


async def list_assignments(store: BookingStore, professional_id: str) -> list[Assignment]:
    """Return a professional's allocations joined with booking details, newest first."""
    assignments: list[Assignment] = []
    for allocation in await store.list_allocations_for_professional(professional_id):
        booking = await store.get_booking(allocation.booking_id)
        if booking is None:
            logger.warning(
                "Allocation %s references missing booking %s",
                allocation.allocation_id, allocation.booking_id,
            )
            continue
        assignments.append(Assignment(
            allocation_id=allocation.allocation_id,
            booking_id=booking.booking_id,
            professional_id=allocation.professional_id,
            allocation_status=allocation.status,
            booking_status=booking.status,
            assigned_at=allocation.assigned_at,
            scheduled_time=booking.scheduled_time,
            duration_minutes=booking.duration_minutes,
            location_address=booking.location_address,
            service_name=booking.service_name,
            customer_name=booking.customer_name,
        ))
    return sorted(assignments, key=lambda a: a.assigned_at, reverse=True)


async def update_assignment_status(
    store: BookingStore,
    notifier: NotificationSender,
    allocation_id: str,
    new_status: AllocationStatus,
) -> Allocation:
    """
    Move an allocation to ``new_status`` and mirror the change onto its booking.

    Raises:
        AllocationPersistenceError: If the allocation or its booking is missing.
        InvalidAllocationTransitionError: If the change is not allowed.
    """
    allocation = await store.get_allocation(allocation_id)
    if allocation is None:
        raise AllocationPersistenceError(f"Allocation {allocation_id} not found")
    if new_status not in ALLOWED_TRANSITIONS[allocation.status]:
        allowed = sorted(s.value for s in ALLOWED_TRANSITIONS[allocation.status])
        raise InvalidAllocationTransitionError(
            f"Cannot move allocation {allocation_id} from '{allocation.status.value}' "
            f"to '{new_status.value}'. Allowed: {allowed}"
        )
    booking = await store.get_booking(allocation.booking_id)
    if booking is None:
        raise AllocationPersistenceError(f"Booking {allocation.booking_id} not found")

    updated = await store.set_allocation_status(allocation_id, new_status)
    booking_status = BOOKING_STATUS_FOR[new_status]
    updated_booking = await store.set_booking_status(booking.booking_id, booking_status)
    logger.info(
        "Allocation %s: %s -> %s (booking %s now %s)",
        allocation_id, allocation.status.value, new_status.value,
        booking.booking_id, booking_status.value,
    )

    try:
        notifier.notify_status_change(updated_booking, booking.status, booking_status)
    except Exception:
        logger.exception("Failed to queue status update for booking %s", booking.booking_id)
    return updated
