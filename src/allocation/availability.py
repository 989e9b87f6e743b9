"""
Availability checker: does a professional have room for a new job?

A professional is unavailable when any of their active jobs overlaps
the requested window. Windows are half-open, so a job ending at 14:00
leaves the professional free for one starting at 14:00.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from src.allocation.calls import bounded_call
from src.allocation.errors import StoreUnavailableError
from src.logging_context import get_booking_logger

if TYPE_CHECKING:
    from src.clients.booking_store import BookingStore

logger = get_booking_logger(__name__)


def intervals_overlap(
    start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime
) -> bool:
    """Half-open interval intersection test for [start_a, end_a) and [start_b, end_b)."""
    return start_a < end_b and start_b < end_a


class AvailabilityChecker:
    """Read-only conflict check against a professional's active allocations."""

    def __init__(self, store: BookingStore, timeout: float) -> None:
        self._store = store
        self._timeout = timeout

    async def is_available(
        self, professional_id: str, start: datetime, duration_minutes: int
    ) -> bool:
        end = start + timedelta(minutes=duration_minutes)
        intervals = await bounded_call(
            self._store.list_active_allocations_for_professional(professional_id),
            self._timeout,
            StoreUnavailableError,
            f"listing allocations for professional {professional_id}",
        )

        for interval in intervals:
            if intervals_overlap(start, end, interval.start, interval.end):
                logger.debug(
                    "Professional %s busy: booking %s [%s, %s) overlaps request",
                    professional_id, interval.booking_id,
                    interval.start.isoformat(), interval.end.isoformat(),
                )
                return False
        return True
