"""Assignment committer: writes the chosen allocation and flips the booking status."""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.allocation.calls import bounded_call
from src.allocation.errors import (
    AllocationConflictError,
    AllocationPersistenceError,
    StoreUnavailableError,
    TransientCollaboratorError,
)
from src.logging_context import get_booking_logger
from src.schemas.allocation_schema import Allocation
from src.schemas.booking_schema import BookingStatus

if TYPE_CHECKING:
    from src.clients.booking_store import BookingStore

logger = get_booking_logger(__name__)


class AssignmentCommitter:
    """Persists one allocation per successful assignment."""

    def __init__(self, store: BookingStore, timeout: float) -> None:
        self._store = store
        self._timeout = timeout

    async def commit(self, booking_id: str, professional_id: str) -> Allocation:
        """
        Create an ``assigned`` allocation and mark the booking ``assigned``.

        Raises:
            AllocationConflictError: The store's overlap constraint rejected
                the professional. Nothing was written.
            AllocationPersistenceError: Any other write failure. After a timed-out
                or dropped write, any allocation that did land is cancelled first.
        """
        try:
            allocation = await bounded_call(
                self._store.create_allocation(booking_id, professional_id),
                self._timeout,
                StoreUnavailableError,
                f"creating allocation for booking {booking_id}",
            )
        except (AllocationConflictError, AllocationPersistenceError):
            raise
        except TransientCollaboratorError as exc:
            await self._cancel_unconfirmed_write(booking_id, professional_id)
            raise AllocationPersistenceError(str(exc)) from exc

        try:
            await bounded_call(
                self._store.set_booking_status(booking_id, BookingStatus.ASSIGNED),
                self._timeout,
                StoreUnavailableError,
                f"marking booking {booking_id} assigned",
            )
        except (AllocationPersistenceError, TransientCollaboratorError) as exc:
            await self._compensate(allocation)
            raise AllocationPersistenceError(
                f"Allocation {allocation.allocation_id} written but booking status "
                f"update failed: {exc}"
            ) from exc

        logger.info(
            "Committed allocation %s: professional %s",
            allocation.allocation_id, professional_id,
        )
        return allocation

    async def _compensate(self, allocation: Allocation) -> None:
        try:
            await bounded_call(
                self._store.cancel_allocation(allocation.allocation_id),
                self._timeout,
                StoreUnavailableError,
                f"cancelling allocation {allocation.allocation_id}",
            )
            logger.warning("Cancelled orphaned allocation %s", allocation.allocation_id)
        except (AllocationPersistenceError, TransientCollaboratorError):
            logger.exception(
                "Could not cancel orphaned allocation %s; manual cleanup required",
                allocation.allocation_id,
            )

    async def _cancel_unconfirmed_write(self, booking_id: str, professional_id: str) -> None:
        # the write may have committed even though the call failed
        try:
            allocation = await bounded_call(
                self._store.get_active_allocation_for_booking(booking_id),
                self._timeout,
                StoreUnavailableError,
                f"looking up allocation for booking {booking_id}",
            )
        except (AllocationPersistenceError, TransientCollaboratorError):
            logger.exception(
                "Could not check whether booking %s was allocated; manual cleanup may be required",
                booking_id,
            )
            return
        if allocation is not None and allocation.professional_id == professional_id:
            await self._compensate(allocation)
