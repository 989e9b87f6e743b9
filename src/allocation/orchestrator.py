"""
Professional allocator: assigns a field professional to a new booking.

Runs once per booking, right after the intake layer has stored it and
before the caller gets a response:

    resolve candidates -> rank by workload -> probe in order -> commit

Every run ends in one of three booking statuses (``assigned``,
``not_serviceable``, ``no_professionals_available``) or raises a
TransientCollaboratorError, in which case the booking stays ``pending``
and the whole call may be retried.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from src.allocation.availability import AvailabilityChecker
from src.allocation.calls import bounded_call
from src.allocation.candidate_resolver import CandidateResolver
from src.allocation.committer import AssignmentCommitter
from src.allocation.errors import (
    AllocationConflictError,
    AllocationPersistenceError,
    BookingInputError,
    DirectoryContractError,
    StoreUnavailableError,
    TransientCollaboratorError,
)
from src.allocation.state_machine import (
    AllocationState,
    AllocationStateMachine,
    AllocationTrigger,
)
from src.allocation.workload_ranker import WorkloadRanker
from src.config import AllocationConfig
from src.logging_context import get_booking_logger, set_booking_id
from src.schemas.booking_schema import Booking, BookingStatus
from src.schemas.professional_schema import Professional

if TYPE_CHECKING:
    from src.clients.booking_store import BookingStore
    from src.clients.directory import ProfessionalDirectory
    from src.clients.notifier import NotificationSender

logger = get_booking_logger(__name__)


class ProfessionalAllocator:
    """Sequences resolver, ranker, checker and committer for one booking."""

    def __init__(
        self,
        directory: ProfessionalDirectory,
        store: BookingStore,
        notifier: NotificationSender,
        config: Optional[AllocationConfig] = None,
    ) -> None:
        config = config or AllocationConfig()
        timeout = config.collaborator_timeout_sec
        self._store = store
        self._notifier = notifier
        self._timeout = timeout
        self.resolver = CandidateResolver(directory, timeout)
        self.ranker = WorkloadRanker(store, config.closed_allocation_statuses, timeout)
        self.checker = AvailabilityChecker(store, timeout)
        self.committer = AssignmentCommitter(store, timeout)
        self.last_state_machine: Optional[AllocationStateMachine] = None

    async def allocate_professional(self, booking: Booking) -> BookingStatus:
        """
        Assign a professional to ``booking`` and return its final status.

        Raises:
            BookingInputError: The booking cannot be allocated as submitted.
            TransientCollaboratorError: Directory or store failed before a
                terminal decision; the booking is still ``pending``.
            AllocationPersistenceError: The commit failed for a reason other
                than an overlap conflict.
            DirectoryContractError: The directory answered with a malformed payload.
        """
        set_booking_id(booking.booking_id)
        duration = await self._validate(booking)

        sm = AllocationStateMachine()
        self.last_state_machine = sm
        try:
            return await self._run(sm, booking, duration)
        except (
            TransientCollaboratorError, AllocationPersistenceError, DirectoryContractError,
        ) as exc:
            if not sm.is_terminal():
                sm.transition(AllocationTrigger.COLLABORATOR_FAILED, detail=str(exc))
            logger.warning("Allocation aborted: %s", exc)
            raise

    async def _validate(self, booking: Booking) -> int:
        if booking.status != BookingStatus.PENDING:
            raise BookingInputError(
                f"Booking {booking.booking_id} is {booking.status.value}, expected pending"
            )
        if booking.area_id is None:
            raise BookingInputError(f"Booking {booking.booking_id} has no service area")
        return await bounded_call(
            self._store.get_service_duration(booking.service_id),
            self._timeout,
            StoreUnavailableError,
            f"reading duration of service {booking.service_id}",
        )

    async def _run(self, sm: AllocationStateMachine, booking: Booking, duration: int) -> BookingStatus:
        candidates = await self.resolver.resolve_candidates(booking.area_id)
        if not candidates:
            sm.transition(AllocationTrigger.NO_CANDIDATES)
            return await self._finish(sm, booking)
        sm.transition(AllocationTrigger.CANDIDATES_FOUND, detail=f"{len(candidates)} candidate(s)")

        rejected = await bounded_call(
            self._store.list_rejected_professionals(booking.booking_id),
            self._timeout,
            StoreUnavailableError,
            f"reading rejections for booking {booking.booking_id}",
        )
        if rejected:
            logger.info("Skipping professionals who rejected this booking: %s",
                        ", ".join(sorted(rejected)))
            candidates = [p for p in candidates if p.professional_id not in rejected]

        ranked = await self.ranker.rank_candidates(candidates)
        sm.transition(AllocationTrigger.RANKED)

        for candidate in ranked:
            professional = candidate.professional
            pid = professional.professional_id
            if not await self.checker.is_available(pid, booking.scheduled_time, duration):
                sm.transition(AllocationTrigger.CANDIDATE_BUSY, detail=pid)
                continue
            try:
                await self.committer.commit(booking.booking_id, pid)
            except AllocationConflictError:
                logger.info("Commit conflict for %s; trying next candidate", pid)
                sm.transition(AllocationTrigger.COMMIT_CONFLICT, detail=pid)
                continue
            sm.transition(AllocationTrigger.COMMITTED, detail=pid)
            return await self._finish(sm, booking, professional)

        sm.transition(AllocationTrigger.CANDIDATES_EXHAUSTED)
        return await self._finish(sm, booking)

    async def _finish(
        self,
        sm: AllocationStateMachine,
        booking: Booking,
        professional: Optional[Professional] = None,
    ) -> BookingStatus:
        status = sm.booking_status()
        if sm.current_state != AllocationState.ASSIGNED:
            # the committer already wrote ``assigned`` on success
            await bounded_call(
                self._store.set_booking_status(booking.booking_id, status),
                self._timeout,
                StoreUnavailableError,
                f"marking booking {booking.booking_id} {status.value}",
            )

        logger.info(
            "Allocation finished: %s%s (trace: %s)",
            status.value,
            f" -> {professional.professional_id}" if professional else "",
            " > ".join(sm.get_state_trace()),
        )
        self._notify(booking.model_copy(update={"status": status}), status, professional)
        return status

    def _notify(
        self, booking: Booking, status: BookingStatus, professional: Optional[Professional]
    ) -> None:
        try:
            self._notifier.notify_booking_outcome(booking, status, professional)
        except Exception:
            # notifications never change a committed outcome
            logger.exception("Failed to queue %s notification", status.value)
