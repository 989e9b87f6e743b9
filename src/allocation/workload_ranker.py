"""Workload ranker: orders candidates by their current open allocations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from src.allocation.calls import bounded_call
from src.allocation.errors import StoreUnavailableError
from src.logging_context import get_booking_logger
from src.schemas.allocation_schema import RankedCandidate
from src.schemas.professional_schema import Professional

if TYPE_CHECKING:
    from src.clients.booking_store import BookingStore

logger = get_booking_logger(__name__)


class WorkloadRanker:
    """
    Greedy load preference: fewest open allocations first.

    The count is a proxy for current load, not a global balancing
    guarantee. Allocations whose status is in ``closed_statuses`` are
    not counted.
    """

    def __init__(
        self, store: BookingStore, closed_statuses: Iterable[str], timeout: float
    ) -> None:
        self._store = store
        self._closed_statuses = tuple(closed_statuses)
        self._timeout = timeout

    async def rank_candidates(self, professionals: list[Professional]) -> list[RankedCandidate]:
        ranked: list[RankedCandidate] = []
        for professional in professionals:
            count = await bounded_call(
                self._store.count_open_allocations(
                    professional.professional_id, self._closed_statuses
                ),
                self._timeout,
                StoreUnavailableError,
                f"counting open allocations for {professional.professional_id}",
            )
            ranked.append(RankedCandidate(professional=professional, open_allocations=count))

        # sorted() is stable: equal counts keep resolver order
        ranked = sorted(ranked, key=lambda c: c.open_allocations)
        logger.debug(
            "Probe order: %s",
            ", ".join(f"{c.professional.professional_id}({c.open_allocations})" for c in ranked),
        )
        return ranked
