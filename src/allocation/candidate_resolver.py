"""Candidate resolver: which professionals cover a service area?"""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.allocation.calls import bounded_call
from src.allocation.errors import DirectoryUnavailableError
from src.logging_context import get_booking_logger
from src.schemas.professional_schema import Professional

if TYPE_CHECKING:
    from src.clients.directory import ProfessionalDirectory

logger = get_booking_logger(__name__)


class CandidateResolver:
    """Looks up professionals whose coverage includes a given area."""

    def __init__(self, directory: ProfessionalDirectory, timeout: float) -> None:
        self._directory = directory
        self._timeout = timeout

    async def resolve_candidates(self, area_id: int) -> list[Professional]:
        """
        Return every professional covering ``area_id``, in directory order.

        Raises:
            DirectoryUnavailableError: If the directory could not be queried.
                An empty list always means nobody covers the area.
        """
        records = await bounded_call(
            self._directory.list_professionals_covering_area(area_id),
            self._timeout,
            DirectoryUnavailableError,
            f"listing professionals for area {area_id}",
        )
        candidates = [p for p in records if p.covers(area_id)]
        if len(candidates) != len(records):
            logger.warning(
                "Directory returned %d professional(s) not covering area %s",
                len(records) - len(candidates), area_id,
            )
        logger.info("Resolved %d candidate(s) for area %s", len(candidates), area_id)
        return candidates
