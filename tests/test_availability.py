"""Tests for interval overlap and the availability checker."""

from datetime import timedelta

import pytest

from src.allocation.availability import AvailabilityChecker, intervals_overlap
from src.schemas.allocation_schema import AllocationStatus
from src.schemas.booking_schema import BookingStatus
from tests.conftest import START, seed_job


def _at(minutes: int):
    return START + timedelta(minutes=minutes)


class TestIntervalsOverlap:
    def test_identical_windows_overlap(self):
        assert intervals_overlap(_at(0), _at(45), _at(0), _at(45))

    def test_partial_overlap(self):
        assert intervals_overlap(_at(0), _at(45), _at(30), _at(90))

    def test_containment_overlaps(self):
        assert intervals_overlap(_at(0), _at(120), _at(30), _at(45))

    def test_existing_ends_when_requested_starts(self):
        assert not intervals_overlap(_at(0), _at(45), _at(-45), _at(0))

    def test_existing_starts_when_requested_ends(self):
        assert not intervals_overlap(_at(0), _at(45), _at(45), _at(90))

    def test_disjoint_windows(self):
        assert not intervals_overlap(_at(0), _at(45), _at(120), _at(180))

    def test_symmetric(self):
        assert intervals_overlap(_at(30), _at(90), _at(0), _at(45))


class TestAvailabilityChecker:
    def setup_method(self):
        self.timeout = 1.0

    @pytest.mark.asyncio
    async def test_no_jobs_means_available(self, store):
        checker = AvailabilityChecker(store, self.timeout)
        assert await checker.is_available("P1", START, 45)

    @pytest.mark.asyncio
    async def test_overlapping_job_blocks(self, store):
        seed_job(store, "P1", _at(-30), duration=45)
        checker = AvailabilityChecker(store, self.timeout)
        assert not await checker.is_available("P1", START, 45)

    @pytest.mark.asyncio
    async def test_back_to_back_before_is_available(self, store):
        seed_job(store, "P1", _at(-45), duration=45)
        checker = AvailabilityChecker(store, self.timeout)
        assert await checker.is_available("P1", START, 45)

    @pytest.mark.asyncio
    async def test_back_to_back_after_is_available(self, store):
        seed_job(store, "P1", _at(45), duration=60)
        checker = AvailabilityChecker(store, self.timeout)
        assert await checker.is_available("P1", START, 45)

    @pytest.mark.asyncio
    async def test_long_existing_job_uses_its_own_duration(self, store):
        seed_job(store, "P1", _at(-120), duration=150)
        checker = AvailabilityChecker(store, self.timeout)
        assert not await checker.is_available("P1", START, 45)

    @pytest.mark.asyncio
    async def test_other_professionals_jobs_are_ignored(self, store):
        seed_job(store, "P2", START)
        checker = AvailabilityChecker(store, self.timeout)
        assert await checker.is_available("P1", START, 45)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("allocation_status", [
        AllocationStatus.COMPLETED, AllocationStatus.CANCELLED, AllocationStatus.REJECTED,
    ])
    async def test_inactive_allocations_do_not_block(self, store, allocation_status):
        seed_job(store, "P1", START, allocation_status=allocation_status)
        checker = AvailabilityChecker(store, self.timeout)
        assert await checker.is_available("P1", START, 45)

    @pytest.mark.asyncio
    async def test_confirmed_allocation_blocks(self, store):
        seed_job(store, "P1", START, allocation_status=AllocationStatus.CONFIRMED)
        checker = AvailabilityChecker(store, self.timeout)
        assert not await checker.is_available("P1", START, 45)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("booking_status", [BookingStatus.CANCELLED, BookingStatus.COMPLETED])
    async def test_closed_bookings_do_not_block(self, store, booking_status):
        seed_job(store, "P1", START, booking_status=booking_status)
        checker = AvailabilityChecker(store, self.timeout)
        assert await checker.is_available("P1", START, 45)
