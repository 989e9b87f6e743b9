"""Tests for candidate resolution."""

import asyncio

import pytest

from src.allocation.candidate_resolver import CandidateResolver
from src.allocation.errors import DirectoryUnavailableError
from src.clients.directory import InMemoryProfessionalDirectory
from tests.conftest import make_professional


class _OverReturningDirectory:
    """Ignores the area filter and returns everyone."""

    def __init__(self, professionals):
        self._professionals = professionals

    async def list_professionals_covering_area(self, area_id):
        return list(self._professionals)


class _DownDirectory:
    async def list_professionals_covering_area(self, area_id):
        raise ConnectionError("connection refused")


class _HangingDirectory:
    async def list_professionals_covering_area(self, area_id):
        await asyncio.sleep(5)


class TestResolveCandidates:
    @pytest.mark.asyncio
    async def test_returns_covering_professionals_in_directory_order(self):
        directory = InMemoryProfessionalDirectory([
            make_professional("P1", coverage=[1, 3]),
            make_professional("P2", coverage=[2]),
            make_professional("P3", coverage=[3]),
        ])
        resolver = CandidateResolver(directory, 1.0)
        candidates = await resolver.resolve_candidates(3)
        assert [p.professional_id for p in candidates] == ["P1", "P3"]

    @pytest.mark.asyncio
    async def test_no_coverage_returns_empty_list(self, directory):
        resolver = CandidateResolver(directory, 1.0)
        assert await resolver.resolve_candidates(5) == []

    @pytest.mark.asyncio
    async def test_filters_records_that_do_not_cover_area(self):
        directory = _OverReturningDirectory([
            make_professional("P1", coverage=[3]),
            make_professional("P2", coverage=[4]),
        ])
        resolver = CandidateResolver(directory, 1.0)
        candidates = await resolver.resolve_candidates(3)
        assert [p.professional_id for p in candidates] == ["P1"]

    @pytest.mark.asyncio
    async def test_unreachable_directory_is_distinct_from_empty(self):
        resolver = CandidateResolver(_DownDirectory(), 1.0)
        with pytest.raises(DirectoryUnavailableError, match="Connection lost"):
            await resolver.resolve_candidates(3)

    @pytest.mark.asyncio
    async def test_hanging_directory_times_out(self):
        resolver = CandidateResolver(_HangingDirectory(), 0.05)
        with pytest.raises(DirectoryUnavailableError, match="Timed out"):
            await resolver.resolve_candidates(3)
