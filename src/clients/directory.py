"""
Identity directory clients: who the professionals are and where they work.

The HTTP client queries the user directory service; the in-memory
directory serves seeded records for local runs and tests. Both return
validated Professional models, never raw payloads.
"""

import logging
from typing import Any, Iterable, Optional, Protocol

import httpx

from src.allocation.errors import DirectoryContractError, DirectoryUnavailableError
from src.schemas.professional_schema import Professional, parse_professional_records

logger = logging.getLogger(__name__)


class ProfessionalDirectory(Protocol):
    async def list_professionals_covering_area(self, area_id: int) -> list[Professional]: ...


class InMemoryProfessionalDirectory:
    """Directory backed by a list of records, kept in insertion order."""

    def __init__(self, records: Optional[Iterable[Any]] = None) -> None:
        self._professionals: list[Professional] = parse_professional_records(records or [])

    def add(self, professional: Professional) -> None:
        self._professionals.append(professional)

    async def start(self) -> None:
        logger.info("Professional directory ready (%d records)", len(self._professionals))

    async def close(self) -> None:
        pass

    async def list_professionals_covering_area(self, area_id: int) -> list[Professional]:
        return [p for p in self._professionals if p.covers(area_id)]


class HttpProfessionalDirectory:
    """Directory served over HTTP as ``GET {base}/professionals?location_id=<id>``.

    The response must be a JSON list of professional records.
    """

    def __init__(
        self, base_url: str, timeout: float, client: Optional[httpx.AsyncClient] = None
    ) -> None:
        if not base_url:
            raise ValueError("DIRECTORY_API_BASE is required for HttpProfessionalDirectory")
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout)
            self._owns_client = True

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def list_professionals_covering_area(self, area_id: int) -> list[Professional]:
        if self._client is None:
            await self.start()
        try:
            response = await self._client.get(
                f"{self._base_url}/professionals", params={"location_id": area_id}
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code >= 500:
                raise DirectoryUnavailableError(
                    f"Directory returned {exc.response.status_code} for area {area_id}"
                ) from exc
            raise DirectoryContractError(
                f"Directory rejected request for area {area_id}: {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise DirectoryUnavailableError(f"Directory unreachable: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise DirectoryContractError("Directory response is not valid JSON") from exc
        if not isinstance(payload, list):
            raise DirectoryContractError(
                f"Directory response must be a list, got {type(payload).__name__}"
            )
        return parse_professional_records(payload)
