"""Tests for the HTTP and in-memory professional directories."""

import httpx
import pytest
import respx

from src.allocation.errors import DirectoryContractError, DirectoryUnavailableError
from src.clients.directory import HttpProfessionalDirectory, InMemoryProfessionalDirectory

BASE = "http://directory.local/api"
URL = f"{BASE}/professionals"


async def _fetch(area_id: int = 3):
    directory = HttpProfessionalDirectory(BASE, 5.0)
    await directory.start()
    try:
        return await directory.list_professionals_covering_area(area_id)
    finally:
        await directory.close()


@respx.mock
@pytest.mark.asyncio
async def test_queries_by_location_and_parses_records():
    route = respx.get(URL).mock(return_value=httpx.Response(200, json=[
        {"professional_id": "P7", "full_name": "Meera Iyer",
         "phone": "98450 12345", "coverage": [3, 8]},
        {"professional_id": "P2", "full_name": "Anita Sharma", "coverage": [3]},
    ]))
    professionals = await _fetch(3)

    assert route.called
    assert route.calls.last.request.url.params["location_id"] == "3"
    assert [p.professional_id for p in professionals] == ["P7", "P2"]
    assert professionals[0].phone == "9845012345"


@respx.mock
@pytest.mark.asyncio
async def test_empty_list_is_valid():
    respx.get(URL).mock(return_value=httpx.Response(200, json=[]))
    assert await _fetch() == []


@respx.mock
@pytest.mark.asyncio
async def test_invalid_records_dropped():
    respx.get(URL).mock(return_value=httpx.Response(200, json=[
        {"full_name": "Missing Id", "coverage": [3]},
        {"professional_id": "P1", "full_name": "Ravi Kumar", "coverage": [3]},
    ]))
    professionals = await _fetch()
    assert [p.professional_id for p in professionals] == ["P1"]


@respx.mock
@pytest.mark.asyncio
async def test_server_error_is_transient():
    respx.get(URL).mock(return_value=httpx.Response(503))
    with pytest.raises(DirectoryUnavailableError, match="503"):
        await _fetch()


@respx.mock
@pytest.mark.asyncio
async def test_client_error_is_contract_error():
    respx.get(URL).mock(return_value=httpx.Response(404))
    with pytest.raises(DirectoryContractError, match="404"):
        await _fetch()


@respx.mock
@pytest.mark.asyncio
async def test_connection_failure_is_transient():
    respx.get(URL).mock(side_effect=httpx.ConnectError)
    with pytest.raises(DirectoryUnavailableError, match="unreachable"):
        await _fetch()


@respx.mock
@pytest.mark.asyncio
async def test_non_list_payload_is_contract_error():
    respx.get(URL).mock(return_value=httpx.Response(200, json={"professionals": []}))
    with pytest.raises(DirectoryContractError, match="must be a list"):
        await _fetch()


@respx.mock
@pytest.mark.asyncio
async def test_non_json_payload_is_contract_error():
    respx.get(URL).mock(return_value=httpx.Response(200, text="<html>"))
    with pytest.raises(DirectoryContractError, match="JSON"):
        await _fetch()


def test_base_url_required():
    with pytest.raises(ValueError, match="DIRECTORY_API_BASE"):
        HttpProfessionalDirectory("", 5.0)


@pytest.mark.asyncio
async def test_in_memory_directory_filters_by_coverage():
    directory = InMemoryProfessionalDirectory([
        {"professional_id": "P1", "full_name": "Ravi", "coverage": [1, 3]},
        {"professional_id": "P2", "full_name": "Anita", "coverage": [4]},
    ])
    covering = await directory.list_professionals_covering_area(3)
    assert [p.professional_id for p in covering] == ["P1"]
