"""End-to-end tests: petstore spec -> catalog -> gateway -> HTTP API.

The upstream API is an httpx mock transport, so these run offline while
exercising the real request building and response decoding.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from openapi_mcp.catalog import build_catalog
from openapi_mcp.gateway import ToolGateway

_PETS: dict[str, dict[str, Any]] = {
    "1": {"id": 1, "name": "Rex", "tag": "dog"},
}


def _petstore_api(request: httpx.Request) -> httpx.Response:
    """A tiny in-memory petstore."""
    path = request.url.path.removeprefix("/v1")
    if path == "/pets" and request.method == "GET":
        limit = int(request.url.params.get("limit", 100))
        return httpx.Response(200, json=list(_PETS.values())[:limit])
    if path == "/pets" and request.method == "POST":
        body = json.loads(request.content)
        return httpx.Response(201, json={"id": 2, **body})
    if path.startswith("/pets/") and request.method == "GET":
        pet = _PETS.get(path.split("/")[2])
        if pet is None:
            return httpx.Response(404, json={"message": "not found"})
        return httpx.Response(200, json=pet)
    return httpx.Response(500, text="unexpected")


@pytest.fixture
def gateway(petstore, mock_client) -> ToolGateway:
    gateway = ToolGateway(build_catalog(petstore, "gemini"), mock_client(_petstore_api))
    gateway.list_tools()
    return gateway


def _text(envelope):
    return json.loads(envelope["content"][0]["text"])


class TestPetstore:
    async def test_list_pets(self, gateway):
        envelope = await gateway.call_tool("API-listPets", {"limit": 1})
        assert envelope["isError"] is False
        assert _text(envelope) == [{"id": 1, "name": "Rex", "tag": "dog"}]

    async def test_create_pet(self, gateway):
        envelope = await gateway.call_tool("API-createPet", {"name": "Tom", "tag": "cat"})
        assert _text(envelope) == {"id": 2, "name": "Tom", "tag": "cat"}

    async def test_show_pet(self, gateway):
        envelope = await gateway.call_tool("API-showPetById", {"petId": "1"})
        assert _text(envelope)["name"] == "Rex"

    async def test_missing_pet(self, gateway):
        envelope = await gateway.call_tool("API-showPetById", {"petId": "99"})
        assert envelope["isError"] is True
        assert _text(envelope) == {
            "status": "error",
            "message": "Request failed with status code 404",
            "details": {"message": "not found"},
            "statusCode": 404,
        }

    async def test_upstream_text_error(self, gateway):
        envelope = await gateway.call_tool("API-deletePet", {"petId": "1"})
        payload = _text(envelope)
        assert payload["statusCode"] == 500
        assert payload["details"] == {"data": "unexpected"}

    async def test_unknown_tool(self, gateway):
        envelope = await gateway.call_tool("API-feedPet", {})
        assert envelope["isError"] is True

    async def test_missing_upload_file(self, gateway, tmp_path):
        """A local file that does not exist fails the call, not the process."""
        envelope = await gateway.call_tool(
            "API-uploadPetPhoto", {"petId": "1", "file": str(tmp_path / "missing.png")},
        )
        assert envelope["isError"] is True
        assert _text(envelope)["status"] == "error"
