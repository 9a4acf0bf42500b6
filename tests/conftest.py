"""Shared fixtures: the petstore spec and an HTTP client backed by a mock transport."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from openapi_mcp.http_client import HttpClient
from openapi_mcp.loader import load_spec

FIXTURES = Path(__file__).parent / "fixtures"
PETSTORE_PATH = FIXTURES / "petstore.yaml"
BASE_URL = "https://petstore.example.com/v1"


@pytest.fixture
def petstore() -> dict[str, Any]:
    """A fresh copy of the petstore spec for each test."""
    return load_spec(PETSTORE_PATH)


@pytest.fixture
def mock_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], HttpClient]:
    """Return a factory building an HttpClient whose requests hit ``handler``.

    Usage in tests::

        client = mock_client(lambda request: httpx.Response(200, json={}))
    """
    def _make(handler, headers=None):
        return HttpClient(BASE_URL, headers=headers, transport=httpx.MockTransport(handler))
    return _make
