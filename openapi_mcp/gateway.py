"""Serve a catalog to a tool-calling protocol and dispatch calls upstream.

Every call outcome, including unknown tool names, comes back as a content
envelope; nothing here raises to the protocol layer.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

from .models import Catalog, OperationRecord
from .http_client import HttpClientError, HttpResponse
from .naming import NameRegistry, truncate_name

logger = logging.getLogger(__name__)


class OperationExecutor(Protocol):
    async def execute(self, record: OperationRecord, arguments: dict[str, Any]) -> HttpResponse:
        ...


def _envelope(payload: Any, is_error: bool = False) -> dict[str, Any]:
    return {
        "content": [{"type": "text", "text": json.dumps(payload)}],
        "isError": is_error,
    }


def error_envelope(message: str, **extra: Any) -> dict[str, Any]:
    return _envelope({"status": "error", "message": message, **extra}, is_error=True)


def _upstream_error_envelope(error: HttpClientError) -> dict[str, Any]:
    data = error.data or {}
    response = data.get("response") or {}
    details = response.get("data") if response.get("data") is not None else data
    if not isinstance(details, dict):
        details = {"data": details}
    return error_envelope(error.message, details=details, statusCode=response.get("status"))


class ToolGateway:
    """Maps exposed tool names to catalogued operations and runs them."""

    def __init__(self, catalog: Catalog, client: OperationExecutor) -> None:
        self.catalog = catalog
        self.client = client
        self.exposed_names: dict[str, str] = {}

    def list_tools(self) -> list[dict[str, Any]]:
        """Enumerate tools and rebuild the exposed-name map from scratch."""
        self.exposed_names.clear()
        # Cut keys can coincide; later ones get a suffix so each stays reachable
        names = NameRegistry()
        tools = []
        for internal_key, tool in self.catalog.iter_tools():
            exposed_name = names.ensure_unique(truncate_name(internal_key))
            self.exposed_names[exposed_name] = internal_key
            tools.append({
                "name": exposed_name,
                "description": tool.description,
                # Protocol clients expect a lowercase object at the root
                "inputSchema": {**tool.input_schema, "type": "object"},
            })
        return tools

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run the named tool and wrap the outcome in a content envelope."""
        internal_key = self.exposed_names.get(name)
        if internal_key is None:
            logger.error(
                "Tool name %r not found; available names: %s", name, sorted(self.exposed_names),
            )
            return error_envelope(f"Method {name} not found or mapping failed.")

        record = self.catalog.lookup.get(internal_key)
        if record is None:
            logger.error("Internal key %r (from tool name %r) has no operation", internal_key, name)
            return error_envelope(f"Internal error: Operation for {name} (key: {internal_key}) not found.")

        try:
            response = await self.client.execute(record, arguments or {})
        except HttpClientError as exc:
            logger.error("Error executing tool %s (internal key: %s): %s", name, internal_key, exc)
            return _upstream_error_envelope(exc)
        except Exception as exc:
            logger.exception("Unexpected error executing tool %s (internal key: %s)", name, internal_key)
            return error_envelope(str(exc) or "An unknown error occurred")

        return _envelope(response.data)
