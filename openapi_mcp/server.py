"""Wire a ToolGateway into an MCP server."""

from __future__ import annotations

from typing import Any

import mcp.types as types
from mcp.server.lowlevel import Server

from .catalog import build_catalog
from .config import Settings
from .gateway import ToolGateway
from .http_client import HttpClient


def create_gateway(spec: dict[str, Any], settings: Settings) -> ToolGateway:
    """Build the catalog and an HTTP client for it."""
    catalog = build_catalog(spec, settings.dialect)
    client = HttpClient(settings.base_url, headers=settings.headers)
    return ToolGateway(catalog, client)


def create_server(gateway: ToolGateway, name: str = "openapi-mcp") -> Server:
    """Register list/call handlers that delegate to the gateway."""
    server: Server = Server(name)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(name=t["name"], description=t["description"], inputSchema=t["inputSchema"])
            for t in gateway.list_tools()
        ]

    # Payloads are passed through as-is; the upstream API validates them
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any]) -> types.CallToolResult:
        envelope = await gateway.call_tool(name, arguments)
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=item["text"]) for item in envelope["content"]],
            isError=envelope["isError"],
        )

    return server
