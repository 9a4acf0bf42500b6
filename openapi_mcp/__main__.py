"""Entry point: python -m openapi_mcp SPEC

Loads the OpenAPI spec and serves its operations as MCP tools over stdio.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from mcp.server.stdio import stdio_server

from .config import load_settings
from .loader import load_spec
from .server import create_gateway, create_server


async def _serve(server) -> None:
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Serve an OpenAPI spec as MCP tools over stdio")
    parser.add_argument("spec", help="path to an OpenAPI 3.x document (JSON or YAML)")
    parser.add_argument("--name", default="openapi-mcp", help="server name reported to clients")
    parser.add_argument("--log-level", default="WARNING", help="logging level (default: WARNING)")
    args = parser.parse_args(argv)

    # stdout carries the protocol
    logging.basicConfig(
        stream=sys.stderr,
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    spec = load_spec(args.spec)
    settings = load_settings(spec)
    server = create_server(create_gateway(spec, settings), args.name)
    asyncio.run(_serve(server))


if __name__ == "__main__":
    main()
