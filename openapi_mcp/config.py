"""Runtime settings sourced from the environment.

  OPENAPI_MCP_HEADERS   JSON object of extra headers sent upstream
  OPENAPI_MCP_BASE_URL  overrides the spec's first servers[].url
  OPENAPI_MCP_DIALECT   schema dialect served to clients (default|gemini)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from .schema_parser import DEFAULT_DIALECT, check_dialect

logger = logging.getLogger(__name__)

HEADERS_ENV = "OPENAPI_MCP_HEADERS"
BASE_URL_ENV = "OPENAPI_MCP_BASE_URL"
DIALECT_ENV = "OPENAPI_MCP_DIALECT"


class ConfigError(Exception):
    """Settings cannot be assembled from the spec and environment."""


@dataclass
class Settings:
    base_url: str
    headers: dict[str, str] = field(default_factory=dict)
    dialect: str = DEFAULT_DIALECT


def parse_headers(raw: str | None) -> dict[str, str]:
    """Parse the extra-headers JSON; anything but an object yields {}."""
    if not raw:
        return {}
    try:
        headers = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Failed to parse %s environment variable: %s", HEADERS_ENV, exc)
        return {}
    if not isinstance(headers, dict):
        logger.warning(
            "%s environment variable must be a JSON object, got: %s",
            HEADERS_ENV, type(headers).__name__,
        )
        return {}
    return {str(k): str(v) for k, v in headers.items()}


def load_settings(spec: dict[str, Any], environ: Mapping[str, str] | None = None) -> Settings:
    """Build settings from the spec's servers block and the environment."""
    env = os.environ if environ is None else environ

    base_url = env.get(BASE_URL_ENV)
    if not base_url:
        servers = spec.get("servers") or []
        base_url = servers[0].get("url") if servers and isinstance(servers[0], dict) else None
    if not base_url:
        raise ConfigError(f"No base URL found in OpenAPI spec and {BASE_URL_ENV} is not set")

    try:
        dialect = check_dialect(env.get(DIALECT_ENV) or DEFAULT_DIALECT)
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc

    return Settings(base_url=base_url, headers=parse_headers(env.get(HEADERS_ENV)), dialect=dialect)
