"""Load an OpenAPI document and resolve pointers inside it.

Only intra-document pointers (``#/...``) are supported. Every lookup
degrades to ``None`` instead of raising, so a malformed document never
aborts a catalog build.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

_YAML_SUFFIXES = {".yaml", ".yml"}


def load_spec(path: Path | str) -> dict[str, Any]:
    """Load the OpenAPI spec from disk (JSON or YAML)."""
    spec_file = Path(path)
    with open(spec_file) as f:
        if spec_file.suffix.lower() in _YAML_SUFFIXES:
            return yaml.safe_load(f)
        return json.load(f)


def get_paths(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the spec."""
    return spec.get("paths") or {}


def get_schemas(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract component schemas from the spec."""
    return (spec.get("components") or {}).get("schemas") or {}


def _unescape(segment: str) -> str:
    return segment.replace("~1", "/").replace("~0", "~")


def resolve_ref(spec: dict[str, Any], ref: str) -> Any | None:
    """Resolve a $ref pointer in the spec, or None if it points nowhere."""
    if not isinstance(ref, str) or not ref.startswith("#/"):
        return None

    node: Any = spec
    for part in ref[2:].split("/"):
        part = _unescape(part)
        if isinstance(node, dict):
            if part not in node:
                return None
            node = node[part]
        elif isinstance(node, list):
            if not part.isdigit() or int(part) >= len(node):
                return None
            node = node[int(part)]
        else:
            return None
        if node is None:
            return None
    return node


def _resolve_object(spec: dict[str, Any], obj: Any) -> dict[str, Any] | None:
    if not isinstance(obj, dict):
        return None
    if "$ref" in obj:
        resolved = resolve_ref(spec, obj["$ref"])
        return resolved if isinstance(resolved, dict) else None
    return obj


def resolve_parameter(spec: dict[str, Any], param: Any) -> dict[str, Any] | None:
    """Return the parameter object, following a $ref; None without a name."""
    resolved = _resolve_object(spec, param)
    if resolved is None or resolved.get("name") is None:
        return None
    return resolved


def resolve_request_body(spec: dict[str, Any], body: Any) -> dict[str, Any] | None:
    """Return the request body object, following a $ref."""
    return _resolve_object(spec, body)


def resolve_response(spec: dict[str, Any], response: Any) -> dict[str, Any] | None:
    """Return the response object, following a $ref."""
    return _resolve_object(spec, response)
