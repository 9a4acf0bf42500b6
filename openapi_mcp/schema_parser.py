"""Convert OpenAPI schema objects into tool-facing JSON Schema.

Handles:
- $ref rewriting (#/components/schemas/X -> #/$defs/X) or full inlining
- Cycle breaking via the chain of pointers currently being expanded
- Dialect-specific type tokens (JSON Schema vs. uppercase Gemini tokens)
- format: binary uploads, redeclared as file paths / encoded strings
- properties, required, additionalProperties, items
- allOf/oneOf/anyOf composition
"""

from __future__ import annotations

import copy
from typing import Any

from .loader import get_schemas, resolve_ref
from .models import BuildContext

DEFAULT_DIALECT = "default"
GEMINI_DIALECT = "gemini"
DIALECTS = (DEFAULT_DIALECT, GEMINI_DIALECT)

_GEMINI_TYPES: dict[str, str] = {
    "number": "NUMBER",
    "integer": "INTEGER",
    "boolean": "BOOLEAN",
    "array": "ARRAY",
    "object": "OBJECT",
    "string": "STRING",
}

# Explanation attached to format: binary fields, by dialect
_BINARY_NOTES: dict[str, str] = {
    DEFAULT_DIALECT: "absolute paths to local files",
    GEMINI_DIALECT: (
        "Content of the file as a string (e.g. base64 encoded),"
        " or a URI reference for large files."
    ),
}

_COMPOSITE_KEYWORDS = ("oneOf", "anyOf", "allOf")

COMPONENT_SCHEMA_PREFIX = "#/components/schemas/"
DEFS_PREFIX = "#/$defs/"


def check_dialect(dialect: str) -> str:
    """Return dialect unchanged, or raise ValueError for an unknown one."""
    if dialect not in DIALECTS:
        raise ValueError(f"Unknown schema dialect {dialect!r}; expected one of {DIALECTS}")
    return dialect


def map_type(type_name: Any, dialect: str = DEFAULT_DIALECT) -> Any:
    """Spell a schema type token the way the dialect expects."""
    if dialect != GEMINI_DIALECT:
        return type_name
    if isinstance(type_name, list):
        return [map_type(t, dialect) for t in type_name]
    if not isinstance(type_name, str):
        return type_name
    return _GEMINI_TYPES.get(type_name.lower(), type_name.upper())


def is_object_type(type_name: Any) -> bool:
    return type_name in ("object", "OBJECT")


def _has_type(schema_type: Any, name: str) -> bool:
    if isinstance(schema_type, list):
        return name in schema_type
    return schema_type == name


def rewrite_ref(ref: str) -> str:
    """Move component schema pointers into the local $defs namespace."""
    if ref.startswith(COMPONENT_SCHEMA_PREFIX):
        return DEFS_PREFIX + ref[len(COMPONENT_SCHEMA_PREFIX):]
    return ref


def _ref_stub(schema: dict[str, Any], ref: str, fallback: str) -> dict[str, Any]:
    """Terminal $ref node used for cycles and dangling pointers."""
    return {"$ref": rewrite_ref(ref), "description": schema.get("description") or fallback}


def _convert_ref(
    ctx: BuildContext,
    schema: dict[str, Any],
    active_path: frozenset[str],
    inline_refs: bool,
    dialect: str,
) -> dict[str, Any]:
    ref = schema["$ref"]
    if ref in active_path:
        return _ref_stub(schema, ref, f"Cyclic reference to {ref}")

    description = schema.get("description")
    if not inline_refs and isinstance(ref, str) and ref.startswith(COMPONENT_SCHEMA_PREFIX):
        node: dict[str, Any] = {"$ref": rewrite_ref(ref)}
        if description:
            node["description"] = description
        return node

    cacheable = dialect == DEFAULT_DIALECT and not inline_refs
    # Cycle stubs depend on the ancestors, so the path is part of the key
    cache_key = (ref, active_path)
    if cacheable and cache_key in ctx.cache:
        converted = copy.deepcopy(ctx.cache[cache_key])
    else:
        target = resolve_ref(ctx.spec, ref)
        if not isinstance(target, dict):
            return _ref_stub(schema, str(ref), f"Unresolved reference: {ref}")
        converted = convert_schema(ctx, target, active_path | {ref}, inline_refs, dialect)
        if cacheable:
            ctx.cache[cache_key] = copy.deepcopy(converted)

    # The referencing node's description only fills a gap in the target's
    if description and not converted.get("description"):
        converted["description"] = description
    return converted


def _convert_additional_properties(
    ctx: BuildContext,
    value: Any,
    active_path: frozenset[str],
    inline_refs: bool,
    dialect: str,
) -> bool | dict[str, Any]:
    if value is None or value is True:
        return True
    if isinstance(value, dict):
        return convert_schema(ctx, value, active_path, inline_refs, dialect)
    return False


def convert_schema(
    ctx: BuildContext,
    schema: Any,
    active_path: frozenset[str] = frozenset(),
    inline_refs: bool = False,
    dialect: str = DEFAULT_DIALECT,
) -> dict[str, Any]:
    """Convert one OpenAPI schema node into a JSON Schema node.

    ``active_path`` holds the pointers being expanded above this node. It is
    immutable, so every child works on its own extended copy and sibling
    branches never see each other's pointers.
    """
    if not isinstance(schema, dict):
        return {}

    if "$ref" in schema:
        return _convert_ref(ctx, schema, active_path, inline_refs, dialect)

    result: dict[str, Any] = {}
    schema_type = schema.get("type")
    if schema_type is None and "properties" in schema:
        schema_type = "object"
    if schema_type:
        result["type"] = map_type(schema_type, dialect)

    description = schema.get("description")
    if schema.get("format") == "binary":
        result["format"] = "uri-reference"
        note = _BINARY_NOTES[dialect]
        result["description"] = f"{description} ({note})" if description else note
        if dialect == GEMINI_DIALECT:
            result["type"] = "STRING"
    else:
        if schema.get("format"):
            result["format"] = schema["format"]
        if description:
            result["description"] = description

    if "enum" in schema:
        result["enum"] = list(schema["enum"])
    if "default" in schema:
        result["default"] = schema["default"]

    if _has_type(schema_type, "object"):
        properties = schema.get("properties")
        if isinstance(properties, dict):
            result["properties"] = {
                name: convert_schema(ctx, prop, active_path, inline_refs, dialect)
                for name, prop in properties.items()
            }
        if schema.get("required"):
            result["required"] = list(schema["required"])
        result["additionalProperties"] = _convert_additional_properties(
            ctx, schema.get("additionalProperties"), active_path, inline_refs, dialect,
        )

    if _has_type(schema_type, "array") and "items" in schema:
        result["items"] = convert_schema(ctx, schema["items"], active_path, inline_refs, dialect)

    for keyword in _COMPOSITE_KEYWORDS:
        members = schema.get(keyword)
        if isinstance(members, list):
            result[keyword] = [
                convert_schema(ctx, member, active_path, inline_refs, dialect)
                for member in members
            ]

    return result


def convert_components(ctx: BuildContext, dialect: str = DEFAULT_DIALECT) -> dict[str, Any]:
    """Fully inline every component schema, for embedding as $defs."""
    return {
        name: convert_schema(ctx, schema, frozenset(), True, dialect)
        for name, schema in get_schemas(ctx.spec).items()
    }
