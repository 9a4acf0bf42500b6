"""Compile one OpenAPI operation into a tool definition.

Produces the flattened input schema (parameters + request body fields in
one namespace, component schemas embedded as $defs), the description with
error responses listed, and the result schema of the success response.
"""

from __future__ import annotations

import logging
from typing import Any

from .loader import resolve_parameter, resolve_ref, resolve_request_body, resolve_response
from .models import BuildContext, CompiledTool, RequestBodyLayout
from .schema_parser import (
    DEFAULT_DIALECT,
    convert_components,
    convert_schema,
    is_object_type,
    map_type,
)

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
MULTIPART_CONTENT_TYPE = "multipart/form-data"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Success responses, in order of preference
_SUCCESS_CODES = ("200", "201", "202", "204")
_BINARY_CONTENT_TYPES = ("image/png", "image/jpeg", "application/octet-stream")


def _is_json(content_type: str) -> bool:
    media_type = content_type.split(";")[0].strip().lower()
    return media_type == JSON_CONTENT_TYPE or media_type.endswith("+json")


def _is_form(content_type: str) -> bool:
    media_type = content_type.split(";")[0].strip().lower()
    return media_type in (MULTIPART_CONTENT_TYPE, FORM_CONTENT_TYPE)


def _responses(operation: dict[str, Any]) -> dict[str, Any]:
    # YAML loads bare status codes as ints
    return {str(code): resp for code, resp in (operation.get("responses") or {}).items()}


def collect_parameters(
    ctx: BuildContext,
    operation: dict[str, Any],
    path_parameters: list[Any] | None = None,
) -> list[dict[str, Any]]:
    """Resolve the operation's parameters, inheriting path-level ones.

    An operation-level parameter replaces a path-level one with the same
    name and location. Unresolvable parameters are dropped.
    """
    merged: dict[tuple[str, str], dict[str, Any]] = {}
    for param in [*(path_parameters or []), *(operation.get("parameters") or [])]:
        param_obj = resolve_parameter(ctx.spec, param)
        if param_obj is None:
            continue
        merged[(param_obj["name"], param_obj.get("in", "query"))] = param_obj
    return list(merged.values())


def _binary_fields(ctx: BuildContext, schema: Any) -> tuple[str, ...]:
    """Names of top-level body properties declared as format: binary."""
    if isinstance(schema, dict) and "$ref" in schema:
        schema = resolve_ref(ctx.spec, schema["$ref"])
    if not isinstance(schema, dict):
        return ()
    names = []
    for name, prop in (schema.get("properties") or {}).items():
        if isinstance(prop, dict) and "$ref" in prop:
            prop = resolve_ref(ctx.spec, prop["$ref"])
        if not isinstance(prop, dict):
            continue
        items = prop.get("items") if isinstance(prop.get("items"), dict) else {}
        if prop.get("format") == "binary" or items.get("format") == "binary":
            names.append(name)
    return tuple(names)


def _splice_body(
    schema: dict[str, Any],
    body_schema: dict[str, Any],
    param_names: set[str],
    operation_label: str,
) -> None:
    """Merge body properties into the flat input schema.

    Declared parameters keep their slot when a body field has the same name.
    """
    skipped = set()
    for name, prop in body_schema["properties"].items():
        if name in param_names:
            logger.warning(
                "%s: request body field %r clashes with a parameter of the same name; "
                "keeping the parameter",
                operation_label, name,
            )
            skipped.add(name)
            continue
        schema["properties"][name] = prop
    for name in body_schema.get("required", []):
        if name not in skipped and name not in schema["required"]:
            schema["required"].append(name)


def _add_request_body(
    ctx: BuildContext,
    operation: dict[str, Any],
    schema: dict[str, Any],
    param_names: set[str],
    operation_label: str,
    dialect: str,
) -> RequestBodyLayout | None:
    """Fold the request body into the input schema, returning its layout."""
    if "requestBody" not in operation:
        return None
    body = resolve_request_body(ctx.spec, operation["requestBody"])
    content = (body or {}).get("content")
    if not isinstance(content, dict) or not content:
        return None

    content_type = next(iter(content))
    media = content[content_type] or {}
    if not media.get("schema"):
        return None

    converted = convert_schema(ctx, media["schema"], frozenset(), False, dialect)
    spliceable = is_object_type(converted.get("type")) and "properties" in converted

    if _is_json(content_type):
        if spliceable:
            _splice_body(schema, converted, param_names, operation_label)
            return RequestBodyLayout(content_type)
        if "body" in param_names:
            logger.warning(
                "%s: request body clashes with a parameter named 'body'; keeping the parameter",
                operation_label,
            )
            return None
        schema["properties"]["body"] = converted
        if body.get("required"):
            schema["required"].append("body")
        return RequestBodyLayout(content_type, nested=True)

    if _is_form(content_type):
        # Form payloads are assumed to decompose into named fields
        if spliceable:
            _splice_body(schema, converted, param_names, operation_label)
        return RequestBodyLayout(
            content_type, file_fields=_binary_fields(ctx, media["schema"]),
        )

    return None


def build_input_schema(
    ctx: BuildContext,
    operation: dict[str, Any],
    method: str,
    path: str,
    dialect: str = DEFAULT_DIALECT,
    path_parameters: list[Any] | None = None,
) -> tuple[dict[str, Any], RequestBodyLayout | None]:
    """Build the flat input schema for an operation."""
    schema: dict[str, Any] = {
        "type": map_type("object", dialect),
        "properties": {},
        "required": [],
        "$defs": convert_components(ctx, dialect),
    }

    param_names: set[str] = set()
    for param in collect_parameters(ctx, operation, path_parameters):
        if "schema" not in param:
            continue
        name = param["name"]
        param_schema = convert_schema(ctx, param["schema"], frozenset(), False, dialect)
        if param.get("description"):
            param_schema["description"] = param["description"]
        schema["properties"][name] = param_schema
        param_names.add(name)
        if param.get("required") and name not in schema["required"]:
            schema["required"].append(name)

    operation_label = f"{method.upper()} {path}"
    layout = _add_request_body(ctx, operation, schema, param_names, operation_label, dialect)
    return schema, layout


def make_description(ctx: BuildContext, operation: dict[str, Any]) -> str:
    """Summary (or description), followed by one line per 4xx/5xx response."""
    doc = operation.get("summary") or operation.get("description") or ""

    error_lines = []
    for code, response in _responses(operation).items():
        if code.startswith(("4", "5")):
            resolved = resolve_response(ctx.spec, response) or {}
            error_lines.append(f"{code}: {resolved.get('description') or ''}")

    if error_lines:
        doc += "\nError Responses:\n" + "\n".join(error_lines)
    return doc


def _result_from_schema(
    ctx: BuildContext, schema: Any, description: str | None, dialect: str,
) -> dict[str, Any]:
    result = convert_schema(ctx, schema, frozenset(), False, dialect)
    result["$defs"] = convert_components(ctx, dialect)
    if description and not result.get("description"):
        result["description"] = description
    return result


def extract_result_schema(
    ctx: BuildContext,
    operation: dict[str, Any],
    dialect: str = DEFAULT_DIALECT,
) -> dict[str, Any] | None:
    """Schema of the preferred success response, or None if undocumented."""
    responses = _responses(operation)
    success = next((responses[code] for code in _SUCCESS_CODES if responses.get(code)), None)
    if success is None:
        return None

    response = resolve_response(ctx.spec, success)
    if not response or not response.get("content"):
        return None

    content = response["content"]
    description = response.get("description")

    json_media = content.get(JSON_CONTENT_TYPE) or {}
    if json_media.get("schema"):
        return _result_from_schema(ctx, json_media["schema"], description, dialect)

    if any(ct in content for ct in _BINARY_CONTENT_TYPES):
        return {
            "type": map_type("string", dialect),
            "format": "binary",
            "description": description or "Binary file content",
        }

    first_media = next(iter(content.values())) or {}
    if first_media.get("schema"):
        return _result_from_schema(ctx, first_media["schema"], description, dialect)

    return {
        "type": map_type("string", dialect),
        "description": description or "Plain text response",
    }


def compile_operation(
    ctx: BuildContext,
    operation: dict[str, Any],
    method: str,
    path: str,
    dialect: str = DEFAULT_DIALECT,
    path_parameters: list[Any] | None = None,
) -> CompiledTool | None:
    """Compile an operation, or return None if it has no operationId."""
    operation_id = operation.get("operationId")
    if not operation_id:
        logger.warning("Operation without operationId at %s %s; skipping", method, path)
        return None

    input_schema, layout = build_input_schema(
        ctx, operation, method, path, dialect, path_parameters,
    )
    return CompiledTool(
        name=str(operation_id),
        description=make_description(ctx, operation),
        input_schema=input_schema,
        result_schema=extract_result_schema(ctx, operation, dialect),
        request_body=layout,
    )
