"""Build the tool catalog from an OpenAPI spec.

Walks every supported path/method pair, compiles it, gives the tool a
unique bounded name and files the originating operation under
"<group>-<name>" for dispatch.
"""

from __future__ import annotations

import logging
from typing import Any

from .compiler import collect_parameters, compile_operation
from .loader import get_paths
from .models import TOOL_GROUP, BuildContext, Catalog, OperationRecord
from .schema_parser import DEFAULT_DIALECT, check_dialect

logger = logging.getLogger(__name__)

# Only these path-item keys are operations; parameters, servers, $ref etc. are not
SUPPORTED_METHODS = ("get", "post", "put", "delete", "patch")


def build_catalog(spec: dict[str, Any], dialect: str = DEFAULT_DIALECT) -> Catalog:
    """Compile every operation in the spec into one catalog.

    Each call starts from a fresh BuildContext, so the conversion cache and
    the name counter never leak from one build into the next.
    """
    check_dialect(dialect)
    ctx = BuildContext(spec)
    catalog = Catalog(tools={TOOL_GROUP: []})

    for path, path_item in get_paths(spec).items():
        if not isinstance(path_item, dict):
            continue
        path_parameters = path_item.get("parameters") or []

        for method, operation in path_item.items():
            if method.lower() not in SUPPORTED_METHODS or not isinstance(operation, dict):
                continue

            tool = compile_operation(ctx, operation, method, path, dialect, path_parameters)
            if tool is None:
                continue

            tool.name = ctx.names.ensure_unique(tool.name)
            catalog.tools[TOOL_GROUP].append(tool)
            catalog.lookup[f"{TOOL_GROUP}-{tool.name}"] = OperationRecord(
                method=method.lower(),
                path=path,
                operation=operation,
                parameters={
                    param["name"]: param.get("in", "query")
                    for param in collect_parameters(ctx, operation, path_parameters)
                },
                request_body=tool.request_body,
            )

    logger.info("Built catalog with %d tools", len(catalog.lookup))
    return catalog
