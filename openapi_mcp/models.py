"""Records produced by a catalog build."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from .naming import NameRegistry

# Single logical group every tool is filed under; also the lookup key prefix.
TOOL_GROUP = "API"


@dataclass(frozen=True)
class RequestBodyLayout:
    """How an operation's request body was folded into its input schema."""

    content_type: str
    # True when the whole payload sits under the synthetic "body" property.
    nested: bool = False
    file_fields: tuple[str, ...] = ()


@dataclass
class CompiledTool:
    name: str
    description: str
    input_schema: dict[str, Any]
    result_schema: dict[str, Any] | None = None
    request_body: RequestBodyLayout | None = None


@dataclass(frozen=True)
class OperationRecord:
    """The originating operation of a tool, as looked up at call time."""

    method: str
    path: str
    operation: dict[str, Any]
    # parameter name -> location ("path", "query", "header", "cookie")
    parameters: dict[str, str] = field(default_factory=dict)
    request_body: RequestBodyLayout | None = None


@dataclass
class Catalog:
    tools: dict[str, list[CompiledTool]] = field(default_factory=dict)
    lookup: dict[str, OperationRecord] = field(default_factory=dict)

    def iter_tools(self) -> Iterator[tuple[str, CompiledTool]]:
        """Yield (internal key, tool) pairs in build order."""
        for group, tools in self.tools.items():
            for tool in tools:
                yield f"{group}-{tool.name}", tool


@dataclass
class BuildContext:
    """Mutable state scoped to one catalog build."""

    spec: dict[str, Any]
    # (pointer, active path) -> converted schema (default dialect, non-inlined only)
    cache: dict[tuple[str, frozenset[str]], dict[str, Any]] = field(default_factory=dict)
    names: NameRegistry = field(default_factory=NameRegistry)
