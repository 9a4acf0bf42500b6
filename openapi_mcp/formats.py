"""Export a spec's tools in the shapes LLM provider APIs expect."""

from __future__ import annotations

from typing import Any

from .catalog import build_catalog
from .schema_parser import DEFAULT_DIALECT, GEMINI_DIALECT


def to_openai_tools(spec: dict[str, Any]) -> list[dict[str, Any]]:
    """OpenAI chat-completions function tools."""
    catalog = build_catalog(spec, DEFAULT_DIALECT)
    return [
        {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": tool.input_schema,
            },
        }
        for _, tool in catalog.iter_tools()
    ]


def to_anthropic_tools(spec: dict[str, Any]) -> list[dict[str, Any]]:
    """Anthropic messages API tools."""
    catalog = build_catalog(spec, DEFAULT_DIALECT)
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "input_schema": tool.input_schema,
        }
        for _, tool in catalog.iter_tools()
    ]


def to_gemini_tools(spec: dict[str, Any]) -> list[dict[str, Any]]:
    """Gemini function declarations (uppercase type tokens)."""
    catalog = build_catalog(spec, GEMINI_DIALECT)
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "parameters": tool.input_schema,
        }
        for _, tool in catalog.iter_tools()
    ]
