"""Tests for the loader module."""

import json

from openapi_mcp.loader import (
    get_paths,
    get_schemas,
    load_spec,
    resolve_parameter,
    resolve_ref,
    resolve_request_body,
    resolve_response,
)

_SPEC: dict = {
    "paths": {
        "/a/{id}": {"get": {"operationId": "getA"}},
    },
    "components": {
        "schemas": {
            "Pet": {"type": "object"},
        },
        "parameters": {
            "Limit": {"name": "limit", "in": "query", "schema": {"type": "integer"}},
            "Nameless": {"in": "query", "schema": {"type": "integer"}},
        },
        "requestBodies": {
            "PetBody": {"content": {"application/json": {"schema": {"type": "object"}}}},
        },
        "responses": {
            "NotFound": {"description": "not found"},
        },
    },
    "x-list": [{"type": "string"}],
}


class TestLoadSpec:
    def test_yaml(self, petstore):
        assert petstore["info"]["title"] == "Petstore"
        assert "/pets" in petstore["paths"]

    def test_json(self, tmp_path):
        spec_file = tmp_path / "spec.json"
        spec_file.write_text(json.dumps(_SPEC))
        assert load_spec(spec_file) == _SPEC


class TestAccessors:
    def test_get_paths(self):
        assert list(get_paths(_SPEC)) == ["/a/{id}"]

    def test_get_schemas(self):
        assert list(get_schemas(_SPEC)) == ["Pet"]

    def test_missing_sections(self):
        assert get_paths({}) == {}
        assert get_schemas({"components": {}}) == {}


class TestResolveRef:
    """Pointer resolution never raises; misses come back as None."""

    def test_component_schema(self):
        assert resolve_ref(_SPEC, "#/components/schemas/Pet") == {"type": "object"}

    def test_escaped_segment(self):
        """~1 stands for / inside a segment."""
        assert resolve_ref(_SPEC, "#/paths/~1a~1{id}/get") == {"operationId": "getA"}

    def test_list_index(self):
        assert resolve_ref(_SPEC, "#/x-list/0") == {"type": "string"}
        assert resolve_ref(_SPEC, "#/x-list/5") is None

    def test_missing_segment(self):
        assert resolve_ref(_SPEC, "#/components/schemas/Missing") is None
        assert resolve_ref(_SPEC, "#/components/schemas/Pet/type/deeper") is None

    def test_external_ref_not_found(self):
        assert resolve_ref(_SPEC, "https://example.com/spec.json#/components/schemas/Pet") is None
        assert resolve_ref(_SPEC, "other.yaml#/Pet") is None


class TestResolveObjects:
    def test_inline_parameter(self):
        param = {"name": "q", "in": "query"}
        assert resolve_parameter(_SPEC, param) is param

    def test_parameter_ref(self):
        param = resolve_parameter(_SPEC, {"$ref": "#/components/parameters/Limit"})
        assert param["name"] == "limit"

    def test_parameter_ref_without_name(self):
        """A resolved parameter missing its name is treated as not found."""
        assert resolve_parameter(_SPEC, {"$ref": "#/components/parameters/Nameless"}) is None

    def test_parameter_dangling_ref(self):
        assert resolve_parameter(_SPEC, {"$ref": "#/components/parameters/Nope"}) is None

    def test_request_body_ref(self):
        body = resolve_request_body(_SPEC, {"$ref": "#/components/requestBodies/PetBody"})
        assert "application/json" in body["content"]

    def test_response_ref(self):
        assert resolve_response(_SPEC, {"$ref": "#/components/responses/NotFound"}) == {
            "description": "not found",
        }

    def test_response_dangling_ref(self):
        assert resolve_response(_SPEC, {"$ref": "#/components/responses/Gone"}) is None
