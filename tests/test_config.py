"""Tests for the config module."""

import logging

import pytest

from openapi_mcp.config import ConfigError, load_settings, parse_headers

_SPEC: dict = {"servers": [{"url": "https://api.example.com"}]}


class TestParseHeaders:
    def test_unset(self):
        assert parse_headers(None) == {}
        assert parse_headers("") == {}

    def test_object(self):
        assert parse_headers('{"Authorization": "Bearer t", "X-Retries": 3}') == {
            "Authorization": "Bearer t",
            "X-Retries": "3",
        }

    def test_invalid_json(self, caplog):
        with caplog.at_level(logging.WARNING, logger="openapi_mcp.config"):
            assert parse_headers("{not json") == {}
        assert "Failed to parse" in caplog.text

    def test_not_an_object(self, caplog):
        with caplog.at_level(logging.WARNING, logger="openapi_mcp.config"):
            assert parse_headers('["a"]') == {}
        assert "must be a JSON object" in caplog.text


class TestLoadSettings:
    def test_from_spec(self):
        settings = load_settings(_SPEC, environ={})
        assert settings.base_url == "https://api.example.com"
        assert settings.headers == {}
        assert settings.dialect == "default"

    def test_env_overrides(self):
        settings = load_settings(_SPEC, environ={
            "OPENAPI_MCP_BASE_URL": "http://localhost:8080",
            "OPENAPI_MCP_HEADERS": '{"X-Api-Key": "k"}',
            "OPENAPI_MCP_DIALECT": "gemini",
        })
        assert settings.base_url == "http://localhost:8080"
        assert settings.headers == {"X-Api-Key": "k"}
        assert settings.dialect == "gemini"

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("OPENAPI_MCP_HEADERS", '{"X-Env": "1"}')
        monkeypatch.delenv("OPENAPI_MCP_BASE_URL", raising=False)
        monkeypatch.delenv("OPENAPI_MCP_DIALECT", raising=False)
        assert load_settings(_SPEC).headers == {"X-Env": "1"}

    def test_no_base_url(self):
        with pytest.raises(ConfigError):
            load_settings({}, environ={})

    def test_bad_dialect(self):
        with pytest.raises(ConfigError):
            load_settings(_SPEC, environ={"OPENAPI_MCP_DIALECT": "xml"})
