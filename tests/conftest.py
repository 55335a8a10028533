"""Shared fixtures: sample documents and a loader for generated servers.

Generated server modules are rendered into a temp directory and imported
under a unique module name, so each test gets a fresh module with its
own TOOL_DEFINITIONS and environment-derived settings.
"""

from __future__ import annotations

import copy
import importlib.util
import itertools
import sys
from typing import Any, Callable

import httpx
import pytest

from openapi_mcp_generator.codegen import render_server
from openapi_mcp_generator.context_builder import build_context
from openapi_mcp_generator.models import GeneratorOptions

FIXED_TIMESTAMP = "2024-01-01T00:00:00+00:00"
BASE_URL = "https://api.example.com/v1"


# ---------------------------------------------------------------------------
# Sample documents
# ---------------------------------------------------------------------------

ITEMS_SPEC: dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Items API", "version": "2.1.0"},
    "servers": [{"url": BASE_URL}],
    "components": {
        "securitySchemes": {
            "ApiKeyAuth": {"type": "apiKey", "in": "header", "name": "X-API-Key"},
        },
    },
    "paths": {
        "/items/{id}": {
            "get": {
                "summary": "Fetch one item",
                "parameters": [
                    {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}},
                ],
                "security": [{"ApiKeyAuth": []}],
                "responses": {"200": {"description": "OK"}},
            },
        },
    },
}

STORE_SPEC: dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Store API", "version": "1.0.0"},
    "servers": [{"url": BASE_URL}],
    "components": {
        "securitySchemes": {
            "HeaderKey": {"type": "apiKey", "in": "header", "name": "X-Key"},
            "QueryKey": {"type": "apiKey", "in": "query", "name": "api_key"},
            "CookieKey": {"type": "apiKey", "in": "cookie", "name": "auth"},
            "Basic": {"type": "http", "scheme": "basic"},
            "Bearer": {"type": "http", "scheme": "bearer"},
            "OAuth": {
                "type": "oauth2",
                "flows": {"clientCredentials": {"tokenUrl": "https://auth.example.com/token", "scopes": {}}},
            },
        },
    },
    "paths": {
        "/stores/{storeId}/orders": {
            "post": {
                "operationId": "createOrder",
                "parameters": [
                    {"name": "storeId", "in": "path", "required": True, "schema": {"type": "integer"}},
                    {"name": "verbose", "in": "query", "schema": {"type": "boolean"}},
                    {"name": "tags", "in": "query", "schema": {"type": "array", "items": {"type": "string"}}},
                    {"name": "X-Trace-Id", "in": "header", "schema": {"type": "string"}},
                    {"name": "session", "in": "cookie", "schema": {"type": "string"}},
                ],
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/json": {
                            "schema": {
                                "type": "object",
                                "properties": {
                                    "sku": {"type": "string"},
                                    "quantity": {"type": "integer", "minimum": 1},
                                },
                                "required": ["sku"],
                            },
                        },
                    },
                },
                "security": [],
                "responses": {"201": {"description": "Created"}},
            },
        },
        "/reports/{id}": {
            "get": {
                "operationId": "getReport",
                "parameters": [
                    {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}},
                    {"name": "id", "in": "query", "schema": {"type": "string"}},
                ],
                "security": [{"HeaderKey": []}, {"Bearer": []}],
                "responses": {"200": {"description": "OK"}},
            },
        },
        "/secure/basic": {
            "get": {
                "operationId": "basicOnly",
                "security": [{"Basic": []}],
                "responses": {"200": {"description": "OK"}},
            },
        },
        "/secure/combined": {
            "get": {
                "operationId": "queryAndCookie",
                "security": [{"QueryKey": [], "CookieKey": []}],
                "responses": {"200": {"description": "OK"}},
            },
        },
        "/secure/optional": {
            "get": {
                "operationId": "optionalAuth",
                "security": [{"OAuth": ["read"]}, {}],
                "responses": {"200": {"description": "OK"}},
            },
        },
        "/forms": {
            "post": {
                "operationId": "submitForm",
                "requestBody": {
                    "content": {
                        "application/x-www-form-urlencoded": {
                            "schema": {"type": "object", "properties": {"name": {"type": "string"}}},
                        },
                    },
                },
                "security": [],
                "responses": {"200": {"description": "OK"}},
            },
        },
    },
}


@pytest.fixture
def items_spec() -> dict[str, Any]:
    return copy.deepcopy(ITEMS_SPEC)


@pytest.fixture
def store_spec() -> dict[str, Any]:
    return copy.deepcopy(STORE_SPEC)


# ---------------------------------------------------------------------------
# Generated server loader
# ---------------------------------------------------------------------------

_module_ids = itertools.count()


@pytest.fixture
def load_server(tmp_path, monkeypatch) -> Callable[..., Any]:
    """Return a callable that generates, writes and imports a server module.

    Usage::

        server = load_server(spec, transport="stdio")
    """
    # Module-level settings are read from the environment at import time
    for var in ("API_BASE_URL", "API_TIMEOUT_SECONDS", "TOOLS_FOR_CLIENT", "REPORTING_TOOLS"):
        monkeypatch.delenv(var, raising=False)

    def _load(spec: dict[str, Any], **options: Any):
        context = build_context(copy.deepcopy(spec), GeneratorOptions(**options))
        source = render_server(context, generated_at=FIXED_TIMESTAMP)
        name = f"generated_server_{next(_module_ids)}"
        path = tmp_path / f"{name}.py"
        path.write_text(source, encoding="utf-8")

        module_spec = importlib.util.spec_from_file_location(name, path)
        module = importlib.util.module_from_spec(module_spec)
        sys.modules[name] = module
        module_spec.loader.exec_module(module)
        return module

    return _load


# ---------------------------------------------------------------------------
# Mock upstream API
# ---------------------------------------------------------------------------

class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


@pytest.fixture
def upstream():
    """Build an AsyncClient backed by a recording mock transport.

    Usage::

        client, transport = upstream(lambda request: httpx.Response(200, json={}))
    """
    def _make(handler: Callable[[httpx.Request], httpx.Response]):
        transport = RecordingTransport(handler)
        return httpx.AsyncClient(transport=transport), transport

    return _make
