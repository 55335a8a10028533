"""Generate the per-call dispatch routine for the server.

The emitted ``execute_api_tool`` validates arguments with a precompiled
jsonschema validator (no generated code is evaluated), builds the HTTP
request from the tool's execution parameters, applies credentials, and
classifies failures as validation / auth / network / upstream errors.
"""

from __future__ import annotations

from .rendering import render

# Part of the generated server's observable error format
RESPONSE_BODY_MAX_LENGTH = 200
TRUNCATION_MARKER = "..."

_VALIDATOR_CLASSES = {
    "draft4": "Draft4Validator",
    "draft2020-12": "Draft202012Validator",
}


def schema_dialect(openapi_version: str) -> str:
    """Name of the JSON Schema dialect used by an OpenAPI version."""
    return "draft4" if openapi_version.startswith("3.0") else "draft2020-12"


def generate_dispatch_code(*, timeout: float = 30.0, dialect: str = "draft4") -> str:
    """Render the ``execute_api_tool`` fragment."""
    if timeout <= 0:
        raise ValueError("timeout must be positive")
    if dialect not in _VALIDATOR_CLASSES:
        raise ValueError(f"unknown schema dialect {dialect!r}")
    return render(
        "dispatch.py.j2",
        timeout=timeout,
        max_body_length=RESPONSE_BODY_MAX_LENGTH,
        truncation_marker=TRUNCATION_MARKER,
        validator_class=_VALIDATOR_CLASSES[dialect],
    )
