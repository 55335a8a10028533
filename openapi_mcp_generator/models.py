"""Normalized, read-only description of the tools a server exposes.

Everything here is produced once by the extractor and only read by the
code generators.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

LOCATIONS = ("path", "query", "header", "cookie")

# Canonical traversal order for operations within a path item
HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

TRANSPORTS = ("stdio", "streamable-http", "web")
DEFAULT_TRANSPORT = "stdio"


def env_suffix(scheme_id: str) -> str:
    """Turn a scheme identifier into an environment variable suffix."""
    return re.sub(r"[^A-Za-z0-9]", "_", scheme_id).upper()


@dataclass(frozen=True)
class ExecutionParameter:
    """Where one input property goes in the outgoing request."""

    name: str
    location: str
    arg_name: str = ""

    def __post_init__(self):
        if not self.arg_name:
            object.__setattr__(self, "arg_name", self.name)

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "in": self.location, "argName": self.arg_name}


@dataclass(frozen=True)
class SecurityScheme:
    id: str
    type: str
    location: str | None = None
    param_name: str | None = None
    http_scheme: str | None = None

    @property
    def env_vars(self) -> tuple[str, ...]:
        """Environment variables that must all be set to use this scheme."""
        suffix = env_suffix(self.id)
        if self.type == "apiKey":
            return (f"API_KEY_{suffix}",)
        if self.type == "http" and self.http_scheme == "basic":
            return (f"BASIC_USERNAME_{suffix}", f"BASIC_PASSWORD_{suffix}")
        if self.type == "http":
            return (f"BEARER_TOKEN_{suffix}",)
        if self.type == "oauth2":
            return (f"OAUTH_TOKEN_{suffix}",)
        return (f"OPENID_TOKEN_{suffix}",)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "in": self.location,
            "name": self.param_name,
            "scheme": self.http_scheme,
            "envVars": list(self.env_vars),
        }


@dataclass(frozen=True)
class SchemeReference:
    scheme_id: str
    scopes: tuple[str, ...] = ()


@dataclass(frozen=True)
class SecurityRequirement:
    """One way to authenticate: every referenced scheme must be satisfied.

    An empty requirement is the explicit "anonymous access" alternative.
    """

    schemes: tuple[SchemeReference, ...] = ()

    @property
    def is_anonymous(self) -> bool:
        return not self.schemes

    @property
    def scheme_ids(self) -> list[str]:
        return [ref.scheme_id for ref in self.schemes]


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: dict[str, Any]
    method: str
    path_template: str
    execution_parameters: tuple[ExecutionParameter, ...] = ()
    request_body_content_type: str | None = None
    security: tuple[SecurityRequirement, ...] = ()
    security_unresolved: bool = False
    operation_id: str | None = None
    tags: tuple[str, ...] = ()
    deprecated: bool = False

    @property
    def path_parameters(self) -> list[ExecutionParameter]:
        return [p for p in self.execution_parameters if p.location == "path"]

    def to_dict(self) -> dict[str, Any]:
        """Mapping emitted into the generated server's definition table."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
            "method": self.method,
            "pathTemplate": self.path_template,
            "executionParameters": [p.to_dict() for p in self.execution_parameters],
            "requestBodyContentType": self.request_body_content_type,
            "securityRequirements": [req.scheme_ids for req in self.security],
        }


@dataclass
class GeneratorOptions:
    """Settings for one generation run."""

    server_name: str | None = None
    server_version: str | None = None
    base_url: str | None = None
    transport: str = DEFAULT_TRANSPORT
    port: int = 3000
    timeout: float = 30.0
    collision_policy: str = "suffix"
