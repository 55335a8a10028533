"""Build the template context from a loaded OpenAPI document.

Runs the extractor, collects security schemes, works out the server
name/version and base URL, and assembles the context dict consumed by
codegen.
"""

from __future__ import annotations

import re
from typing import Any

from .codegen import select_transport
from .dispatch_codegen import schema_dialect
from .errors import Diagnostics
from .extractor import extract_tools
from .models import GeneratorOptions
from .security import collect_schemes

DEFAULT_SERVER_NAME = "openapi-mcp-server"
DEFAULT_SERVER_VERSION = "1.0.0"

_SERVER_VARIABLE = re.compile(r"\{([^{}]+)\}")


def _single_line(text: str) -> str:
    return " ".join(str(text).split())


def determine_base_url(
    spec: dict[str, Any],
    override: str | None = None,
    diagnostics: Diagnostics | None = None,
) -> str:
    """Pick the API origin: explicit override > first server URL > empty.

    Server variables are replaced by their declared defaults. An empty or
    relative result is a warning, not an error.
    """
    if override:
        return override.rstrip("/")

    url = ""
    servers = spec.get("servers") or []
    if servers and isinstance(servers[0], dict) and servers[0].get("url"):
        server = servers[0]
        variables = server.get("variables") or {}

        def substitute(match: re.Match) -> str:
            variable = variables.get(match.group(1)) or {}
            return str(variable.get("default", match.group(0)))

        url = _SERVER_VARIABLE.sub(substitute, server["url"]).rstrip("/")

    if diagnostics is not None:
        if not url:
            diagnostics.warn("servers", "no base URL declared; operation paths will be relative")
        elif "://" not in url:
            diagnostics.warn("servers", f"base URL {url!r} is relative")
    return url


def build_context(
    spec: dict[str, Any],
    options: GeneratorOptions | None = None,
    diagnostics: Diagnostics | None = None,
) -> dict[str, Any]:
    """Build the full template context from the OpenAPI spec."""
    options = options or GeneratorOptions()
    if diagnostics is None:
        diagnostics = Diagnostics()

    info = spec.get("info") or {}
    schemes = collect_schemes(spec, diagnostics)
    tools = extract_tools(
        spec,
        diagnostics=diagnostics,
        collision_policy=options.collision_policy,
        schemes=schemes,
    )

    return {
        "tools": tools,
        "schemes": schemes,
        "tool_count": len(tools),
        "server_name": _single_line(options.server_name or info.get("title") or DEFAULT_SERVER_NAME),
        "server_version": _single_line(options.server_version or info.get("version") or DEFAULT_SERVER_VERSION),
        "base_url": determine_base_url(spec, options.base_url, diagnostics),
        "transport": select_transport(options.transport),
        "port": options.port,
        "timeout": options.timeout,
        "dialect": schema_dialect(str(spec.get("openapi", "3.0.3"))),
        "diagnostics": diagnostics,
    }
