"""Assemble the server source and write it to disk.

Takes the context from context_builder, renders the credential and
dispatch fragments plus one transport block, and stitches them into a
single self-contained server module.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .auth_codegen import credential_variables, generate_auth_code
from .dispatch_codegen import generate_dispatch_code
from .models import DEFAULT_TRANSPORT, TRANSPORTS, SecurityScheme, ToolDefinition
from .rendering import render
from .security import referenced_schemes

logger = logging.getLogger(__name__)

_TRANSPORT_TEMPLATES = {
    "stdio": "transports/stdio.py.j2",
    "streamable-http": "transports/streamable_http.py.j2",
    "web": "transports/web.py.j2",
}


def select_transport(choice: str | None) -> str:
    """Normalize a transport choice; anything unknown falls back to stdio."""
    if choice in TRANSPORTS:
        return choice
    if choice:
        logger.warning("Unknown transport %r, using %s", choice, DEFAULT_TRANSPORT)
    return DEFAULT_TRANSPORT


def assemble(
    tools: list[ToolDefinition],
    schemes: dict[str, SecurityScheme],
    transport: str | None = None,
    *,
    server_name: str = "openapi-mcp-server",
    server_version: str = "1.0.0",
    base_url: str = "",
    port: int = 3000,
    timeout: float = 30.0,
    dialect: str = "draft4",
    generated_at: str | None = None,
) -> str:
    """Return the complete server module source.

    Output is byte-identical for identical inputs when ``generated_at``
    is fixed; by default it is the current UTC time.
    """
    transport = select_transport(transport)
    if generated_at is None:
        generated_at = datetime.now(timezone.utc).isoformat(timespec="seconds")

    transport_code = render(_TRANSPORT_TEMPLATES[transport], port=port)
    used = referenced_schemes([req for tool in tools for req in tool.security], schemes)

    return render(
        "server.py.j2",
        tools=[tool.to_dict() for tool in tools],
        tool_count=len(tools),
        server_name=server_name,
        server_version=server_version,
        base_url=base_url,
        generated_at=generated_at,
        transport=transport,
        credential_vars=credential_variables(used),
        auth_code=generate_auth_code(schemes).rstrip("\n"),
        dispatch_code=generate_dispatch_code(timeout=timeout, dialect=dialect).rstrip("\n"),
        transport_code=transport_code.rstrip("\n"),
    )


def render_server(context: dict[str, Any], generated_at: str | None = None) -> str:
    """Assemble the server from a context built by ``build_context``."""
    return assemble(
        context["tools"],
        context["schemes"],
        context["transport"],
        server_name=context["server_name"],
        server_version=context["server_version"],
        base_url=context["base_url"],
        port=context["port"],
        timeout=context["timeout"],
        dialect=context["dialect"],
        generated_at=generated_at,
    )


def generate(context: dict[str, Any], output_path: Path | str) -> Path:
    """Render the server and write it to ``output_path``."""
    output = render_server(context)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(output, encoding="utf-8")

    print(f"Generated {output_path} ({context['tool_count']} tools)")
    return output_path
