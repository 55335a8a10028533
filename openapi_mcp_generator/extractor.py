"""Walk every operation in a document and emit one ToolDefinition each.

Failures are per operation: an operation that cannot be normalized is
skipped and a diagnostic is recorded, so the rest of the document still
generates.
"""

from __future__ import annotations

import logging
from typing import Any

from .errors import Diagnostics, ExtractionError, UnknownSecuritySchemeError, UnsupportedSchemeError
from .loader import get_paths, get_security_schemes
from .models import HTTP_METHODS, SecurityScheme, ToolDefinition
from .naming import choose_tool_name
from .schema_parser import normalize
from .security import collect_schemes, effective_security, resolve

logger = logging.getLogger(__name__)


def make_description(method: str, path: str, operation: dict[str, Any]) -> str:
    """Tool description: summary, else description, else a placeholder."""
    for key in ("summary", "description"):
        text = (operation.get(key) or "").strip()
        if text:
            return text
    return f"Executes {method.upper()} {path}"


def iter_operations(spec: dict[str, Any]):
    """Yield (path, method, path_item, operation) in traversal order.

    Paths keep their declaration order; methods follow HTTP_METHODS.
    """
    for path, path_item in get_paths(spec).items():
        if not isinstance(path_item, dict):
            continue
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if isinstance(operation, dict):
                yield path, method, path_item, operation


def extract_tools(
    spec: dict[str, Any],
    *,
    diagnostics: Diagnostics | None = None,
    collision_policy: str = "suffix",
    schemes: dict[str, SecurityScheme] | None = None,
) -> list[ToolDefinition]:
    """Extract a ToolDefinition for every operation in ``spec``."""
    if diagnostics is None:
        diagnostics = Diagnostics()
    if schemes is None:
        schemes = collect_schemes(spec, diagnostics)
    declared = set(get_security_schemes(spec))
    openapi_version = str(spec.get("openapi", "3.0.3"))

    tools: list[ToolDefinition] = []
    taken: set[str] = set()

    for path, method, path_item, operation in iter_operations(spec):
        label = f"{method.upper()} {path}"

        if operation.get("x-mcp-ignore") is True:
            logger.info("Skipping %s (x-mcp-ignore)", label)
            continue

        try:
            normalized = normalize(
                operation,
                path,
                path_item=path_item,
                collision_policy=collision_policy,
                openapi_version=openapi_version,
            )
        except ExtractionError as exc:
            diagnostics.error(label, f"skipped: {exc}")
            continue

        security_unresolved = False
        try:
            requirements = resolve(schemes, effective_security(operation, spec), declared)
        except (UnknownSecuritySchemeError, UnsupportedSchemeError) as exc:
            diagnostics.warn(label, f"{exc}; tool emitted without authentication")
            requirements = []
            security_unresolved = True

        name = choose_tool_name(method, path, operation.get("operationId"), taken)
        taken.add(name)

        tools.append(ToolDefinition(
            name=name,
            description=make_description(method, path, operation),
            input_schema=normalized.input_schema,
            method=method.upper(),
            path_template=path,
            execution_parameters=normalized.execution_parameters,
            request_body_content_type=normalized.request_body_content_type,
            security=tuple(requirements),
            security_unresolved=security_unresolved,
            operation_id=operation.get("operationId"),
            tags=tuple(operation.get("tags") or ()),
            deprecated=bool(operation.get("deprecated", False)),
        ))

    logger.debug("Extracted %d tools", len(tools))
    return tools
