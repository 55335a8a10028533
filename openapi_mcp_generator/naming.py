"""Derive MCP tool names from operations.

Tool names must match ``^[A-Za-z0-9_-]{1,64}$``.

Pattern when no usable operationId exists: {method}{Segment...}
  - literal segments      -> PascalCase words
  - {param} segments      -> By{Param}

Examples:
  GET    /items/{id}                -> getItemsById
  POST   /items                     -> postItems
  GET    /user-profiles/{user_id}   -> getUserProfilesByUserId
  DELETE /stores/{storeId}/orders   -> deleteStoresByStoreIdOrders
  GET    /                          -> getRoot
"""

from __future__ import annotations

import re

MAX_NAME_LENGTH = 64


def _pascal(text: str) -> str:
    """Split on anything non-alphanumeric and capitalize each word."""
    words = [w for w in re.split(r"[^A-Za-z0-9]+", text) if w]
    return "".join(w[0].upper() + w[1:] for w in words)


def slugify(operation_id: str) -> str:
    """Make an operationId safe for use as a tool name.

    Returns an empty string when nothing usable is left.
    """
    name = re.sub(r"[^A-Za-z0-9_-]", "_", operation_id)
    name = re.sub(r"_+", "_", name)
    name = name.strip("_-")
    return name[:MAX_NAME_LENGTH]


def build_tool_name(method: str, path: str) -> str:
    """Build a tool name from HTTP method and path."""
    parts = []
    for segment in path.split("/"):
        if not segment:
            continue
        if segment.startswith("{") and segment.endswith("}"):
            parts.append("By" + _pascal(segment[1:-1]))
        else:
            parts.append(_pascal(segment))

    suffix = "".join(parts) or "Root"
    return (method.lower() + suffix)[:MAX_NAME_LENGTH]


def unique_name(base: str, taken: set[str]) -> str:
    """Append _2, _3, ... to ``base`` until it is not in ``taken``."""
    if base not in taken:
        return base
    counter = 2
    while True:
        tail = f"_{counter}"
        candidate = base[: MAX_NAME_LENGTH - len(tail)] + tail
        if candidate not in taken:
            return candidate
        counter += 1


def choose_tool_name(
    method: str,
    path: str,
    operation_id: str | None,
    taken: set[str],
) -> str:
    """Pick the tool name for one operation given the names already used.

    The operationId is preferred if it slugifies to something unused;
    otherwise the method+path name is used, suffixed if it collides.
    """
    if operation_id:
        slug = slugify(str(operation_id))
        if slug and slug not in taken:
            return slug
    return unique_name(build_tool_name(method, path), taken)
