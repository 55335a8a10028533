"""Entry point: python -m openapi_mcp_generator SPEC -o OUTPUT

Reads an OpenAPI 3.x document, writes a generated MCP server module.
"""

from __future__ import annotations

from .cli import main

if __name__ == "__main__":
    main()
