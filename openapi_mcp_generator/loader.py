"""Load an OpenAPI 3.x document and resolve its local $ref pointers.

Reads JSON or YAML from disk and hands the rest of the generator a
fully dereferenced, cycle-free document.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from .errors import SpecLoadError, UnsupportedVersionError

logger = logging.getLogger(__name__)


def load_spec(path: Path | str) -> dict[str, Any]:
    """Load, version-check and dereference the OpenAPI document at ``path``."""
    spec_file = Path(path)
    try:
        text = spec_file.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecLoadError(f"cannot read {spec_file}: {exc}") from exc

    try:
        if spec_file.suffix.lower() == ".json":
            raw = json.loads(text)
        else:
            # YAML is a superset of JSON, so this also covers extensionless files
            raw = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SpecLoadError(f"{spec_file} is not valid JSON/YAML: {exc}") from exc

    if not isinstance(raw, dict):
        raise SpecLoadError(f"{spec_file} does not contain an OpenAPI object")

    check_version(raw)
    return dereference(raw)


def check_version(spec: dict[str, Any]) -> str:
    """Return the document's OpenAPI version, rejecting anything but 3.x."""
    version = str(spec.get("openapi", ""))
    if not version.startswith("3."):
        found = version or ("swagger " + str(spec["swagger"]) if "swagger" in spec else "none")
        raise UnsupportedVersionError(f"only OpenAPI 3.x documents are supported (found: {found})")
    return version


def get_paths(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the document."""
    return spec.get("paths") or {}


def get_security_schemes(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract the named security scheme table from the document."""
    return (spec.get("components") or {}).get("securitySchemes") or {}


def resolve_ref(spec: dict[str, Any], ref: str) -> Any:
    """Resolve a local $ref pointer in the document."""
    if not ref.startswith("#/"):
        raise SpecLoadError(f"external reference {ref!r} is not supported")
    node: Any = spec
    for part in ref[2:].split("/"):
        part = part.replace("~1", "/").replace("~0", "~")
        try:
            node = node[int(part)] if isinstance(node, list) else node[part]
        except (KeyError, IndexError, ValueError, TypeError) as exc:
            raise SpecLoadError(f"unresolvable reference {ref!r}") from exc
    return node


def dereference(spec: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``spec`` with every local $ref inlined.

    A reference that points back into its own expansion is replaced by an
    empty schema so the result stays finite.
    """

    def walk(node: Any, stack: tuple[str, ...]) -> Any:
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str):
                if ref in stack:
                    logger.warning("Cyclic reference %s replaced by an empty schema", ref)
                    return {}
                target = walk(resolve_ref(spec, ref), stack + (ref,))
                siblings = {k: walk(v, stack) for k, v in node.items() if k != "$ref"}
                if siblings and isinstance(target, dict):
                    return {**target, **siblings}
                return target
            return {k: walk(v, stack) for k, v in node.items()}
        if isinstance(node, list):
            return [walk(item, stack) for item in node]
        return copy.copy(node)

    return walk(spec, ())
