"""Merge an operation's parameters and request body into one input schema.

Handles:
- Path-item level parameters, overridden per (name, in) by the operation
- Path/query/header/cookie parameters, schemas copied verbatim
- Parameters described with ``content`` instead of ``schema``
- Request body wrapped under a single ``requestBody`` property
- Content type preference: application/json > */*+json > first declared
- Name collisions (suffix or error policy), recorded for dispatch
- Path placeholders without a declared parameter
- OpenAPI 3.0 ``nullable`` rewritten into JSON Schema null types
- Metaschema check matching the document's OpenAPI version
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass
from typing import Any

import jsonschema

from .errors import InvalidSchemaError, ParameterCollisionError, UndeclaredPathParameterError
from .models import LOCATIONS, ExecutionParameter

logger = logging.getLogger(__name__)

BODY_PROPERTY = "requestBody"

COLLISION_POLICIES = ("suffix", "error")

# OpenAPI says header parameters with these names are ignored
_IGNORED_HEADERS = {"accept", "content-type", "authorization"}

_PLACEHOLDER = re.compile(r"\{([^{}/]+)\}")


@dataclass(frozen=True)
class NormalizedOperation:
    input_schema: dict[str, Any]
    execution_parameters: tuple[ExecutionParameter, ...]
    request_body_content_type: str | None = None


def path_placeholders(path: str) -> list[str]:
    """Names of the ``{param}`` placeholders in a path template, in order."""
    return _PLACEHOLDER.findall(path)


def schema_validator_class(openapi_version: str) -> type:
    """JSON Schema dialect used by a given OpenAPI version.

    3.0 schemas are a Draft 4 dialect (boolean exclusiveMinimum etc.);
    3.1 adopted Draft 2020-12.
    """
    if openapi_version.startswith("3.0"):
        return jsonschema.Draft4Validator
    return jsonschema.Draft202012Validator


_SUBSCHEMA_MAPS = ("properties", "patternProperties", "definitions")
_SUBSCHEMA_KEYS = ("items", "additionalProperties", "not", "allOf", "anyOf", "oneOf")


def convert_nullable(schema: Any) -> Any:
    """Rewrite OpenAPI 3.0 ``nullable: true`` as JSON Schema, recursively.

    ``{"type": "string", "nullable": true}`` becomes
    ``{"type": ["string", "null"]}``; a nullable schema without ``type``
    is wrapped as ``{"anyOf": [schema, {"type": "null"}]}``. A nullable
    ``enum`` also gains ``None``.
    """
    if isinstance(schema, list):
        return [convert_nullable(item) for item in schema]
    if not isinstance(schema, dict):
        return schema

    result: dict[str, Any] = {}
    for key, value in schema.items():
        if key in _SUBSCHEMA_MAPS and isinstance(value, dict):
            result[key] = {name: convert_nullable(sub) for name, sub in value.items()}
        elif key in _SUBSCHEMA_KEYS:
            result[key] = convert_nullable(value)
        else:
            result[key] = value

    if result.pop("nullable", False) is not True:
        return result

    schema_type = result.get("type")
    if schema_type is None:
        return {"anyOf": [result, {"type": "null"}]}
    if isinstance(schema_type, str):
        result["type"] = [schema_type, "null"]
    elif "null" not in schema_type:
        result["type"] = [*schema_type, "null"]
    if "enum" in result and None not in result["enum"]:
        result["enum"] = [*result["enum"], None]
    return result


def select_content_type(content: dict[str, Any]) -> str | None:
    """Pick the media type to send: JSON first, then any +json, then the first listed."""
    if not content:
        return None
    if "application/json" in content:
        return "application/json"
    for media_type in content:
        if media_type.split(";")[0].strip().endswith("+json"):
            return media_type
    return next(iter(content))


def merge_parameters(
    path_item: dict[str, Any] | None,
    operation: dict[str, Any],
) -> list[dict[str, Any]]:
    """Combine path-item and operation parameters; the operation wins on (name, in)."""
    merged: dict[tuple[str, str], dict[str, Any]] = {}
    for source in ((path_item or {}).get("parameters") or [], operation.get("parameters") or []):
        for param in source:
            if not isinstance(param, dict) or "name" not in param:
                continue
            merged[(param["name"], param.get("in", "query"))] = param
    return list(merged.values())


def _parameter_schema(param: dict[str, Any]) -> dict[str, Any]:
    """Copy a parameter's schema, taking it from ``content`` if needed."""
    if "schema" in param:
        schema = copy.deepcopy(param["schema"] or {})
    else:
        content = param.get("content") or {}
        media_type = select_content_type(content)
        schema = copy.deepcopy((content.get(media_type) or {}).get("schema") or {}) if media_type else {}

    description = param.get("description")
    if description and "description" not in schema:
        schema["description"] = description
    return schema


def _unique_name(
    name: str,
    location: str,
    taken: set[str],
    policy: str,
) -> str:
    if name not in taken:
        return name
    if policy == "error":
        raise ParameterCollisionError(name, location)

    candidate = f"{name}_{location}"
    counter = 2
    while candidate in taken:
        candidate = f"{name}_{location}_{counter}"
        counter += 1
    logger.debug("Renamed %s parameter %r to %r", location, name, candidate)
    return candidate


def normalize(
    operation: dict[str, Any],
    path: str,
    *,
    path_item: dict[str, Any] | None = None,
    collision_policy: str = "suffix",
    openapi_version: str = "3.0.3",
) -> NormalizedOperation:
    """Build the composite input schema for one operation.

    Returns the schema, the ordered execution parameters (where each
    property goes in the request) and the chosen request body content type.
    """
    if collision_policy not in COLLISION_POLICIES:
        raise ValueError(f"unknown collision policy {collision_policy!r}")

    params = merge_parameters(path_item, operation)

    declared_path = {p["name"] for p in params if p.get("in") == "path"}
    placeholders = path_placeholders(path)
    missing = [name for name in placeholders if name not in declared_path]
    if missing:
        raise UndeclaredPathParameterError(missing)
    for name in sorted(declared_path - set(placeholders)):
        logger.warning("%s: path parameter %r does not appear in the template", path, name)

    request_body = operation.get("requestBody") or {}
    content = request_body.get("content") or {}
    content_type = select_content_type(content)

    properties: dict[str, Any] = {}
    required: list[str] = []
    execution_parameters: list[ExecutionParameter] = []
    # The body wrapper name is reserved whenever there is a body
    taken: set[str] = {BODY_PROPERTY} if content_type else set()

    for param in params:
        location = param.get("in", "query")
        name = param["name"]
        if location not in LOCATIONS:
            logger.warning("%s: skipping parameter %r with unknown location %r", path, name, location)
            continue
        if location == "header" and name.lower() in _IGNORED_HEADERS:
            logger.debug("%s: ignoring reserved header parameter %r", path, name)
            continue

        arg_name = _unique_name(name, location, taken, collision_policy)
        taken.add(arg_name)

        properties[arg_name] = _parameter_schema(param)
        if location == "path" or param.get("required", False):
            required.append(arg_name)
        execution_parameters.append(ExecutionParameter(name, location, arg_name))

    if content_type:
        body_schema = copy.deepcopy((content.get(content_type) or {}).get("schema") or {})
        description = request_body.get("description")
        if description and "description" not in body_schema:
            body_schema["description"] = description
        properties[BODY_PROPERTY] = body_schema
        if request_body.get("required", False):
            required.append(BODY_PROPERTY)

    input_schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        input_schema["required"] = required
    if openapi_version.startswith("3.0"):
        input_schema = convert_nullable(input_schema)

    validator_cls = schema_validator_class(openapi_version)
    try:
        validator_cls.check_schema(input_schema)
    except jsonschema.SchemaError as exc:
        raise InvalidSchemaError(f"input schema is not valid JSON Schema: {exc.message}") from exc

    return NormalizedOperation(input_schema, tuple(execution_parameters), content_type)
