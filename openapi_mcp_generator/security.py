"""Classify security schemes and resolve per-operation requirements.

An operation's ``security`` array is a list of alternatives (OR); each
entry maps scheme names to scopes, and all of them must hold (AND).
That structure is kept as data (a list of SecurityRequirement) so the
generated credential injector can walk it in declared order.

OAuth2 and OpenID Connect only ever reach the HTTP layer as bearer
tokens supplied from outside; flows and scopes are recorded, not checked.
"""

from __future__ import annotations

from typing import Any, Iterable

from .errors import Diagnostics, UnknownSecuritySchemeError, UnsupportedSchemeError
from .loader import get_security_schemes
from .models import SchemeReference, SecurityRequirement, SecurityScheme

_API_KEY_LOCATIONS = {"header", "query", "cookie"}
_HTTP_SCHEMES = {"basic", "bearer"}


def classify_scheme(scheme_id: str, raw: dict[str, Any]) -> SecurityScheme:
    """Build a SecurityScheme from a ``components.securitySchemes`` entry."""
    scheme_type = raw.get("type")

    if scheme_type == "apiKey":
        location = raw.get("in")
        name = raw.get("name")
        if location not in _API_KEY_LOCATIONS or not name:
            raise UnsupportedSchemeError(
                f"apiKey scheme {scheme_id!r} needs 'in' (header/query/cookie) and 'name'"
            )
        return SecurityScheme(scheme_id, "apiKey", location=location, param_name=name)

    if scheme_type == "http":
        http_scheme = str(raw.get("scheme", "")).lower()
        if http_scheme not in _HTTP_SCHEMES:
            raise UnsupportedSchemeError(
                f"http scheme {scheme_id!r} uses unsupported auth scheme {raw.get('scheme')!r}"
            )
        return SecurityScheme(scheme_id, "http", http_scheme=http_scheme)

    if scheme_type in ("oauth2", "openIdConnect"):
        return SecurityScheme(scheme_id, scheme_type)

    raise UnsupportedSchemeError(f"scheme {scheme_id!r} has unsupported type {scheme_type!r}")


def collect_schemes(
    spec: dict[str, Any],
    diagnostics: Diagnostics | None = None,
) -> dict[str, SecurityScheme]:
    """Classify every declared scheme; unsupported ones are left out and warned about."""
    schemes: dict[str, SecurityScheme] = {}
    for scheme_id, raw in get_security_schemes(spec).items():
        try:
            schemes[scheme_id] = classify_scheme(scheme_id, raw or {})
        except UnsupportedSchemeError as exc:
            if diagnostics is not None:
                diagnostics.warn(f"securitySchemes.{scheme_id}", str(exc))
    return schemes


def effective_security(
    operation: dict[str, Any],
    spec: dict[str, Any],
) -> list[dict[str, list[str]]] | None:
    """Return the security array that applies to ``operation``.

    An explicit ``security: []`` on the operation means no auth and is
    returned as-is; only a missing key falls back to the document default.
    ``None`` means neither level specifies anything.
    """
    if "security" in operation:
        return operation["security"] or []
    if "security" in spec:
        return spec["security"] or []
    return None


def resolve(
    schemes_by_name: dict[str, SecurityScheme],
    operation_security: list[dict[str, list[str]]] | None,
    declared: Iterable[str] = (),
) -> list[SecurityRequirement]:
    """Turn a security array into SecurityRequirements, preserving OR order.

    Raises UnsupportedSchemeError if an alternative names a scheme that is
    in ``declared`` but was left out of ``schemes_by_name`` by
    collect_schemes, and UnknownSecuritySchemeError for any other name
    missing from ``schemes_by_name``.
    """
    declared = set(declared)
    requirements: list[SecurityRequirement] = []
    for entry in operation_security or []:
        refs = []
        for scheme_id, scopes in (entry or {}).items():
            if scheme_id not in schemes_by_name:
                if scheme_id in declared:
                    raise UnsupportedSchemeError(
                        f"security scheme {scheme_id!r} is declared but its type is not supported"
                    )
                raise UnknownSecuritySchemeError(scheme_id)
            refs.append(SchemeReference(scheme_id, tuple(scopes or ())))
        requirements.append(SecurityRequirement(tuple(refs)))
    return requirements


def referenced_schemes(
    requirements: list[SecurityRequirement],
    schemes_by_name: dict[str, SecurityScheme],
) -> dict[str, SecurityScheme]:
    """Schemes used by ``requirements``, in first-use order."""
    used: dict[str, SecurityScheme] = {}
    for requirement in requirements:
        for scheme_id in requirement.scheme_ids:
            used.setdefault(scheme_id, schemes_by_name[scheme_id])
    return used
