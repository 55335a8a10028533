"""Exceptions and per-run diagnostics for the generator.

Two families:
  - GenerationError: fatal, aborts the whole run (bad input document).
  - ExtractionError: scoped to one operation; the run continues and the
    problem is recorded as a Diagnostic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class GeneratorError(Exception):
    """Base class for every error raised by the generator."""


class GenerationError(GeneratorError):
    """The input cannot be turned into a server at all."""


class SpecLoadError(GenerationError):
    """The document is unreadable, malformed, or has an unresolvable $ref."""


class UnsupportedVersionError(GenerationError):
    """The document is not OpenAPI 3.x."""


class ExtractionError(GeneratorError):
    """A single operation could not be (fully) extracted."""


class UnknownSecuritySchemeError(ExtractionError):
    def __init__(self, scheme_id: str):
        super().__init__(f"security scheme {scheme_id!r} is not declared in components.securitySchemes")
        self.scheme_id = scheme_id


class UnsupportedSchemeError(ExtractionError):
    """A declared security scheme cannot be expressed as request credentials."""


class UndeclaredPathParameterError(ExtractionError):
    def __init__(self, names: list[str]):
        joined = ", ".join(names)
        super().__init__(f"path template uses undeclared parameter(s): {joined}")
        self.names = names


class ParameterCollisionError(ExtractionError):
    def __init__(self, name: str, location: str):
        super().__init__(f"parameter {name!r} ({location}) collides with an existing input property")
        self.name = name
        self.location = location


class InvalidSchemaError(ExtractionError):
    """The merged input schema is not a valid JSON Schema."""


@dataclass(frozen=True)
class Diagnostic:
    operation: str
    message: str
    level: str = "warning"

    def __str__(self) -> str:
        return f"[{self.level}] {self.operation}: {self.message}"


class Diagnostics(list):
    """Ordered collection of diagnostics recorded during one run."""

    def warn(self, operation: str, message: str) -> Diagnostic:
        return self._add(Diagnostic(operation, message, "warning"))

    def error(self, operation: str, message: str) -> Diagnostic:
        return self._add(Diagnostic(operation, message, "error"))

    def _add(self, diagnostic: Diagnostic) -> Diagnostic:
        self.append(diagnostic)
        logger.info("%s", diagnostic)
        return diagnostic

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self if d.level == "error"]
