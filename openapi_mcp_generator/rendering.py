"""Jinja2 environment shared by the code generators."""

from __future__ import annotations

import pprint
from functools import lru_cache
from pathlib import Path
from typing import Any

import jinja2

TEMPLATE_DIR = Path(__file__).parent / "templates"


def pyrepr(value: Any) -> str:
    """Render ``value`` as a Python literal, keeping dict insertion order."""
    return pprint.pformat(value, indent=1, width=100, sort_dicts=False)


@lru_cache(maxsize=1)
def environment() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )
    env.filters["pyrepr"] = pyrepr
    return env


def render(template_name: str, **context: Any) -> str:
    return environment().get_template(template_name).render(**context)
