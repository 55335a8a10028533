"""Generate the credential-injection code for the server.

The emitted fragment carries the scheme table as data and a single
``apply_auth`` routine that walks a tool's OR-list of AND-sets, so the
same structure drives both resolution and injection.
"""

from __future__ import annotations

from .models import SecurityScheme
from .rendering import render


def generate_auth_code(schemes: dict[str, SecurityScheme]) -> str:
    """Render the ``apply_auth`` fragment for ``schemes``."""
    table = {scheme_id: scheme.to_dict() for scheme_id, scheme in schemes.items()}
    return render("auth.py.j2", schemes=table)


def credential_variables(schemes: dict[str, SecurityScheme]) -> list[str]:
    """Every environment variable the generated server may read for auth."""
    names: list[str] = []
    for scheme in schemes.values():
        for var in scheme.env_vars:
            if var not in names:
                names.append(var)
    return names
