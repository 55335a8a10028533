"""Command-line entry point: openapi-mcp-generator SPEC -o OUTPUT."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from .codegen import generate
from .context_builder import build_context
from .errors import Diagnostics, GenerationError
from .loader import load_spec
from .models import TRANSPORTS, GeneratorOptions
from .schema_parser import COLLISION_POLICIES


@click.command()
@click.argument("spec_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(dir_okay=False, path_type=Path), help="Where to write the generated server module.")
@click.option("--server-name", default=None, help="Server name (default: info.title).")
@click.option("--server-version", default=None, help="Server version (default: info.version).")
@click.option("--base-url", default=None, help="API origin, overriding the document's servers list.")
@click.option("--transport", default="stdio", type=click.Choice(TRANSPORTS), help="Transport the server starts with.")
@click.option("--port", default=3000, show_default=True, type=int, help="Port for the HTTP transports.")
@click.option("--timeout", default=30.0, show_default=True, type=click.FloatRange(min=0, min_open=True), help="Outbound HTTP timeout in seconds.")
@click.option("--collision-policy", default="suffix", show_default=True, type=click.Choice(COLLISION_POLICIES), help="How to handle input properties with the same name.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(
    spec_path: Path,
    output: Path,
    server_name: str | None,
    server_version: str | None,
    base_url: str | None,
    transport: str,
    port: int,
    timeout: float,
    collision_policy: str,
    verbose: bool,
):
    """Generate an MCP server from an OpenAPI 3.x document."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    options = GeneratorOptions(
        server_name=server_name,
        server_version=server_version,
        base_url=base_url,
        transport=transport,
        port=port,
        timeout=timeout,
        collision_policy=collision_policy,
    )

    diagnostics = Diagnostics()
    try:
        spec = load_spec(spec_path)
        context = build_context(spec, options, diagnostics)
    except GenerationError as exc:
        raise click.ClickException(str(exc)) from exc

    generate(context, output)

    if diagnostics:
        click.echo(f"{len(diagnostics)} diagnostic(s):", err=True)
        for diagnostic in diagnostics:
            click.echo(f"  {diagnostic}", err=True)
