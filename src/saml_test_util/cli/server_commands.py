"""CLI commands for the admin test server and its authentication sources."""

import json
import logging
from typing import Optional

import click

from ..config.schema import Config
from ..web.app import run_server


logger = logging.getLogger(__name__)


@click.command(name="serve")
@click.option("--host", type=str, help="Host address (overrides config file)")
@click.option("--port", type=int, help="Server port (overrides config file)")
@click.option("--debug", is_flag=True, help="Enable debug mode")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int], debug: bool) -> None:
    """Start the admin authentication test server.

    The server provides:
    - /health - Health check endpoint
    - <base_path>/test - List of authentication sources
    - <base_path>/test/<source> - Login and attribute page for one source
    - /login/<source> - Login form for password sources

    Example:
        saml-test-util serve --port 9000
    """
    config_obj: Config = ctx.obj["config"]
    host = host or config_obj.server.host
    port = port or config_obj.server.port

    click.echo(f"Starting SAML test server on http://{host}:{port}")
    click.echo(f"  Test pages: http://{host}:{port}{config_obj.server.base_path}/test")
    if config_obj.admin.protected:
        click.echo(f"  Admin login via auth source '{config_obj.admin.auth_source}'")
    else:
        click.echo(click.style("  Admin pages are not protected", fg="yellow"))

    logger.info(f"Starting server from CLI on {host}:{port}")
    try:
        run_server(host=host, port=port, config=config_obj, debug=debug)
    except OSError as e:
        click.echo(f"Error: Could not start server on port {port}: {e}", err=True)
        raise click.exceptions.Exit(1)


@click.group(name="sources")
def sources_group() -> None:
    """Inspect configured authentication sources."""
    pass


@sources_group.command(name="list")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_sources(ctx: click.Context, output_json: bool) -> None:
    """List configured authentication sources.

    Example:
        saml-test-util sources list --json
    """
    config_obj: Config = ctx.obj["config"]
    sources = [
        {
            "id": source_id,
            "type": source.type,
            "attributes": sorted(source.attributes),
            "admin": source_id == config_obj.admin.auth_source,
        }
        for source_id, source in config_obj.auth_sources.items()
    ]

    if output_json:
        click.echo(json.dumps(sources, indent=2))
        return

    if not sources:
        click.echo("No authentication sources configured")
        return

    click.echo(f"Authentication sources ({len(sources)}):")
    for source in sources:
        marker = " [admin]" if source["admin"] else ""
        click.echo(f"  {source['id']} ({source['type']}){marker}")
        if source["attributes"]:
            click.echo(f"    Attributes: {', '.join(source['attributes'])}")
