"""Main CLI entry point for SAML Test Utility.

This module provides the main Click command group for the saml-test-util CLI.
"""

from pathlib import Path
from typing import Optional

import click

from saml_test_util import __version__
from saml_test_util.cli.server_commands import serve, sources_group
from saml_test_util.config import load_config
from saml_test_util.logging_audit import configure_logging
from saml_test_util.utils.exceptions import ConfigurationError


@click.group()
@click.version_option(version=__version__, prog_name="saml-test-util")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: ./config/config.json)",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging (DEBUG level)")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to log file (overrides config file)",
)
@click.option(
    "--redact-attributes",
    is_flag=True,
    help="Redact identity values (emails, NameIDs) from logs",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: bool,
    log_file: Optional[Path],
    redact_attributes: bool,
) -> None:
    """SAML Test Utility - Admin pages for testing authentication sources.

    Common usage:

        # Start the test server
        saml-test-util serve

        # List configured authentication sources
        saml-test-util sources list

        # Use custom configuration file
        saml-test-util --config custom/config.json serve

    Use --help with any command for more information.
    """
    # Ensure context object exists for subcommands
    ctx.ensure_object(dict)

    # Load configuration
    try:
        config_obj = load_config(config)
        ctx.obj["config"] = config_obj
    except ConfigurationError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        ctx.exit(1)

    ctx.obj["verbose"] = verbose
    ctx.obj["redact_attributes"] = redact_attributes
    ctx.obj["log_file"] = log_file

    # Configure logging with precedence: CLI flags > config file > defaults
    log_level = "DEBUG" if verbose else config_obj.logging.level
    log_file_path = log_file if log_file else config_obj.logging.log_file
    redact_setting = redact_attributes or config_obj.logging.redact_attributes

    configure_logging(
        level=log_level, log_file=log_file_path, redact_attributes=redact_setting
    )


# Register commands
cli.add_command(serve)
cli.add_command(sources_group)


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command()
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
def validate(config_file: Path) -> None:
    """Validate a configuration file.

    Args:
        config_file: Path to configuration file to validate

    Example:
        saml-test-util config validate config/config.json
    """
    try:
        config_obj = load_config(config_file)

        click.echo(click.style("✓", fg="green", bold=True) + " Configuration is valid")
        click.echo(f"\nConfiguration file: {config_file}")
        click.echo("\nServer:")
        click.echo(f"  Address:     {config_obj.server.host}:{config_obj.server.port}")
        click.echo(f"  Base path:   {config_obj.server.base_path}")
        click.echo(f"  Secret key:  {'Configured' if config_obj.server.secret_key else 'Generated at startup'}")

        click.echo("\nAdmin:")
        click.echo(f"  Protected:   {config_obj.admin.protected}")
        click.echo(f"  Auth source: {config_obj.admin.auth_source}")

        click.echo("\nAuth sources:")
        for source_id, source in config_obj.auth_sources.items():
            click.echo(f"  {source_id} ({source.type})")

        click.echo("\nState:")
        click.echo(f"  Lifetime:    {config_obj.state.lifetime_seconds}s")

        click.echo("\nLogging:")
        click.echo(f"  Level:       {config_obj.logging.level}")
        click.echo(f"  Log file:    {config_obj.logging.log_file}")
        click.echo(f"  Redact:      {config_obj.logging.redact_attributes}")

    except ConfigurationError as e:
        click.echo(click.style("✗", fg="red", bold=True) + " Configuration validation failed")
        click.echo(f"\n{e}", err=True)
        raise click.exceptions.Exit(1)


cli.add_command(config)


@cli.command()
def version() -> None:
    """Display version information."""
    click.echo(f"saml-test-util version {__version__}")


if __name__ == "__main__":
    cli()
