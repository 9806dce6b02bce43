"""
Unified CLI entry point for blob-relay using Click.

This module provides the main CLI group and shared options.
"""

import sys
from typing import Optional

import click

from . import classify, run
from .._version import __version__
from ..utils.constants import EXIT_USER_INTERRUPT


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="blob-relay")
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a TOML config file with a [relay] table (environment variables take precedence)",
)
@click.option(
    "-d",
    "--debug",
    count=True,
    help="Increase verbosity (use -d for INFO, -dd for DEBUG, -ddd for DEBUG with storage/SSH client logs)",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], debug: int) -> None:
    """Blob Relay - Relay classified objects from object storage to SFTP and archive them."""
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["debug"] = debug


cli.add_command(run.run)
cli.add_command(run.watch)
cli.add_command(classify.classify)


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()  # pylint: disable=no-value-for-parameter  # Click handles parameters
    except KeyboardInterrupt:
        click.echo("\n\nOperation cancelled by user", err=True)
        sys.exit(EXIT_USER_INTERRUPT)


__all__ = ["cli", "main"]
