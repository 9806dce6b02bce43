"""
Classify command for blob-relay CLI.

Shows where object names would be relayed without touching any backend.
"""

from typing import Tuple

import click

from ..classifier import classify as classify_name


@click.command()
@click.argument("names", nargs=-1, required=True)
@click.pass_context
def classify(ctx: click.Context, names: Tuple[str, ...]) -> None:  # pylint: disable=unused-argument
    """Show the destination sub-path for each object NAME."""
    for name in names:
        sub_path = classify_name(name)
        click.echo(f"{name} -> {sub_path if sub_path is not None else '(no match, skipped)'}")


__all__ = ["classify"]
