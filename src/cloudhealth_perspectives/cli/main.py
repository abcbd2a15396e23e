"""Perspectives CLI entry point."""

import logging

import click


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool):
    """Manage CloudHealth perspectives from YAML definitions."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Register subcommand groups
from cloudhealth_perspectives.cli.definitions_cmd import definitions  # noqa: E402
from cloudhealth_perspectives.cli.perspective_cmd import perspective  # noqa: E402

cli.add_command(definitions)
cli.add_command(perspective)
