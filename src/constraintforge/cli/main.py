"""constraintforge CLI entry point."""

import logging

import click


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool):
    """constraintforge: declarative record validation CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Register subcommands
from constraintforge.cli.check_cmd import check  # noqa: E402
from constraintforge.cli.schema_cmd import schema  # noqa: E402

cli.add_command(schema)
cli.add_command(check)
