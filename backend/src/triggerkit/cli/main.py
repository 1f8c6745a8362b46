"""triggerkit CLI entry point."""

import logging

import click


@click.group()
@click.option(
    "--log-level",
    default="warning",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    help="Logging verbosity.",
)
def cli(log_level: str):
    """triggerkit — record trigger dispatch CLI."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(levelname)s %(name)s: %(message)s",
    )


# Register subcommand groups
from triggerkit.cli.handlers_cmd import handlers  # noqa: E402

cli.add_command(handlers)
