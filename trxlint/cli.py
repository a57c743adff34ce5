"""trxlint CLI - Main entry point and command registration hub."""
# ruff: noqa: E402 - Intentional lazy loading: commands imported after cli group definition

import os

import click

from trxlint import __version__
from trxlint.utils.constants import ENV_DEBUG, STATE_DIR
from trxlint.utils.logging import configure_file_logging


@click.group()
@click.version_option(version=__version__, prog_name="trxlint")
@click.help_option("-h", "--help")
def cli():
    """trxlint - Objection.js transaction forwarding checker

    Finds Objection.js queries that run outside the `trx` transaction
    available in their scope, and fixes the safe cases.

    \b
    QUICK START:
      trxlint check src/            # Report problems
      trxlint check src/ --fix      # Fix what can be fixed safely
      trxlint rules                 # List rules and message ids

    \b
    Set TRXLINT_DEBUG=1 to keep a debug log in .trxlint/trxlint.log.

    \b
    For detailed options: trxlint <command> --help"""
    if os.environ.get(ENV_DEBUG):
        configure_file_logging(STATE_DIR)


from trxlint.commands.check import check
from trxlint.commands.rules import rules_command

cli.add_command(check)
cli.add_command(rules_command)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == "__main__":
    main()
