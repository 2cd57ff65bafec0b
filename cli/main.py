#!/usr/bin/env python3
"""
Open Assets Protocol - Command Line Interface

Encode and decode marker outputs and build unsigned Open Assets transactions.
"""

import sys
from typing import Optional

import click

from .config import PROFILES
from .context import CLIContext, pass_context
from .commands.marker import marker
from .commands.tx import tx


@click.group(context_settings={'help_option_names': ['-h', '--help']})
@click.option('--config-file', '-c',
              type=click.Path(dir_okay=False),
              help='Path to configuration file')
@click.option('--profile', '-p',
              type=click.Choice(sorted(PROFILES)),
              help='Configuration profile')
@click.option('--output-format', '-o',
              type=click.Choice(['table', 'json', 'yaml']),
              help='Output format (default: cli.output_format)')
@click.option('--verbose', '-v',
              count=True,
              help='Increase verbosity (-v for INFO, -vv for DEBUG)')
@click.option('--version',
              is_flag=True,
              help='Show version information')
@pass_context
def cli(ctx: CLIContext, config_file: Optional[str], profile: Optional[str],
        output_format: Optional[str], verbose: int, version: bool):
    """
    Open Assets Command Line Interface

    Work with Open Assets marker outputs and build unsigned issuance and
    transfer transactions.

    Examples:
        oa marker encode -q 10000 -m u=https://cpr.sm/5YgSU1Pg-q
        oa marker decode 4f41010001904e00
        oa tx send-btc -u utxos.json --to 1A1z... --change 1A1z... --amount 50000
    """
    if version:
        from cli import __version__
        click.echo(f"Open Assets CLI v{__version__}")
        sys.exit(0)

    ctx.config_file = config_file
    ctx.profile = profile
    ctx.output_format = output_format
    ctx.verbose = verbose

    ctx.setup_logging()

    try:
        ctx.load_config()
    except (FileNotFoundError, ValueError) as e:
        raise click.UsageError(str(e))

    ctx.logger.debug("CLI initialized with context")


cli.add_command(marker)
cli.add_command(tx)


def main():
    cli()


if __name__ == '__main__':
    main()
