# staking_indexer/cli/__main__.py

"""
Staking Indexer CLI

Usage: python -m staking_indexer.cli [command] [options]
"""

import click

from .context import CLIContext
from .commands.db import db
from .commands.run import run
from .commands.status import status
from .commands.decode import decode


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--db-url', help='Database URL (overrides INDEXER_DB_URL)')
@click.pass_context
def cli(ctx, verbose, db_url):
    """Astar dApps-staking ledger indexer

    Indexes stake movements on the target contract and the native/EVM
    address mappings registered through AstarBase.
    """
    ctx.ensure_object(dict)
    overrides = {'db_url': db_url}
    if verbose:
        overrides['log_level'] = "DEBUG"

    cli_context = CLIContext(**overrides)
    ctx.obj['cli_context'] = cli_context
    ctx.call_on_close(cli_context.shutdown)


cli.add_command(db)
cli.add_command(run)
cli.add_command(status)
cli.add_command(decode)


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
