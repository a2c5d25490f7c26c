# staking_indexer/cli/commands/status.py

import click

from ...database.connection import DatabaseManager


@click.command('status')
@click.pass_context
def status(ctx):
    """Show checkpoint, contract total and staker counts"""
    cli_context = ctx.obj['cli_context']
    config = cli_context.config
    db_manager = cli_context.get(DatabaseManager)

    with db_manager.get_session() as session:
        checkpoint = db_manager.get_checkpoint_repo().get_block(session, config.processing.indexer_name)
        contract = db_manager.get_contract_repo().get_by_id(session, config.chain.target_contract)
        staker_repo = db_manager.get_staker_repo()
        staker_count = staker_repo.count(session)
        mapped_count = staker_repo.count_mapped(session)
        balance_sum = staker_repo.total_balance(session)
        transaction_count = db_manager.get_transaction_repo().count(session)

    total_staked = contract.total_staked if contract else 0

    click.echo(f"Indexer:      {config.processing.indexer_name}")
    click.echo(f"Checkpoint:   {checkpoint if checkpoint is not None else '-'}")
    click.echo(f"Contract:     {config.chain.target_contract_name} ({config.chain.target_contract})")
    click.echo(f"Total staked: {total_staked}")
    click.echo(f"Stakers:      {staker_count} ({mapped_count} with EVM mapping)")
    click.echo(f"Transactions: {transaction_count}")

    if balance_sum != total_staked:
        click.echo(f"⚠️ Staker balances sum to {balance_sum}, contract total differs by "
                   f"{total_staked - balance_sum}")
