# staking_indexer/cli/commands/db.py

import sys

import click
from sqlalchemy.exc import SQLAlchemyError

from ...database.connection import DatabaseManager


@click.group()
def db():
    """Database administration"""
    pass


@db.command('init')
@click.pass_context
def init(ctx):
    """Create the ledger tables if they do not exist

    For managed deployments prefer `alembic upgrade head`.
    """
    cli_context = ctx.obj['cli_context']
    try:
        db_manager = cli_context.get(DatabaseManager)
        db_manager.create_schema()
    except SQLAlchemyError as e:
        click.echo(f"❌ Schema creation failed: {e}", err=True)
        sys.exit(1)

    click.echo("✅ Ledger schema ready")


@db.command('check')
@click.pass_context
def check(ctx):
    """Check database connectivity"""
    db_manager = ctx.obj['cli_context'].get(DatabaseManager)
    if db_manager.health_check():
        click.echo("✅ Database reachable")
    else:
        click.echo("❌ Database health check failed", err=True)
        sys.exit(1)
