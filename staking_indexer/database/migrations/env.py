"""Alembic environment for the staking ledger database

Resolves the database URL the same way the indexer does (INDEXER_DB_URL,
then the alembic.ini fallback) and renders the custom column types so
autogenerated revisions import them.
"""

import os
from logging.config import fileConfig

from sqlalchemy import engine_from_config
from sqlalchemy import pool
from alembic import context

from staking_indexer.database.base import Base
from staking_indexer.database.types import AmountType, EvmAddressType, EvmHashType, PublicKeyType

# Import table definitions so they register on Base.metadata
from staking_indexer.database import tables  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

CUSTOM_TYPES = (AmountType, EvmAddressType, EvmHashType, PublicKeyType)


def render_item(type_, obj, autogen_context):
    """Custom rendering for our types to ensure proper imports in migration files"""
    if type_ == 'type':
        for custom_type in CUSTOM_TYPES:
            if isinstance(obj, custom_type):
                name = custom_type.__name__
                autogen_context.imports.add(f"from staking_indexer.database.types import {name}")
                return f"{name}()"
    return False


def get_database_url():
    url = os.getenv("INDEXER_DB_URL") or config.get_main_option("sqlalchemy.url")
    if not url:
        raise RuntimeError("Set INDEXER_DB_URL or sqlalchemy.url in alembic.ini")
    return url


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=get_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_item=render_item,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    config_dict = config.get_section(config.config_ini_section) or {}
    config_dict['sqlalchemy.url'] = get_database_url()

    connectable = engine_from_config(
        config_dict,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_item=render_item,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
