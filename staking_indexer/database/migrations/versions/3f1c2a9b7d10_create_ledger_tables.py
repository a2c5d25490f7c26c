"""Create ledger tables

Revision ID: 3f1c2a9b7d10
Revises:
Create Date: 2026-10-19 10:12:44.512903

"""
from alembic import op
import sqlalchemy as sa
from staking_indexer.database.types import AmountType, EvmAddressType, EvmHashType, PublicKeyType

# revision identifiers, used by Alembic.
revision = '3f1c2a9b7d10'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table('staker',
        sa.Column('id', PublicKeyType(), nullable=False),
        sa.Column('native_address', sa.String(length=64), nullable=False),
        sa.Column('evm_address', EvmAddressType(), nullable=True),
        sa.Column('balance', AmountType(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_staker_evm_address'), 'staker', ['evm_address'], unique=False)

    op.create_table('contract',
        sa.Column('id', EvmAddressType(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('total_staked', AmountType(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('transaction',
        sa.Column('id', sa.String(length=128), nullable=False),
        sa.Column('action', sa.Enum('bond', 'unbond', 'nomination_transfer_in', 'nomination_transfer_out',
                                    name='stakeaction', native_enum=False, length=32), nullable=False),
        sa.Column('user_id', PublicKeyType(), nullable=False),
        sa.Column('timestamp', sa.BigInteger(), nullable=False),
        sa.Column('block', sa.Integer(), nullable=False),
        sa.Column('transaction_hash', EvmHashType(), nullable=True),
        sa.Column('amount', AmountType(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['staker.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_transaction_user_id'), 'transaction', ['user_id'], unique=False)
    op.create_index(op.f('ix_transaction_block'), 'transaction', ['block'], unique=False)

    op.create_table('checkpoint',
        sa.Column('indexer_name', sa.String(length=64), nullable=False),
        sa.Column('block_number', sa.Integer(), nullable=False),
        sa.Column('block_timestamp', sa.BigInteger(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('indexer_name')
    )


def downgrade() -> None:
    op.drop_table('checkpoint')
    op.drop_index(op.f('ix_transaction_block'), table_name='transaction')
    op.drop_index(op.f('ix_transaction_user_id'), table_name='transaction')
    op.drop_table('transaction')
    op.drop_table('contract')
    op.drop_index(op.f('ix_staker_evm_address'), table_name='staker')
    op.drop_table('staker')
