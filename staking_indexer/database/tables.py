# staking_indexer/database/tables.py

from sqlalchemy import BigInteger, Column, Enum, ForeignKey, Integer, String

from ..types import Contract, LedgerTransaction, Staker, StakeAction
from .base import Base, TimestampMixin
from .types import AmountType, EvmAddressType, EvmHashType, PublicKeyType


class DBStaker(Base, TimestampMixin):
    __tablename__ = 'staker'

    id = Column(PublicKeyType(), primary_key=True)
    native_address = Column(String(64), nullable=False)
    evm_address = Column(EvmAddressType(), nullable=True, index=True)
    balance = Column(AmountType(), nullable=False, default=0)

    @classmethod
    def from_struct(cls, staker: Staker) -> 'DBStaker':
        return cls(
            id=staker.id,
            native_address=staker.native_address,
            evm_address=staker.evm_address,
            balance=staker.balance,
        )

    def to_struct(self) -> Staker:
        return Staker(
            id=self.id,
            native_address=self.native_address,
            evm_address=self.evm_address,
            balance=self.balance or 0,
        )

    def __repr__(self) -> str:
        return f"<DBStaker(id={self.id}, balance={self.balance})>"


class DBContract(Base, TimestampMixin):
    __tablename__ = 'contract'

    id = Column(EvmAddressType(), primary_key=True)
    name = Column(String(255), nullable=False)
    total_staked = Column(AmountType(), nullable=False, default=0)

    @classmethod
    def from_struct(cls, contract: Contract) -> 'DBContract':
        return cls(id=contract.id, name=contract.name, total_staked=contract.total_staked)

    def to_struct(self) -> Contract:
        return Contract(id=self.id, name=self.name, total_staked=self.total_staked or 0)


class DBTransaction(Base, TimestampMixin):
    __tablename__ = 'transaction'

    id = Column(String(128), primary_key=True)  # originating event id
    action = Column(
        Enum(StakeAction, native_enum=False, values_callable=lambda e: [m.value for m in e], length=32),
        nullable=False,
    )
    user_id = Column(PublicKeyType(), ForeignKey('staker.id'), nullable=False, index=True)
    timestamp = Column(BigInteger, nullable=False)  # ms since epoch
    block = Column(Integer, nullable=False, index=True)
    transaction_hash = Column(EvmHashType(), nullable=True)
    amount = Column(AmountType(), nullable=False)

    @classmethod
    def from_struct(cls, transaction: LedgerTransaction) -> 'DBTransaction':
        return cls(
            id=transaction.id,
            action=transaction.action,
            user_id=transaction.user_id,
            timestamp=transaction.timestamp,
            block=transaction.block,
            transaction_hash=transaction.transaction_hash,
            amount=transaction.amount,
        )

    def to_struct(self) -> LedgerTransaction:
        return LedgerTransaction(
            id=self.id,
            action=self.action,
            user_id=self.user_id,
            timestamp=self.timestamp,
            block=self.block,
            transaction_hash=self.transaction_hash,
            amount=self.amount,
        )


class DBCheckpoint(Base, TimestampMixin):
    __tablename__ = 'checkpoint'

    indexer_name = Column(String(64), primary_key=True)
    block_number = Column(Integer, nullable=False)
    block_timestamp = Column(BigInteger, nullable=True)
