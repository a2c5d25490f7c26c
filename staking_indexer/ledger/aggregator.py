# staking_indexer/ledger/aggregator.py

from typing import Dict, Iterable, List, Optional, Set

from msgspec import Struct, field

from ..core.logging import LoggingMixin
from ..decode.address_codec import NativeAddressCodec
from ..types import (
    ChainConfig,
    Contract,
    EventId,
    EvmAddress,
    LedgerTransaction,
    MappingAction,
    MappingOp,
    NativeAddress,
    Operation,
    PublicKey,
    Staker,
    StakeOp,
)
from .interfaces import LedgerReader


class LedgerTables(Struct):
    """Per-batch lookup tables, loaded once and mutated while folding"""
    stakers: Dict[PublicKey, Staker]
    contract: Optional[Contract] = None
    touched: Set[PublicKey] = field(default_factory=set)
    opening_balances: Dict[PublicKey, int] = field(default_factory=dict)
    opening_total: int = 0

    @classmethod
    def load(cls, reader: LedgerReader, staker_ids: Iterable[PublicKey], contract_id: EvmAddress) -> 'LedgerTables':
        stakers = reader.find_stakers(staker_ids)
        contract = reader.find_contract(contract_id)
        return cls(
            stakers=stakers,
            contract=contract,
            opening_balances={staker_id: s.balance for staker_id, s in stakers.items()},
            opening_total=contract.total_staked if contract else 0,
        )

    def touch(self, staker: Staker) -> None:
        self.touched.add(staker.id)
        self.opening_balances.setdefault(staker.id, 0)


class LedgerDelta(Struct):
    """Entities changed by one batch"""
    stakers: List[Staker]
    contract: Optional[Contract]
    transactions: List[LedgerTransaction]
    opening_balances: Dict[PublicKey, int] = field(default_factory=dict)
    opening_total: int = 0
    skipped_transactions: int = 0

    @property
    def conservation_gap(self) -> int:
        """Contract total change minus the summed staker balance change; zero when consistent"""
        total_change = (self.contract.total_staked if self.contract else 0) - self.opening_total
        balance_change = sum(s.balance - self.opening_balances.get(s.id, 0) for s in self.stakers)
        return total_change - balance_change


class LedgerAggregator(LoggingMixin):
    """
    Folds one batch of operations into the ledger entities.

    Stake operations are replayed in chain order first, then mapping
    operations. Stake operations whose transaction id is already stored were
    applied by an earlier run and are not folded again.
    """

    def __init__(self, codec: NativeAddressCodec, chain: ChainConfig):
        self.codec = codec
        self.chain = chain
        self.contract_id = EvmAddress(chain.target_contract.lower())

    def aggregate(self, operations: List[Operation], reader: LedgerReader) -> LedgerDelta:
        stake_ops = sorted((op for op in operations if isinstance(op, StakeOp)), key=lambda op: op.order_key)
        mapping_ops = sorted((op for op in operations if isinstance(op, MappingOp)), key=lambda op: op.order_key)

        staker_ids = {op.user for op in stake_ops} | {op.staker_id for op in mapping_ops}
        tables = LedgerTables.load(reader, staker_ids, self.contract_id)

        already_applied = reader.existing_transaction_ids([op.id for op in stake_ops]) if stake_ops else set()

        transactions = []
        seen: Set[EventId] = set()
        skipped = 0
        for op in stake_ops:
            if op.id in already_applied or op.id in seen:
                skipped += 1
                continue
            seen.add(op.id)
            transactions.append(self._apply_stake(tables, op))

        for op in mapping_ops:
            self._apply_mapping(tables, op)

        if skipped:
            self.log_info("Skipped stake operations already recorded",
                          skipped=skipped)

        delta = LedgerDelta(
            stakers=[tables.stakers[staker_id] for staker_id in sorted(tables.touched)],
            contract=tables.contract,
            transactions=transactions,
            opening_balances={staker_id: tables.opening_balances[staker_id] for staker_id in tables.touched},
            opening_total=tables.opening_total,
            skipped_transactions=skipped,
        )

        gap = delta.conservation_gap
        if gap:
            self.log_warning("Contract total diverged from staker balances",
                             contract_address=self.contract_id,
                             gap=gap)

        return delta

    def _staker(self, tables: LedgerTables, staker_id: PublicKey,
                native_address: Optional[NativeAddress] = None) -> Staker:
        staker = tables.stakers.get(staker_id)
        if staker is None:
            staker = Staker(
                id=staker_id,
                native_address=native_address or self.codec.encode(staker_id),
            )
            tables.stakers[staker_id] = staker
            self.log_debug("Staker created", staker_id=staker_id)
        tables.touch(staker)
        return staker

    def _apply_stake(self, tables: LedgerTables, op: StakeOp) -> LedgerTransaction:
        staker = self._staker(tables, op.user)
        staker.balance += op.amount_delta

        if tables.contract is None:
            tables.contract = Contract(id=self.contract_id, name=self.chain.target_contract_name)
            self.log_debug("Contract created", contract_address=self.contract_id)
        tables.contract.total_staked += op.amount_delta

        return LedgerTransaction(
            id=op.id,
            action=op.action,
            user_id=staker.id,
            timestamp=op.timestamp,
            block=op.block,
            transaction_hash=op.tx_hash,
            amount=op.amount,
        )

    def _apply_mapping(self, tables: LedgerTables, op: MappingOp) -> None:
        if op.action == MappingAction.MAP:
            staker = self._staker(tables, op.staker_id, op.native_address)
            staker.evm_address = op.evm_address
            return

        staker = tables.stakers.get(op.staker_id)
        if staker is None or staker.evm_address != op.evm_address:
            self.log_debug("Unmap has no matching mapping",
                           staker_id=op.staker_id,
                           evm_address=op.evm_address)
            return
        tables.touch(staker)
        staker.evm_address = None
