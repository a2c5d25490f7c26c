# staking_indexer/database/readers/ledger_reader.py

from typing import Dict, Iterable, List, Optional, Set

from ...ledger.interfaces import LedgerReader
from ...types import Contract, EventId, EvmAddress, PublicKey, Staker
from ..connection import DatabaseManager


class SQLLedgerReader(LedgerReader):
    """LedgerReader over the SQL store; every lookup is one query"""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    def find_stakers(self, staker_ids: Iterable[PublicKey]) -> Dict[PublicKey, Staker]:
        with self.db_manager.get_session() as session:
            rows = self.db_manager.get_staker_repo().get_by_ids(session, staker_ids)
            return {row.id: row.to_struct() for row in rows}

    def find_stakers_by_evm(self, evm_address: EvmAddress) -> List[Staker]:
        with self.db_manager.get_session() as session:
            rows = self.db_manager.get_staker_repo().get_by_evm_address(session, evm_address)
            return [row.to_struct() for row in rows]

    def find_contract(self, contract_id: EvmAddress) -> Optional[Contract]:
        with self.db_manager.get_session() as session:
            row = self.db_manager.get_contract_repo().get_by_id(session, contract_id)
            return row.to_struct() if row else None

    def existing_transaction_ids(self, transaction_ids: Iterable[EventId]) -> Set[EventId]:
        with self.db_manager.get_session() as session:
            return self.db_manager.get_transaction_repo().existing_ids(session, transaction_ids)

    def get_checkpoint(self, indexer_name: str) -> Optional[int]:
        with self.db_manager.get_session() as session:
            return self.db_manager.get_checkpoint_repo().get_block(session, indexer_name)
