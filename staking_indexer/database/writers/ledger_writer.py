# staking_indexer/database/writers/ledger_writer.py

from typing import Optional
import traceback

from msgspec import Struct
from sqlalchemy.orm import Session

from ..connection import DatabaseManager
from ..tables import DBContract, DBStaker
from ...core.logging import IndexerLogger, log_with_context, INFO, DEBUG, ERROR
from ...ledger.aggregator import LedgerDelta
from ...types import PersistenceError


class WriteResult(Struct):
    stakers_written: int
    transactions_written: int
    transactions_skipped: int
    checkpoint: Optional[int] = None


class LedgerWriter:
    """
    Writes one batch of ledger changes atomically.

    Stakers and the contract row are upserted by primary key, transactions
    are appended skipping ids already present, and the indexer checkpoint is
    advanced in the same database transaction. Any failure rolls the whole
    batch back and surfaces as PersistenceError.
    """

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager
        self.logger = IndexerLogger.get_logger('database.writers.ledger_writer')

        log_with_context(self.logger, INFO, "LedgerWriter initialized")

    def write_batch(
        self,
        delta: LedgerDelta,
        indexer_name: str,
        last_block: Optional[int] = None,
        last_timestamp: Optional[int] = None,
    ) -> WriteResult:
        log_with_context(
            self.logger, DEBUG, "Writing ledger batch",
            block_number=last_block,
            staker_count=len(delta.stakers),
            transaction_count=len(delta.transactions)
        )

        try:
            with self.db_manager.get_transaction() as session:
                stakers_written = self._write_stakers(session, delta)
                self._write_contract(session, delta)
                transactions_written = self._write_transactions(session, delta)

                if last_block is not None:
                    self.db_manager.get_checkpoint_repo().advance(
                        session, indexer_name, last_block, last_timestamp
                    )

            result = WriteResult(
                stakers_written=stakers_written,
                transactions_written=transactions_written,
                transactions_skipped=len(delta.transactions) - transactions_written,
                checkpoint=last_block,
            )

            log_with_context(
                self.logger, INFO, "Ledger batch written",
                block_number=last_block,
                stakers_written=result.stakers_written,
                transactions_written=result.transactions_written,
                transactions_skipped=result.transactions_skipped
            )
            return result

        except Exception as e:
            log_with_context(
                self.logger, ERROR, "Failed to write ledger batch",
                block_number=last_block,
                error=str(e),
                exception_type=type(e).__name__,
                traceback=traceback.format_exc()
            )
            raise PersistenceError(f"Ledger batch ending at block {last_block} not written: {e}") from e

    def _write_stakers(self, session: Session, delta: LedgerDelta) -> int:
        staker_repo = self.db_manager.get_staker_repo()
        for staker in delta.stakers:
            staker_repo.merge(session, DBStaker.from_struct(staker))
        # Transactions reference stakers by foreign key
        session.flush()
        return len(delta.stakers)

    def _write_contract(self, session: Session, delta: LedgerDelta) -> None:
        if delta.contract is not None:
            self.db_manager.get_contract_repo().merge(session, DBContract.from_struct(delta.contract))

    def _write_transactions(self, session: Session, delta: LedgerDelta) -> int:
        items = [
            {
                'id': tx.id,
                'action': tx.action,
                'user_id': tx.user_id,
                'timestamp': tx.timestamp,
                'block': tx.block,
                'transaction_hash': tx.transaction_hash,
                'amount': tx.amount,
            }
            for tx in delta.transactions
        ]
        return self.db_manager.get_transaction_repo().bulk_create_skip_existing(session, items)
