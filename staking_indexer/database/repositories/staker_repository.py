# staking_indexer/database/repositories/staker_repository.py

from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...types import EvmAddress
from ..tables import DBStaker
from .base_repository import BaseRepository


class StakerRepository(BaseRepository[DBStaker]):
    def __init__(self, db_manager):
        super().__init__(db_manager, DBStaker)

    def get_by_evm_address(self, session: Session, evm_address: EvmAddress) -> List[DBStaker]:
        try:
            return session.query(DBStaker).filter(
                DBStaker.evm_address == evm_address.lower()
            ).order_by(DBStaker.id).all()
        except Exception as e:
            self.logger.error(f"Error getting stakers by EVM address {evm_address}: {e}")
            raise

    def total_balance(self, session: Session) -> int:
        """Sum of all balances, computed in Python so SQLite text amounts stay exact"""
        return sum(row.balance or 0 for row in session.query(DBStaker.balance))

    def count_mapped(self, session: Session) -> int:
        return session.query(func.count(DBStaker.id)).filter(DBStaker.evm_address.isnot(None)).scalar()
