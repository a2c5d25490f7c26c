# staking_indexer/database/repositories/transaction_repository.py

from typing import List

from sqlalchemy.orm import Session

from ...types import PublicKey
from ..tables import DBTransaction
from .base_repository import BaseRepository


class TransactionRepository(BaseRepository[DBTransaction]):
    def __init__(self, db_manager):
        super().__init__(db_manager, DBTransaction)

    def get_by_user(self, session: Session, user_id: PublicKey, limit: int = 100) -> List[DBTransaction]:
        try:
            return session.query(DBTransaction).filter(
                DBTransaction.user_id == user_id
            ).order_by(DBTransaction.block, DBTransaction.id).limit(limit).all()
        except Exception as e:
            self.logger.error(f"Error getting transactions for user {user_id}: {e}")
            raise
