# staking_indexer/database/repositories/checkpoint_repository.py

from typing import Optional

from sqlalchemy.orm import Session

from ..tables import DBCheckpoint
from .base_repository import BaseRepository


class CheckpointRepository(BaseRepository[DBCheckpoint]):
    def __init__(self, db_manager):
        super().__init__(db_manager, DBCheckpoint)

    def get_block(self, session: Session, indexer_name: str) -> Optional[int]:
        checkpoint = session.get(DBCheckpoint, indexer_name)
        return checkpoint.block_number if checkpoint else None

    def advance(self, session: Session, indexer_name: str, block_number: int,
                block_timestamp: Optional[int] = None) -> DBCheckpoint:
        checkpoint = session.get(DBCheckpoint, indexer_name)
        if checkpoint is None:
            checkpoint = DBCheckpoint(indexer_name=indexer_name, block_number=block_number,
                                      block_timestamp=block_timestamp)
            session.add(checkpoint)
        elif block_number > checkpoint.block_number:
            checkpoint.block_number = block_number
            checkpoint.block_timestamp = block_timestamp

        self.logger.debug(f"Checkpoint for {indexer_name} at block {checkpoint.block_number}")
        return checkpoint
