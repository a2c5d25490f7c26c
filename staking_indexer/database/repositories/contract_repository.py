# staking_indexer/database/repositories/contract_repository.py

from ..tables import DBContract
from .base_repository import BaseRepository


class ContractRepository(BaseRepository[DBContract]):
    def __init__(self, db_manager):
        super().__init__(db_manager, DBContract)
