from .base_repository import BaseRepository
from .staker_repository import StakerRepository
from .contract_repository import ContractRepository
from .transaction_repository import TransactionRepository
from .checkpoint_repository import CheckpointRepository
