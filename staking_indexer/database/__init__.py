# staking_indexer/database/__init__.py

from .base import Base
from .connection import DatabaseManager
from .tables import DBCheckpoint, DBContract, DBStaker, DBTransaction
