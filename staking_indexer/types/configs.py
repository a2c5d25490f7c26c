# staking_indexer/types/configs.py

from pathlib import Path
from typing import Optional

from msgspec import Struct

from .new import EvmAddress


class ChainConfig(Struct, frozen=True):
    target_contract: EvmAddress
    target_contract_name: str
    base_contract: EvmAddress
    log_layout_height: int  # EVM.Log args move under `log` from this height
    transact_layout_height: int  # Ethereum.transact input moves under `value` from this height
    ss58_format: int
    start_block: int = 0


class DatabaseConfig(Struct):
    url: str
    pool_size: int = 5
    max_overflow: int = 10
    echo: bool = False


class PathsConfig(Struct):
    project_root: Path
    log_dir: Path
    abi_dir: Path


class ProcessingConfig(Struct):
    batch_size: int = 100
    log_level: str = "INFO"
    indexer_name: str = "astar-degens"
    data_file: Optional[Path] = None
