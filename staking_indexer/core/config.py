# staking_indexer/core/config.py

from msgspec import Struct
from typing import Optional, Mapping
from pathlib import Path
import os

from ..types import (
    EvmAddress,
    ChainConfig,
    DatabaseConfig,
    PathsConfig,
    ProcessingConfig,
)
from . import constants
from .logging import IndexerLogger, log_with_context, INFO, DEBUG

ENV_PREFIX = "INDEXER_"
DEFAULT_DB_URL = "sqlite:///staking_indexer.db"


class IndexerConfig(Struct):
    chain: ChainConfig
    database: DatabaseConfig
    paths: PathsConfig
    processing: ProcessingConfig

    @classmethod
    def from_env(cls, env_vars: Optional[Mapping[str, str]] = None, load_env_file: bool = True) -> 'IndexerConfig':
        logger = IndexerLogger.get_logger('core.config')

        if load_env_file and env_vars is None:
            from dotenv import load_dotenv
            load_dotenv()
        env = env_vars if env_vars is not None else os.environ

        chain = cls._create_chain_config(env)
        database = cls._create_database_config(env)
        paths = cls._create_paths_config(env)
        processing = cls._create_processing_config(env)

        log_with_context(logger, INFO, "IndexerConfig created",
                         contract_address=chain.target_contract,
                         base_contract=chain.base_contract,
                         start_block=chain.start_block,
                         batch_size=processing.batch_size)

        return cls(chain=chain, database=database, paths=paths, processing=processing)

    @staticmethod
    def _create_chain_config(env: Mapping[str, str]) -> ChainConfig:
        target = _address(env, "TARGET_CONTRACT", constants.ASTAR_DEGENS_CONTRACT)
        base = _address(env, "BASE_CONTRACT", constants.ASTAR_BASE_CONTRACT)

        ss58_format = _int(env, "SS58_FORMAT", constants.ASTAR_SS58_FORMAT)
        if not 0 <= ss58_format < 16384:
            raise ValueError(f"{ENV_PREFIX}SS58_FORMAT out of range: {ss58_format}")

        return ChainConfig(
            target_contract=target,
            target_contract_name=env.get(f"{ENV_PREFIX}TARGET_CONTRACT_NAME", constants.ASTAR_DEGENS_NAME),
            base_contract=base,
            log_layout_height=_int(env, "LOG_LAYOUT_HEIGHT", constants.LOG_LAYOUT_HEIGHT),
            transact_layout_height=_int(env, "TRANSACT_LAYOUT_HEIGHT", constants.TRANSACT_LAYOUT_HEIGHT),
            ss58_format=ss58_format,
            start_block=_int(env, "START_BLOCK", constants.START_BLOCK),
        )

    @staticmethod
    def _create_database_config(env: Mapping[str, str]) -> DatabaseConfig:
        return DatabaseConfig(
            url=env.get(f"{ENV_PREFIX}DB_URL", DEFAULT_DB_URL),
            pool_size=_int(env, "DB_POOL_SIZE", 5),
            max_overflow=_int(env, "DB_MAX_OVERFLOW", 10),
            echo=env.get(f"{ENV_PREFIX}DB_ECHO", "").lower() in ("1", "true", "yes"),
        )

    @staticmethod
    def _create_paths_config(env: Mapping[str, str]) -> PathsConfig:
        logger = IndexerLogger.get_logger('core.config.paths')

        project_root = Path.cwd()
        log_dir = Path(env.get(f"{ENV_PREFIX}LOG_DIR", project_root / "logs"))
        abi_dir = Path(env.get(f"{ENV_PREFIX}ABI_DIR", Path(__file__).parent.parent / "contracts" / "abis"))

        log_with_context(logger, DEBUG, "Paths resolved",
                         log_dir=str(log_dir), abi_dir=str(abi_dir))

        return PathsConfig(project_root=project_root, log_dir=log_dir, abi_dir=abi_dir)

    @staticmethod
    def _create_processing_config(env: Mapping[str, str]) -> ProcessingConfig:
        batch_size = _int(env, "BATCH_SIZE", 100)
        if batch_size < 1:
            raise ValueError(f"{ENV_PREFIX}BATCH_SIZE must be positive: {batch_size}")

        data_file = env.get(f"{ENV_PREFIX}DATA_FILE")

        return ProcessingConfig(
            batch_size=batch_size,
            log_level=env.get(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper(),
            indexer_name=env.get(f"{ENV_PREFIX}NAME", "astar-degens"),
            data_file=Path(data_file) if data_file else None,
        )


def _int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(f"{ENV_PREFIX}{key}")
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{key} must be an integer, got {raw!r}")


def _address(env: Mapping[str, str], key: str, default: str) -> EvmAddress:
    raw = env.get(f"{ENV_PREFIX}{key}", default).strip().lower()
    if not raw.startswith("0x") or len(raw) != 42:
        raise ValueError(f"{ENV_PREFIX}{key} is not an EVM address: {raw!r}")
    try:
        int(raw, 16)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{key} is not an EVM address: {raw!r}")
    return EvmAddress(raw)
