# staking_indexer/__init__.py

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

import msgspec

from .core.container import IndexerContainer
from .core.config import IndexerConfig
from .core.logging import IndexerLogger, log_with_context
from .contracts.abi_loader import ABILoader
from .decode.address_codec import NativeAddressCodec
from .decode.payload_decoder import PayloadDecoder
from .database.connection import DatabaseManager
from .database.readers.ledger_reader import SQLLedgerReader
from .database.writers.ledger_writer import LedgerWriter
from .ledger.aggregator import LedgerAggregator
from .ledger.interfaces import LedgerReader
from .pipeline.batch_pipeline import BatchPipeline
from .transform.classifier import EventClassifier
from .transform.extractor import OperationExtractor
from .types import ChainConfig

ABI_FILE = "astar_base.json"

CHAIN_OVERRIDES = ("target_contract", "target_contract_name", "base_contract", "log_layout_height",
                   "transact_layout_height", "ss58_format", "start_block")
PROCESSING_OVERRIDES = ("batch_size", "log_level", "indexer_name", "data_file")


def create_indexer(env_vars: Optional[Mapping[str, str]] = None, **overrides) -> IndexerContainer:
    if env_vars is None:
        from dotenv import load_dotenv
        load_dotenv()
        env = os.environ
    else:
        env = env_vars
    _configure_logging_early(env, overrides.get("log_level"))

    logger = IndexerLogger.get_logger('core.init')
    logger.info("Creating staking indexer")

    config = _apply_overrides(IndexerConfig.from_env(env, load_env_file=False), overrides)

    log_with_context(logger, logging.INFO, "Configuration loaded successfully",
                     indexer_name=config.processing.indexer_name,
                     contract_address=config.chain.target_contract,
                     start_block=config.chain.start_block)

    container = IndexerContainer(config)
    _register_services(container)

    log_with_context(logger, logging.INFO, "Indexer created successfully")

    return container


def _configure_logging_early(env: Mapping[str, str], log_level: Optional[str] = None):
    log_dir_env = env.get("INDEXER_LOG_DIR")
    if log_dir_env:
        log_dir = Path(log_dir_env)
    else:
        log_dir = Path.cwd() / "logs"

    IndexerLogger.reset()
    IndexerLogger.configure(
        log_dir=log_dir,
        log_level=log_level or env.get("INDEXER_LOG_LEVEL", "INFO"),
        console_enabled=env.get("INDEXER_LOG_CONSOLE", "true").lower() == "true",
        file_enabled=env.get("INDEXER_LOG_FILE", "true").lower() == "true",
        structured_format=env.get("INDEXER_LOG_STRUCTURED", "false").lower() == "true"
    )


def _apply_overrides(config: IndexerConfig, overrides: dict) -> IndexerConfig:
    if not overrides:
        return config

    chain_changes = {k: v for k, v in overrides.items() if k in CHAIN_OVERRIDES}
    processing_changes = {k: v for k, v in overrides.items() if k in PROCESSING_OVERRIDES}
    db_url = overrides.get("db_url")

    unknown = set(overrides) - set(chain_changes) - set(processing_changes) - {"db_url"}
    if unknown:
        raise ValueError(f"Unknown indexer overrides: {', '.join(sorted(unknown))}")
    if processing_changes.get("batch_size", 1) < 1:
        raise ValueError(f"batch_size must be positive: {processing_changes['batch_size']}")

    return msgspec.structs.replace(
        config,
        chain=msgspec.structs.replace(config.chain, **chain_changes),
        processing=msgspec.structs.replace(config.processing, **processing_changes),
        database=msgspec.structs.replace(config.database, url=db_url) if db_url else config.database,
    )


def _register_services(container: IndexerContainer):
    logger = IndexerLogger.get_logger('core.services')
    logger.info("Registering services in container")

    config = container.config
    container.register_instance(ChainConfig, config.chain)

    logger.debug("Registering decoder services")
    container.register_factory(ABILoader, _create_abi_loader)
    container.register_factory(PayloadDecoder, _create_payload_decoder)
    container.register_factory(NativeAddressCodec, _create_address_codec)

    logger.debug("Registering transform services")
    container.register_singleton(EventClassifier, EventClassifier)
    container.register_singleton(OperationExtractor, OperationExtractor)
    container.register_singleton(LedgerAggregator, LedgerAggregator)

    logger.debug("Registering database services")
    container.register_factory(DatabaseManager, _create_database_manager)
    container.register_factory(LedgerReader, _create_ledger_reader)
    container.register_singleton(LedgerWriter, LedgerWriter)

    logger.debug("Registering pipeline services")
    container.register_singleton(BatchPipeline, BatchPipeline)

    logger.info("Service registration completed")


def _create_abi_loader(container: IndexerContainer) -> ABILoader:
    return ABILoader(container.config.paths.abi_dir)


def _create_payload_decoder(container: IndexerContainer) -> PayloadDecoder:
    return PayloadDecoder.from_abi_file(container.get(ABILoader), ABI_FILE)


def _create_address_codec(container: IndexerContainer) -> NativeAddressCodec:
    return NativeAddressCodec(container.config.chain.ss58_format)


def _create_database_manager(container: IndexerContainer) -> DatabaseManager:
    db_manager = DatabaseManager(container.config.database)
    db_manager.initialize()
    return db_manager


def _create_ledger_reader(container: IndexerContainer) -> LedgerReader:
    return SQLLedgerReader(container.get(DatabaseManager))
