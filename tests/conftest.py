# tests/conftest.py
"""
pytest fixtures and block builders for the staking indexer
"""

from typing import Dict, Iterable, List, Optional, Set

import msgspec
import pytest
from eth_abi import encode

from staking_indexer.core import constants
from staking_indexer.core.config import IndexerConfig
from staking_indexer.contracts.abi_loader import ABILoader
from staking_indexer.database.connection import DatabaseManager
from staking_indexer.database.readers.ledger_reader import SQLLedgerReader
from staking_indexer.database.writers.ledger_writer import LedgerWriter
from staking_indexer.decode.address_codec import NativeAddressCodec
from staking_indexer.decode.payload_decoder import PayloadDecoder
from staking_indexer.ledger.aggregator import LedgerAggregator
from staking_indexer.ledger.interfaces import LedgerReader
from staking_indexer.pipeline.batch_pipeline import BatchPipeline
from staking_indexer.transform.classifier import EventClassifier
from staking_indexer.transform.extractor import OperationExtractor
from staking_indexer.types import (
    BlockHeader,
    CallItem,
    CallRef,
    ChainBlock,
    ChainConfig,
    Contract,
    DatabaseConfig,
    EventItem,
    Staker,
)

TARGET = constants.ASTAR_DEGENS_CONTRACT
BASE = constants.ASTAR_BASE_CONTRACT
OTHER = "0x" + "ab" * 20

PK1 = "0x" + "11" * 32
PK2 = "0x" + "22" * 32
EVM1 = "0x" + "cd" * 20
EVM2 = "0x" + "ef" * 20

PRE_H1 = 1_000_000
POST_H1 = 2_000_000
PRE_H2 = 500_000

TEST_ENV = {
    "INDEXER_DB_URL": "sqlite://",
    "INDEXER_LOG_CONSOLE": "false",
    "INDEXER_LOG_FILE": "false",
}


# === Builders ===

def stake_event(kind: str, account: str, amount, contract: str, item_id: str,
                target: Optional[str] = None, tx_hash: Optional[str] = None) -> EventItem:
    args = [account, {"__kind": "Evm", "value": contract}, str(amount)]
    if target is not None:
        args.append({"__kind": "Evm", "value": target})
    return EventItem(name=f"DappsStaking.{kind}", id=item_id, args=args, extrinsic_hash=tx_hash)


def register_input(decoder: PayloadDecoder, public_key: str, signed_msg: bytes = b"signed") -> str:
    payload = encode(["bytes", "bytes"], [bytes.fromhex(public_key[2:]), signed_msg])
    return decoder.selector_of("register(bytes,bytes)") + payload.hex()


def transact_args(height: int, call_input: str) -> Dict:
    transaction = {"input": call_input}
    if height >= constants.TRANSACT_LAYOUT_HEIGHT:
        return {"transaction": {"__kind": "EIP1559", "value": transaction}}
    return {"transaction": transaction}


def register_log(decoder: PayloadDecoder, height: int, public_key: str, evm_address: str,
                 item_id: str, address: str = BASE, call_input: Optional[str] = None) -> EventItem:
    log = {
        "address": address,
        "topics": [decoder.topic_of("AstarBaseRegistered(address)")],
        "data": "0x" + "00" * 12 + evm_address[2:],
    }
    args = {"log": log} if height >= constants.LOG_LAYOUT_HEIGHT else log
    call_input = call_input or register_input(decoder, public_key)
    return EventItem(
        name="EVM.Log",
        id=item_id,
        args=args,
        call=CallRef(name="Ethereum.transact", args=transact_args(height, call_input)),
    )


def unregister_call(height: int, evm_address: str, item_id: str,
                    selector: str = constants.SUDO_UNREGISTER_SELECTOR) -> CallItem:
    call_input = selector + "00" * 12 + evm_address[2:]
    return CallItem(name="Ethereum.transact", id=item_id, args=transact_args(height, call_input))


def block(height: int, *items) -> ChainBlock:
    return ChainBlock(header=BlockHeader(height=height, timestamp=1_650_000_000_000 + height), items=list(items))


class MemoryLedgerReader(LedgerReader):
    """Dict-backed reader; hands out copies like a real store would"""

    def __init__(self, stakers: Iterable[Staker] = (), contract: Optional[Contract] = None,
                 transaction_ids: Iterable[str] = (), checkpoint: Optional[int] = None):
        self.stakers = {s.id: s for s in stakers}
        self.contract = contract
        self.transaction_ids = set(transaction_ids)
        self.checkpoint = checkpoint

    def find_stakers(self, staker_ids) -> Dict[str, Staker]:
        return {i: msgspec.structs.replace(self.stakers[i]) for i in staker_ids if i in self.stakers}

    def find_stakers_by_evm(self, evm_address) -> List[Staker]:
        return [msgspec.structs.replace(s) for s in self.stakers.values() if s.evm_address == evm_address]

    def find_contract(self, contract_id) -> Optional[Contract]:
        if self.contract and self.contract.id == contract_id:
            return msgspec.structs.replace(self.contract)
        return None

    def existing_transaction_ids(self, transaction_ids) -> Set[str]:
        return self.transaction_ids & set(transaction_ids)

    def get_checkpoint(self, indexer_name: str) -> Optional[int]:
        return self.checkpoint


# === Fixtures ===

@pytest.fixture
def indexer_config() -> IndexerConfig:
    return IndexerConfig.from_env(dict(TEST_ENV), load_env_file=False)


@pytest.fixture
def chain_config(indexer_config) -> ChainConfig:
    return indexer_config.chain


@pytest.fixture(scope="session")
def decoder() -> PayloadDecoder:
    return PayloadDecoder.from_abi_file(ABILoader(), "astar_base.json")


@pytest.fixture
def codec(chain_config) -> NativeAddressCodec:
    return NativeAddressCodec(chain_config.ss58_format)


@pytest.fixture
def classifier(chain_config) -> EventClassifier:
    return EventClassifier(chain_config)


@pytest.fixture
def extractor(decoder, codec, chain_config) -> OperationExtractor:
    return OperationExtractor(decoder, codec, chain_config)


@pytest.fixture
def aggregator(codec, chain_config) -> LedgerAggregator:
    return LedgerAggregator(codec, chain_config)


@pytest.fixture
def db_manager():
    manager = DatabaseManager(DatabaseConfig(url="sqlite://"))
    manager.initialize()
    manager.create_schema()
    yield manager
    manager.shutdown()


@pytest.fixture
def ledger_reader(db_manager) -> SQLLedgerReader:
    return SQLLedgerReader(db_manager)


@pytest.fixture
def pipeline(classifier, extractor, aggregator, ledger_reader, db_manager, indexer_config) -> BatchPipeline:
    return BatchPipeline(
        classifier=classifier,
        extractor=extractor,
        aggregator=aggregator,
        reader=ledger_reader,
        writer=LedgerWriter(db_manager),
        config=indexer_config,
    )
