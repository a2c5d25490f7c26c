# staking_indexer/types/ledger.py

from typing import Optional

from msgspec import Struct

from .new import EventId, EvmAddress, EvmHash, NativeAddress, PublicKey
from .operations import StakeAction


class Staker(Struct, kw_only=True):
    id: PublicKey
    native_address: NativeAddress
    balance: int = 0
    evm_address: Optional[EvmAddress] = None


class Contract(Struct, kw_only=True):
    id: EvmAddress
    name: str
    total_staked: int = 0


class LedgerTransaction(Struct, frozen=True, kw_only=True):
    id: EventId
    action: StakeAction
    user_id: PublicKey
    timestamp: int
    block: int
    transaction_hash: Optional[EvmHash]
    amount: int
