# staking_indexer/types/operations.py

import enum
from typing import Optional, Union

from msgspec import Struct

from .new import EventId, EvmAddress, EvmHash, NativeAddress, PublicKey


class StakeAction(enum.Enum):
    BOND = "bond"
    UNBOND = "unbond"
    NOMINATION_TRANSFER_IN = "nomination_transfer_in"
    NOMINATION_TRANSFER_OUT = "nomination_transfer_out"

    @property
    def sign(self) -> int:
        if self in (StakeAction.BOND, StakeAction.NOMINATION_TRANSFER_IN):
            return 1
        return -1


class MappingAction(enum.Enum):
    MAP = "map"
    UNMAP = "unmap"


class StakeOp(Struct, frozen=True, kw_only=True):
    id: EventId
    action: StakeAction
    user: PublicKey
    amount_delta: int
    timestamp: int
    block: int
    position: int
    tx_hash: Optional[EvmHash] = None

    @property
    def amount(self) -> int:
        return abs(self.amount_delta)

    @property
    def order_key(self) -> tuple:
        return (self.block, self.position)


class MappingOp(Struct, frozen=True, kw_only=True):
    action: MappingAction
    staker_id: PublicKey
    evm_address: EvmAddress
    block: int
    position: int
    native_address: Optional[NativeAddress] = None

    @property
    def order_key(self) -> tuple:
        return (self.block, self.position)


Operation = Union[StakeOp, MappingOp]
