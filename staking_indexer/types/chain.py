# staking_indexer/types/chain.py
"""
Block shapes delivered by the chain data source.

The source has already done protocol-level decoding, so event and call
arguments arrive as plain JSON values. Contract call payloads and EVM log
data are still raw hex and are interpreted by the payload decoder.
"""

from typing import Any, Dict, List, Optional, Union

from msgspec import Struct, field

from .new import EvmHash


class BlockHeader(Struct):
    height: int
    timestamp: int  # milliseconds since epoch
    hash: Optional[EvmHash] = None


class CallRef(Struct):
    """Call that emitted an event (e.g. the Ethereum.transact behind an EVM.Log)"""
    name: str
    args: Dict[str, Any] = field(default_factory=dict)


class BlockItem(Struct, tag_field="kind", kw_only=True):
    name: str
    id: str
    extrinsic_hash: Optional[EvmHash] = None


class EventItem(BlockItem, tag="event", kw_only=True):
    args: Any = None  # list for pallet events, dict for EVM.Log
    call: Optional[CallRef] = None


class CallItem(BlockItem, tag="call", kw_only=True):
    args: Dict[str, Any] = field(default_factory=dict)


ChainItem = Union[EventItem, CallItem]


class ChainBlock(Struct):
    header: BlockHeader
    items: List[ChainItem] = field(default_factory=list)

    @property
    def height(self) -> int:
        return self.header.height
