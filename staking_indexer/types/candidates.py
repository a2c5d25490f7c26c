# staking_indexer/types/candidates.py

from typing import List, Literal, Optional, Union

from msgspec import Struct, field

from .new import EvmAddress, EvmHash, HexStr, PublicKey

StakeEventKind = Literal["BondAndStake", "UnbondAndUnstake", "NominationTransfer"]


class Candidate(Struct, kw_only=True):
    """Provenance shared by every classified item"""
    item_id: str
    block: int
    position: int
    timestamp: int
    tx_hash: Optional[EvmHash] = None

    @property
    def order_key(self) -> tuple:
        return (self.block, self.position)


class Irrelevant(Struct, tag=True):
    pass


class StakeCandidate(Candidate, tag=True, kw_only=True):
    kind: StakeEventKind
    account: PublicKey
    amount: int
    origin_contract: EvmAddress
    target_contract: Optional[EvmAddress] = None  # NominationTransfer only


class RegisterCandidate(Candidate, tag=True, kw_only=True):
    call_input: HexStr
    log_data: HexStr
    log_topics: List[HexStr] = field(default_factory=list)


class UnregisterCandidate(Candidate, tag=True, kw_only=True):
    call_input: HexStr


Classification = Union[Irrelevant, StakeCandidate, RegisterCandidate, UnregisterCandidate]

IRRELEVANT = Irrelevant()
