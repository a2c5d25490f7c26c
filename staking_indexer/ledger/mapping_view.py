# staking_indexer/ledger/mapping_view.py

from collections import defaultdict
from typing import Dict, List, Optional, Set

from ..types import EvmAddress, MappingAction, MappingOp, PublicKey
from .interfaces import LedgerReader


class MappingView:
    """
    EVM address holders as of the current point in a batch.

    Store lookups are overlaid with the map/unmap operations already
    extracted earlier in the same batch, so an unregister that follows a
    register in one batch still finds its staker.
    """

    def __init__(self, reader: LedgerReader):
        self.reader = reader
        self._stored: Dict[EvmAddress, Set[PublicKey]] = {}
        self._added: Dict[EvmAddress, Set[PublicKey]] = defaultdict(set)
        self._current: Dict[PublicKey, Optional[EvmAddress]] = {}

    def holders(self, evm_address: EvmAddress) -> List[PublicKey]:
        evm_address = EvmAddress(evm_address.lower())
        if evm_address not in self._stored:
            self._stored[evm_address] = {
                staker.id for staker in self.reader.find_stakers_by_evm(evm_address)
            }

        candidates = self._stored[evm_address] | self._added[evm_address]
        return sorted(
            staker_id for staker_id in candidates
            if self._current.get(staker_id, evm_address) == evm_address
        )

    def apply(self, op: MappingOp) -> None:
        if op.action == MappingAction.MAP:
            self._current[op.staker_id] = op.evm_address
            self._added[op.evm_address].add(op.staker_id)
        else:
            self._current[op.staker_id] = None
