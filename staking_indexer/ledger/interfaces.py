"""
Store interfaces for the staking ledger.

The aggregator only reads through LedgerReader so that a batch can be folded
against any backing store. The SQL implementation lives in
database.readers.ledger_reader.
"""
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Set

from ..types import Contract, EventId, EvmAddress, PublicKey, Staker


class LedgerReader(ABC):
    """Bulk lookups needed to fold one batch of operations."""

    @abstractmethod
    def find_stakers(self, staker_ids: Iterable[PublicKey]) -> Dict[PublicKey, Staker]:
        """
        Load the stakers with the given ids.

        Args:
            staker_ids: Public keys to look up

        Returns:
            Mapping of id to Staker for the ids that exist
        """
        pass

    @abstractmethod
    def find_stakers_by_evm(self, evm_address: EvmAddress) -> List[Staker]:
        """
        Stakers whose active EVM mapping equals the address.

        Args:
            evm_address: Lower-case EVM address

        Returns:
            Matching stakers, possibly empty
        """
        pass

    @abstractmethod
    def find_contract(self, contract_id: EvmAddress) -> Optional[Contract]:
        pass

    @abstractmethod
    def existing_transaction_ids(self, transaction_ids: Iterable[EventId]) -> Set[EventId]:
        """Subset of the given ids already recorded as transactions"""
        pass

    @abstractmethod
    def get_checkpoint(self, indexer_name: str) -> Optional[int]:
        """Height of the last committed block for the indexer, if any"""
        pass
