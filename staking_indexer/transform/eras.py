# staking_indexer/transform/eras.py

import enum
from typing import Any, Dict, Optional

from ..types import ChainConfig


class PayloadEra(enum.Enum):
    """
    Field layout of EVM payloads at a given height.

    Value is (nested_log, nested_input):
    - nested_log: EVM.Log args carry the log under `log` instead of flat
    - nested_input: Ethereum.transact input sits under `transaction.value`
    """
    FLAT = (False, False)
    NESTED_INPUT = (False, True)
    NESTED_LOG = (True, False)
    NESTED = (True, True)

    @property
    def nested_log(self) -> bool:
        return self.value[0]

    @property
    def nested_input(self) -> bool:
        return self.value[1]

    @classmethod
    def at(cls, height: int, chain: ChainConfig) -> 'PayloadEra':
        return cls((height >= chain.log_layout_height, height >= chain.transact_layout_height))

    def log_fields(self, event_args: Any) -> Optional[Dict[str, Any]]:
        """The {address, topics, data} mapping of an EVM.Log"""
        if not isinstance(event_args, dict):
            return None
        log = event_args.get("log") if self.nested_log else event_args
        return log if isinstance(log, dict) else None

    def transact_input(self, call_args: Any) -> Optional[str]:
        """Raw input of an Ethereum.transact call"""
        if not isinstance(call_args, dict):
            return None
        transaction = call_args.get("transaction")
        if not isinstance(transaction, dict):
            return None
        if self.nested_input:
            transaction = transaction.get("value")
            if not isinstance(transaction, dict):
                return None
        raw = transaction.get("input")
        return raw if isinstance(raw, str) else None
