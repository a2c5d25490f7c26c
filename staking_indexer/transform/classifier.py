# staking_indexer/transform/classifier.py

from typing import Any, Optional

from ..core import constants
from ..core.logging import LoggingMixin
from ..types import (
    IRRELEVANT,
    BlockHeader,
    CallItem,
    ChainConfig,
    ChainItem,
    Classification,
    EventItem,
    EvmAddress,
    HexStr,
    MalformedPayloadError,
    PublicKey,
    RegisterCandidate,
    StakeCandidate,
    UnregisterCandidate,
)
from .eras import PayloadEra

STAKE_EVENTS = {
    constants.BOND_AND_STAKE: "BondAndStake",
    constants.UNBOND_AND_UNSTAKE: "UnbondAndUnstake",
    constants.NOMINATION_TRANSFER: "NominationTransfer",
}


def contract_address(value: Any) -> Optional[EvmAddress]:
    """SmartContract enum ({"__kind": "Evm", "value": "0x.."}) or a bare address"""
    if isinstance(value, dict):
        value = value.get("value")
    if isinstance(value, str) and value.startswith("0x"):
        return EvmAddress(value.lower())
    return None


def parse_amount(value: Any) -> int:
    if isinstance(value, bool):
        raise MalformedPayloadError(f"Amount is not an integer: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 0) if value.startswith("0x") else int(value)
        except ValueError:
            pass
    raise MalformedPayloadError(f"Amount is not an integer: {value!r}")


class EventClassifier(LoggingMixin):
    """
    Decides per block item whether it concerns the target staking contract
    or the AstarBase address registry.
    """

    def __init__(self, chain: ChainConfig):
        self.chain = chain
        self.target = EvmAddress(chain.target_contract.lower())
        self.base = EvmAddress(chain.base_contract.lower())

    def classify(self, item: ChainItem, header: BlockHeader, position: int) -> Classification:
        if isinstance(item, EventItem):
            if item.name in STAKE_EVENTS:
                return self._classify_stake(item, header, position)
            if item.name == constants.EVM_LOG:
                return self._classify_register(item, header, position)
        elif isinstance(item, CallItem):
            if item.name == constants.ETHEREUM_TRANSACT:
                return self._classify_unregister(item, header, position)
        return IRRELEVANT

    def _classify_stake(self, item: EventItem, header: BlockHeader, position: int) -> Classification:
        kind = STAKE_EVENTS[item.name]
        args = item.args if isinstance(item.args, (list, tuple)) else []
        expected = 4 if kind == "NominationTransfer" else 3

        origin = contract_address(args[1]) if len(args) > 1 else None
        target = contract_address(args[3]) if kind == "NominationTransfer" and len(args) > 3 else None

        # Other contracts' events are dropped before their shape is checked
        if self.target not in (origin, target):
            return IRRELEVANT
        if len(args) < expected:
            raise MalformedPayloadError(f"{item.name} carries {item.args!r:.80} instead of {expected} args")
        # Same-contract transfers are no-ops; both sides being ours would double count
        if kind == "NominationTransfer" and origin == target:
            return IRRELEVANT

        account = args[0]
        if not isinstance(account, str) or not account.startswith("0x"):
            raise MalformedPayloadError(f"{item.name} account is not a hex public key: {account!r:.80}")

        return StakeCandidate(
            item_id=item.id,
            block=header.height,
            position=position,
            timestamp=header.timestamp,
            tx_hash=item.extrinsic_hash,
            kind=kind,
            account=PublicKey(account.lower()),
            amount=parse_amount(args[2]),
            origin_contract=origin,
            target_contract=target,
        )

    def _classify_register(self, item: EventItem, header: BlockHeader, position: int) -> Classification:
        era = PayloadEra.at(header.height, self.chain)
        log = era.log_fields(item.args)
        if log is None or contract_address(log.get("address")) != self.base:
            return IRRELEVANT

        if item.call is None:
            return IRRELEVANT
        call_input = era.transact_input(item.call.args)
        if call_input is None or not call_input.lower().startswith(constants.REGISTER_SELECTOR):
            return IRRELEVANT

        self.log_debug("Registration log classified",
                       block_number=header.height,
                       event_id=item.id,
                       era=era.name)

        return RegisterCandidate(
            item_id=item.id,
            block=header.height,
            position=position,
            timestamp=header.timestamp,
            tx_hash=item.extrinsic_hash,
            call_input=HexStr(call_input),
            log_data=HexStr(log.get("data") or "0x"),
            log_topics=[HexStr(t) for t in log.get("topics") or []],
        )

    def _classify_unregister(self, item: CallItem, header: BlockHeader, position: int) -> Classification:
        era = PayloadEra.at(header.height, self.chain)
        call_input = era.transact_input(item.args)
        if call_input is None:
            return IRRELEVANT

        selector = call_input[:10].lower()
        if selector not in constants.UNREGISTER_SELECTORS:
            return IRRELEVANT

        return UnregisterCandidate(
            item_id=item.id,
            block=header.height,
            position=position,
            timestamp=header.timestamp,
            tx_hash=item.extrinsic_hash,
            call_input=HexStr(call_input),
        )
