# staking_indexer/transform/extractor.py

from typing import Callable, Iterable, List

from hexbytes import HexBytes

from ..core import constants
from ..core.logging import LoggingMixin
from ..decode.address_codec import NativeAddressCodec
from ..decode.payload_decoder import PayloadDecoder
from ..types import (
    ChainConfig,
    DecodeError,
    EventId,
    EvmAddress,
    MalformedPayloadError,
    MappingAction,
    MappingOp,
    Operation,
    PublicKey,
    RegisterCandidate,
    StakeAction,
    StakeCandidate,
    StakeOp,
    UnregisterCandidate,
)

EvmLookup = Callable[[EvmAddress], Iterable[PublicKey]]

PUBLIC_KEY_BYTES = 32


def hex_slice(payload: str, bounds: tuple, what: str) -> str:
    start, end = bounds
    if len(payload) < end:
        raise MalformedPayloadError(
            f"{what} is {len(payload)} chars, needs at least {end} for the EVM address"
        )
    return payload[start:end]


def normalize_public_key(value) -> PublicKey:
    try:
        raw = bytes(HexBytes(value))
    except (ValueError, TypeError) as e:
        raise MalformedPayloadError(f"Public key is not hex: {value!r:.80}") from e
    if len(raw) != PUBLIC_KEY_BYTES:
        raise MalformedPayloadError(f"Public key must be {PUBLIC_KEY_BYTES} bytes, got {len(raw)}")
    return PublicKey("0x" + raw.hex())


class OperationExtractor(LoggingMixin):
    """
    Turns classified candidates into ledger operations.

    Stake candidates become one signed StakeOp. A register call becomes one
    map MappingOp; an unregister call becomes one unmap MappingOp per staker
    currently holding the EVM address. Payloads too short for their fixed
    slices raise MalformedPayloadError, undecodable call input DecodeError.
    """

    def __init__(self, decoder: PayloadDecoder, codec: NativeAddressCodec, chain: ChainConfig):
        self.decoder = decoder
        self.codec = codec
        self.chain = chain
        self.target = chain.target_contract.lower()

    def extract(self, candidate, evm_lookup: EvmLookup) -> List[Operation]:
        if isinstance(candidate, StakeCandidate):
            return [self.extract_stake(candidate)]
        if isinstance(candidate, RegisterCandidate):
            return [self.extract_register(candidate)]
        if isinstance(candidate, UnregisterCandidate):
            return self.extract_unregister(candidate, evm_lookup)
        return []

    def extract_stake(self, candidate: StakeCandidate) -> StakeOp:
        if candidate.kind == "BondAndStake":
            action = StakeAction.BOND
        elif candidate.kind == "UnbondAndUnstake":
            action = StakeAction.UNBOND
        elif candidate.origin_contract == self.target:
            action = StakeAction.NOMINATION_TRANSFER_OUT
        else:
            action = StakeAction.NOMINATION_TRANSFER_IN

        if candidate.amount < 0:
            raise MalformedPayloadError(f"Negative stake amount {candidate.amount}")

        return StakeOp(
            id=EventId(candidate.item_id),
            action=action,
            user=normalize_public_key(candidate.account),
            amount_delta=action.sign * candidate.amount,
            timestamp=candidate.timestamp,
            block=candidate.block,
            position=candidate.position,
            tx_hash=candidate.tx_hash,
        )

    def extract_register(self, candidate: RegisterCandidate) -> MappingOp:
        decoded = self.decoder.decode_function_call(candidate.call_input)
        if decoded.name != "register":
            raise DecodeError(f"Expected register call, decoded {decoded.signature}")

        public_key = normalize_public_key(decoded.args.get("ss58PublicKey"))
        evm_address = EvmAddress(
            "0x" + hex_slice(candidate.log_data, constants.REGISTER_LOG_EVM_SLICE, "Register log data").lower()
        )

        self.log_debug("Mapping registered",
                       block_number=candidate.block,
                       staker_id=public_key,
                       evm_address=evm_address)

        return MappingOp(
            action=MappingAction.MAP,
            staker_id=public_key,
            evm_address=evm_address,
            block=candidate.block,
            position=candidate.position,
            native_address=self.codec.encode(public_key),
        )

    def extract_unregister(self, candidate: UnregisterCandidate, evm_lookup: EvmLookup) -> List[MappingOp]:
        evm_address = EvmAddress(
            "0x" + hex_slice(candidate.call_input, constants.UNREGISTER_INPUT_EVM_SLICE, "Unregister input").lower()
        )

        staker_ids = sorted(set(evm_lookup(evm_address)))
        if not staker_ids:
            self.log_debug("Unregister matched no staker",
                           block_number=candidate.block,
                           evm_address=evm_address)
            return []

        return [
            MappingOp(
                action=MappingAction.UNMAP,
                staker_id=staker_id,
                evm_address=evm_address,
                block=candidate.block,
                position=candidate.position,
            )
            for staker_id in staker_ids
        ]
