# staking_indexer/decode/address_codec.py

from typing import Union

from eth_utils import decode_hex
from substrateinterface.utils.ss58 import ss58_decode, ss58_encode

from ..types import MalformedPayloadError, NativeAddress, PublicKey


class NativeAddressCodec:
    """SS58 codec bound to one network prefix (Astar uses 5)"""

    def __init__(self, ss58_format: int):
        self.ss58_format = ss58_format

    def encode(self, public_key: Union[str, bytes]) -> NativeAddress:
        try:
            raw = public_key if isinstance(public_key, (bytes, bytearray)) else decode_hex(public_key)
        except (ValueError, TypeError) as e:
            raise MalformedPayloadError(f"Public key is not hex: {public_key!r:.80}") from e

        if len(raw) != 32:
            raise MalformedPayloadError(f"Public key must be 32 bytes, got {len(raw)}")

        return NativeAddress(ss58_encode(bytes(raw), ss58_format=self.ss58_format))

    def decode(self, address: str) -> PublicKey:
        try:
            return PublicKey("0x" + ss58_decode(address, valid_ss58_format=self.ss58_format))
        except ValueError as e:
            raise MalformedPayloadError(f"Invalid SS58 address {address!r}: {e}") from e
