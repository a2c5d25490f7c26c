# staking_indexer/decode/payload_decoder.py

from typing import Any, Dict, List, Optional, Sequence

from web3 import Web3
from eth_abi.exceptions import DecodingError
from eth_utils import (
    decode_hex,
    event_abi_to_log_topic,
    function_abi_to_4byte_selector,
)

from ..contracts.abi_loader import ABILoader
from ..core.logging import LoggingMixin
from ..types import DecodeError, DecodedLog, DecodedMethod, HexStr

SELECTOR_HEX_LENGTH = 10  # "0x" + 4 bytes
TOPIC_HEX_LENGTH = 66  # "0x" + 32 bytes


def _abi_type(abi_input: Dict[str, Any]) -> str:
    abi_type = abi_input["type"]
    if not abi_type.startswith("tuple"):
        return abi_type
    components = ",".join(_abi_type(c) for c in abi_input.get("components", []))
    return f"({components}){abi_type[len('tuple'):]}"


def _signature(abi_entry: Dict[str, Any]) -> str:
    types = ",".join(_abi_type(i) for i in abi_entry.get("inputs", []))
    return f"{abi_entry['name']}({types})"


def _normalize(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, str) and value.startswith("0x") and len(value) == 42:
        return value.lower()
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    return value


class PayloadDecoder(LoggingMixin):
    """
    Decodes contract call input and EVM log payloads against one fixed ABI.

    Functions are keyed by their 4-byte selector and events by their 32-byte
    topic; lookups are exact.
    """

    def __init__(self, abi: List[Dict[str, Any]], contract_name: str = "contract"):
        self.w3 = Web3()  # No provider needed for ABI decoding
        self.contract_name = contract_name
        self._functions: Dict[str, Dict[str, Any]] = {}
        self._events: Dict[str, Dict[str, Any]] = {}
        self._by_signature: Dict[str, HexStr] = {}

        for entry in abi:
            if entry.get("type") == "function":
                selector = HexStr("0x" + function_abi_to_4byte_selector(entry).hex())
                self._functions[selector] = entry
                self._by_signature[_signature(entry)] = selector
            elif entry.get("type") == "event" and not entry.get("anonymous"):
                topic = HexStr("0x" + event_abi_to_log_topic(entry).hex())
                self._events[topic] = entry
                self._by_signature[_signature(entry)] = topic

        self.log_debug("Payload decoder initialized",
                       contract_name=contract_name,
                       function_count=len(self._functions),
                       event_count=len(self._events))

    @classmethod
    def from_abi_file(cls, abi_loader: ABILoader, abi_file: str = "astar_base.json") -> 'PayloadDecoder':
        return cls(abi_loader.load_abi(abi_file), contract_name=abi_file.rsplit(".", 1)[0])

    def selector_of(self, signature: str) -> Optional[HexStr]:
        """Selector or topic for a canonical signature like 'register(bytes,bytes)'"""
        return self._by_signature.get(signature)

    topic_of = selector_of

    def decode_function_call(self, call_input: str) -> DecodedMethod:
        if not isinstance(call_input, str) or not call_input.startswith("0x") \
                or len(call_input) < SELECTOR_HEX_LENGTH:
            raise DecodeError(f"Call input is not selector-prefixed hex: {call_input!r:.40}")

        selector = HexStr(call_input[:SELECTOR_HEX_LENGTH].lower())
        fn_abi = self._functions.get(selector)
        if fn_abi is None:
            raise DecodeError(f"Unknown function selector {selector} for {self.contract_name}")

        inputs = fn_abi.get("inputs", [])
        values = self._decode_values([_abi_type(i) for i in inputs], call_input[SELECTOR_HEX_LENGTH:],
                                     what=fn_abi["name"])

        return DecodedMethod(
            selector=selector,
            name=fn_abi["name"],
            signature=_signature(fn_abi),
            args=self._name_values(inputs, values),
        )

    def decode_event_log(self, topics: Sequence[str], data: str) -> DecodedLog:
        if not topics:
            raise DecodeError("Log has no topics")

        topic = HexStr(str(topics[0]).lower())
        if len(topic) != TOPIC_HEX_LENGTH or topic not in self._events:
            raise DecodeError(f"Unknown event topic {topic} for {self.contract_name}")

        event_abi = self._events[topic]
        inputs = event_abi.get("inputs", [])
        indexed = [i for i in inputs if i.get("indexed")]
        plain = [i for i in inputs if not i.get("indexed")]

        if len(topics) - 1 != len(indexed):
            raise DecodeError(
                f"{event_abi['name']} expects {len(indexed)} indexed topics, got {len(topics) - 1}"
            )

        attributes: Dict[str, Any] = {}
        for abi_input, raw_topic in zip(indexed, topics[1:]):
            abi_type = _abi_type(abi_input)
            if abi_type in ("bytes", "string") or abi_type.endswith("]") or abi_type.startswith("("):
                # Dynamic indexed values are stored as their keccak hash
                attributes[abi_input["name"]] = str(raw_topic).lower()
                continue
            (value,) = self._decode_values([abi_type], str(raw_topic)[2:], what=event_abi["name"])
            attributes[abi_input["name"]] = _normalize(value)

        data_hex = data[2:] if isinstance(data, str) and data.startswith("0x") else (data or "")
        values = self._decode_values([_abi_type(i) for i in plain], data_hex, what=event_abi["name"])
        attributes.update(self._name_values(plain, values))

        return DecodedLog(
            topic=topic,
            name=event_abi["name"],
            signature=_signature(event_abi),
            attributes=attributes,
        )

    def _decode_values(self, types: List[str], payload_hex: str, what: str) -> tuple:
        try:
            payload = decode_hex(payload_hex)
        except ValueError as e:
            raise DecodeError(f"{what}: payload is not valid hex") from e

        try:
            return tuple(self.w3.codec.decode(types, payload))
        except (DecodingError, ValueError, OverflowError) as e:
            raise DecodeError(f"{what}: argument layout mismatch ({e})") from e

    @staticmethod
    def _name_values(inputs: List[Dict[str, Any]], values: Sequence[Any]) -> Dict[str, Any]:
        return {
            (abi_input.get("name") or f"arg{position}"): _normalize(value)
            for position, (abi_input, value) in enumerate(zip(inputs, values))
        }
