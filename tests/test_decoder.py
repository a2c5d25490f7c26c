# tests/test_decoder.py

import pytest

from staking_indexer.core import constants
from staking_indexer.decode.address_codec import NativeAddressCodec
from staking_indexer.types import DecodeError, MalformedPayloadError

from conftest import EVM1, PK1, register_input


def test_selectors_match_astar_base_abi(decoder):
    assert decoder.selector_of("register(bytes,bytes)") == constants.REGISTER_SELECTOR
    assert decoder.selector_of("unRegister()") == constants.UNREGISTER_SELECTOR
    assert decoder.selector_of("sudoUnRegister(address)") == constants.SUDO_UNREGISTER_SELECTOR
    assert decoder.selector_of("noSuchFunction()") is None


def test_decode_register_call(decoder):
    decoded = decoder.decode_function_call(register_input(decoder, PK1, b"\x01\x02"))

    assert decoded.name == "register"
    assert decoded.signature == "register(bytes,bytes)"
    assert decoded.args["ss58PublicKey"] == PK1
    assert decoded.args["signedMsg"] == "0x0102"


def test_decode_sudo_unregister_call(decoder):
    decoded = decoder.decode_function_call(constants.SUDO_UNREGISTER_SELECTOR + "00" * 12 + EVM1[2:])

    assert decoded.name == "sudoUnRegister"
    assert decoded.args["evmAddress"] == EVM1


def test_unknown_selector_is_decode_error(decoder):
    with pytest.raises(DecodeError):
        decoder.decode_function_call("0xdeadbeef" + "00" * 32)


def test_selector_prefix_does_not_match(decoder):
    # Only the exact 4-byte selector identifies a function
    with pytest.raises(DecodeError):
        decoder.decode_function_call(constants.REGISTER_SELECTOR[:8])


def test_truncated_arguments_are_decode_error(decoder):
    with pytest.raises(DecodeError):
        decoder.decode_function_call(register_input(decoder, PK1)[:80])


def test_decode_registered_event(decoder):
    topic = decoder.topic_of("AstarBaseRegistered(address)")
    decoded = decoder.decode_event_log([topic], "0x" + "00" * 12 + EVM1[2:])

    assert decoded.name == "AstarBaseRegistered"
    assert decoded.attributes == {"newEntry": EVM1}


def test_decode_indexed_event_topics(decoder):
    topic = decoder.topic_of("OwnershipTransferred(address,address)")
    previous = "0x" + "00" * 12 + EVM1[2:]
    new = "0x" + "00" * 12 + "ef" * 20

    decoded = decoder.decode_event_log([topic, previous, new], "0x")

    assert decoded.attributes == {"previousOwner": EVM1, "newOwner": "0x" + "ef" * 20}


def test_event_with_wrong_topic_count_is_decode_error(decoder):
    topic = decoder.topic_of("OwnershipTransferred(address,address)")
    with pytest.raises(DecodeError):
        decoder.decode_event_log([topic], "0x")


def test_unknown_topic_is_decode_error(decoder):
    with pytest.raises(DecodeError):
        decoder.decode_event_log(["0x" + "00" * 32], "0x")


def test_address_codec_round_trip():
    codec = NativeAddressCodec(5)
    address = codec.encode(PK1)

    assert address != NativeAddressCodec(42).encode(PK1)
    assert codec.decode(address) == PK1
    assert codec.encode(bytes.fromhex(PK1[2:])) == address


@pytest.mark.parametrize("public_key", ["0x1234", "not-hex", "0x" + "11" * 33])
def test_address_codec_rejects_bad_keys(public_key):
    with pytest.raises(MalformedPayloadError):
        NativeAddressCodec(5).encode(public_key)
