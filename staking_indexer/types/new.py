# staking_indexer/types/new.py

from typing import NewType

HexStr = NewType('HexStr', str)
EvmAddress = NewType('EvmAddress', str)
EvmHash = NewType('EvmHash', str)
PublicKey = NewType('PublicKey', str)  # 0x-prefixed 32-byte account id
NativeAddress = NewType('NativeAddress', str)  # SS58 encoded
EventId = NewType('EventId', str)
ErrorId = NewType('ErrorId', str)
