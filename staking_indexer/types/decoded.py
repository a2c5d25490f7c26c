# staking_indexer/types/decoded.py

from typing import Any, Dict

from msgspec import Struct

from .new import HexStr


class DecodedMethod(Struct, tag=True):
    selector: HexStr
    name: str
    signature: str
    args: Dict[str, Any]


class DecodedLog(Struct, tag=True):
    topic: HexStr
    name: str
    signature: str
    attributes: Dict[str, Any]
