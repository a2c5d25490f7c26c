# staking_indexer/types/errors.py

from typing import Optional, Dict, Any
import hashlib
import msgspec
from msgspec import Struct

from .new import ErrorId, EvmHash


class IndexerError(Exception):
    """Base class for staking indexer failures"""


class DecodeError(IndexerError):
    """Raw bytes match no known selector/topic, or the argument layout is wrong"""


class MalformedPayloadError(IndexerError):
    """Payload is shorter than the slice it must contain"""


class SourceError(IndexerError):
    """Block archive is unreadable or out of order"""


class PersistenceError(IndexerError):
    """Batch write failed; nothing from the batch was committed"""


class ProcessingError(Struct):
    stage: str  # "classify", "extract", "persist"
    error_type: str  # "decode_failed", "malformed_payload", ...
    message: str
    error_id: Optional[ErrorId] = None
    context: Optional[Dict[str, Any]] = None  # item_id, block_number, tx_hash, etc.

    def __post_init__(self) -> None:
        if not self.error_id:
            self.error_id = self.generate_error_id()

    def generate_error_id(self) -> ErrorId:
        content_struct = {
            "stage": self.stage,
            "error_type": self.error_type,
            "message": self.message,
            "context": self.context or {},
        }
        content_bytes = msgspec.msgpack.encode(content_struct)
        hash_hex = hashlib.sha256(content_bytes).hexdigest()

        return ErrorId(hash_hex[:12])


'''
Helper functions to create specific error types
'''
def create_classify_error(
    error_type: str,
    message: str,
    item_id: Optional[str] = None,
    block_number: Optional[int] = None,
) -> ProcessingError:
    context = {}
    if item_id:
        context["item_id"] = item_id
    if block_number is not None:
        context["block_number"] = block_number

    return ProcessingError(
        stage="classify",
        error_type=error_type,
        message=message,
        context=context if context else None
    )


def create_extract_error(
    error_type: str,
    message: str,
    item_id: Optional[str] = None,
    block_number: Optional[int] = None,
    tx_hash: Optional[EvmHash] = None,
) -> ProcessingError:
    context = {}
    if item_id:
        context["item_id"] = item_id
    if block_number is not None:
        context["block_number"] = block_number
    if tx_hash:
        context["tx_hash"] = tx_hash

    return ProcessingError(
        stage="extract",
        error_type=error_type,
        message=message,
        context=context if context else None
    )
