# staking_indexer/database/types.py

from decimal import Decimal
from typing import Optional

from sqlalchemy import Numeric, String
from sqlalchemy.types import TypeDecorator

from ..types.new import EvmAddress, EvmHash, PublicKey

AMOUNT_PRECISION = 78  # uint256 fits in 78 decimal digits


class EvmAddressType(TypeDecorator):
    impl = String(42)
    cache_ok = True

    def process_bind_param(self, value: Optional[EvmAddress], dialect) -> Optional[str]:
        return str(value).lower() if value else None

    def process_result_value(self, value: Optional[str], dialect) -> Optional[EvmAddress]:
        return EvmAddress(value) if value else None


class EvmHashType(TypeDecorator):
    impl = String(66)
    cache_ok = True

    def process_bind_param(self, value: Optional[EvmHash], dialect) -> Optional[str]:
        return str(value).lower() if value else None

    def process_result_value(self, value: Optional[str], dialect) -> Optional[EvmHash]:
        return EvmHash(value) if value else None


class PublicKeyType(TypeDecorator):
    impl = String(66)
    cache_ok = True

    def process_bind_param(self, value: Optional[PublicKey], dialect) -> Optional[str]:
        return str(value).lower() if value else None

    def process_result_value(self, value: Optional[str], dialect) -> Optional[PublicKey]:
        return PublicKey(value) if value else None


class AmountType(TypeDecorator):
    """Signed integer amount stored as NUMERIC(78, 0); text on SQLite to keep precision"""
    impl = Numeric(AMOUNT_PRECISION, 0)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(AMOUNT_PRECISION + 2))
        return dialect.type_descriptor(Numeric(AMOUNT_PRECISION, 0))

    def process_bind_param(self, value: Optional[int], dialect):
        if value is None:
            return None
        if dialect.name == "sqlite":
            return str(int(value))
        return Decimal(int(value))

    def process_result_value(self, value, dialect) -> Optional[int]:
        if value is None:
            return None
        return int(value)
