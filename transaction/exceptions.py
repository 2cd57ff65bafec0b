"""
Open Assets Protocol - Transaction Builder Exceptions

This module defines custom exceptions raised while selecting inputs and
constructing Open Assets transactions.
"""

from typing import Any, Optional


def _format_asset_id(asset_id: Any) -> str:
    if isinstance(asset_id, (bytes, bytearray)):
        return bytes(asset_id).hex()
    return str(asset_id)


class TransactionBuilderError(Exception):
    """Base exception for errors raised while building a transaction."""
    pass


class InsufficientFundsError(TransactionBuilderError):
    """Exception raised when the uncolored outputs cannot cover the requested value."""

    def __init__(self, required: int, available: int, message: Optional[str] = None):
        self.required = required
        self.available = available
        if message is None:
            message = f"Insufficient funds: required {required} satoshis, available {available} satoshis"
        super().__init__(message)


class InsufficientAssetQuantityError(TransactionBuilderError):
    """Exception raised when the colored outputs cannot cover the requested asset quantity."""

    def __init__(self, asset_id: Any, required: int, available: int, message: Optional[str] = None):
        self.asset_id = asset_id
        self.required = required
        self.available = available
        if message is None:
            message = (
                f"Insufficient quantity of asset {_format_asset_id(asset_id)}: "
                f"required {required}, available {available}"
            )
        super().__init__(message)


class DustOutputError(TransactionBuilderError):
    """Exception raised when an uncolored output would be below the dust floor."""

    def __init__(self, value: int, dust_amount: int):
        self.value = value
        self.dust_amount = dust_amount
        super().__init__(f"Output value {value} is below the dust floor of {dust_amount} satoshis")


class InvalidAddressError(TransactionBuilderError):
    """Exception raised for a malformed or unsupported destination address."""

    def __init__(self, address: Any, reason: str = "malformed address"):
        self.address = address
        super().__init__(f"Invalid address {address!r}: {reason}")
