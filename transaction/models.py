"""
Open Assets Protocol - Transaction Data Model

This module defines the spendable outputs and transfer descriptors consumed by
the transaction builder.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from .exceptions import TransactionBuilderError


AssetId = Union[bytes, str]
ScriptOrAddress = Union[bytes, str]

_TXID_PATTERN = re.compile(r'^[0-9a-fA-F]{64}$')


@dataclass(frozen=True)
class OutPoint:
    """Reference to an output of a previous transaction."""
    txid: str
    index: int

    def __post_init__(self):
        if not isinstance(self.txid, str) or not _TXID_PATTERN.match(self.txid):
            raise ValueError(f"Transaction ID must be a 64-character hex string: {self.txid!r}")
        if self.index < 0 or self.index > 0xffffffff:
            raise ValueError(f"Output index out of range: {self.index}")


@dataclass(frozen=True)
class TransactionOutput:
    """
    A transaction output together with its Open Assets coloring.

    ``asset_id`` is None for uncolored outputs; ``asset_quantity`` is only
    meaningful for colored outputs.
    """
    value: int
    script: bytes
    asset_id: Optional[AssetId] = None
    asset_quantity: int = 0

    @property
    def is_colored(self) -> bool:
        return self.asset_id is not None


@dataclass(frozen=True)
class SpendableOutput:
    """An unspent output available as a transaction input."""
    out_point: OutPoint
    output: TransactionOutput


@dataclass
class TransferParameters:
    """
    Parameters of a bitcoin or asset transfer.

    ``amount`` is an asset quantity for asset transfers and a satoshi value for
    bitcoin transfers. It is split across ``output_qty`` destination outputs.
    """
    unspent_outputs: Sequence[SpendableOutput]
    to_script: Optional[ScriptOrAddress]
    change_script: Optional[ScriptOrAddress]
    amount: int
    output_qty: int = 1

    def __post_init__(self):
        """Validate transfer parameters."""
        if self.amount < 0:
            raise TransactionBuilderError(f"Transfer amount cannot be negative: {self.amount}")

        if self.output_qty < 1:
            raise TransactionBuilderError(f"Output quantity must be at least 1: {self.output_qty}")

    @property
    def split_output_amount(self) -> List[int]:
        """
        Split the amount across the destination outputs.

        Every output receives ``amount // output_qty``; the last one also
        receives the remainder.
        """
        base, remainder = divmod(self.amount, self.output_qty)
        split_amounts = [base] * self.output_qty
        split_amounts[-1] += remainder
        return split_amounts
