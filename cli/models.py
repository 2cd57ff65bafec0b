"""
Open Assets CLI - Input Models

Pydantic models validating the unspent output files read by the transaction
commands.

Example file::

    {
      "unspent_outputs": [
        {"txid": "<64 hex>", "vout": 0, "value": 100000, "script": "76a914...88ac"},
        {"txid": "<64 hex>", "vout": 1, "value": 600, "script": "76a914...88ac",
         "asset_id": "ALn3aK1fSuG27N96UGYB1kUYUpGKRhBuBC", "asset_quantity": 50}
      ]
    }
"""

import re
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from protocol.marker_output import MAX_ASSET_QUANTITY
from transaction.models import OutPoint, SpendableOutput, TransactionOutput


class UnspentOutputModel(BaseModel):
    """An unspent output as found in an input file."""

    txid: str = Field(..., description="Transaction ID (hex)")
    vout: int = Field(..., ge=0, le=0xffffffff, description="Output index")
    value: int = Field(..., ge=0, description="Output value in satoshis")
    script: str = Field(..., description="Output script (hex)")
    asset_id: Optional[str] = Field(None, description="Asset ID, absent for uncolored outputs")
    asset_quantity: int = Field(0, ge=0, le=MAX_ASSET_QUANTITY)

    @field_validator('txid')
    @classmethod
    def validate_txid(cls, v):
        """Validate transaction ID format."""
        if not re.match(r'^[a-fA-F0-9]{64}$', v):
            raise ValueError('Transaction ID must be 64-character hex string')
        return v.lower()

    @field_validator('script')
    @classmethod
    def validate_script(cls, v):
        """Validate script hex."""
        try:
            bytes.fromhex(v)
        except ValueError:
            raise ValueError('Script must be a hex string')
        return v.lower()

    @model_validator(mode='after')
    def validate_coloring(self):
        """Asset quantities only make sense on colored outputs."""
        if self.asset_id is None and self.asset_quantity:
            raise ValueError('Uncolored output cannot carry an asset quantity')
        return self

    def to_spendable(self) -> SpendableOutput:
        return SpendableOutput(
            OutPoint(self.txid, self.vout),
            TransactionOutput(
                value=self.value,
                script=bytes.fromhex(self.script),
                asset_id=self.asset_id,
                asset_quantity=self.asset_quantity
            )
        )


class UnspentOutputSet(BaseModel):
    """Contents of an unspent output file."""

    unspent_outputs: List[UnspentOutputModel] = Field(default_factory=list)

    def to_spendables(self) -> List[SpendableOutput]:
        return [output.to_spendable() for output in self.unspent_outputs]
