"""
Open Assets Protocol - Unsigned Transaction

This module provides the unsigned transaction object produced by the
transaction builder, with raw serialization and BIP-174 PSBT export so the
transaction can be handed to an external signer.
"""

import base64
import hashlib
import struct
from dataclasses import dataclass, field
from enum import Enum
from io import BytesIO
from typing import List, Optional, Sequence

from .models import SpendableOutput


def serialize_compact_size(n: int) -> bytes:
    """
    Serialize integer as Bitcoin compact size.

    Args:
        n: Integer to serialize

    Returns:
        Compact size encoded bytes
    """
    if n < 0xfd:
        return struct.pack('<B', n)
    elif n <= 0xffff:
        return b'\xfd' + struct.pack('<H', n)
    elif n <= 0xffffffff:
        return b'\xfe' + struct.pack('<I', n)
    else:
        return b'\xff' + struct.pack('<Q', n)


def varbytes(data: bytes) -> bytes:
    """Serialize bytes with a compact size length prefix."""
    return serialize_compact_size(len(data)) + data


def double_sha256(data: bytes) -> bytes:
    """Calculate double SHA256 hash (used for transaction IDs)."""
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


class PSBTKeyType(Enum):
    """PSBT key types as defined in BIP-174."""
    PSBT_GLOBAL_UNSIGNED_TX = 0x00
    PSBT_GLOBAL_VERSION = 0xfb
    PSBT_IN_WITNESS_UTXO = 0x01


@dataclass
class PSBTKeyValue:
    """Represents a key-value pair in PSBT format."""
    key_type: int
    key_data: bytes = field(default_factory=bytes)
    value: bytes = field(default_factory=bytes)

    def serialize(self) -> bytes:
        """Serialize key-value pair to PSBT format."""
        key = bytes([self.key_type]) + self.key_data
        return varbytes(key) + varbytes(self.value)


@dataclass
class TxIn:
    """Input of an unsigned transaction."""
    prev_txid: str
    output_n: int
    script_sig: bytes = b''
    sequence: int = 0xffffffff
    value: Optional[int] = None
    prev_script: bytes = b''

    def serialize(self, include_script_sig: bool = True) -> bytes:
        # Previous outpoint, txid in little endian
        data = bytes.fromhex(self.prev_txid)[::-1]
        data += struct.pack('<I', self.output_n)
        data += varbytes(self.script_sig if include_script_sig else b'')
        data += struct.pack('<I', self.sequence)
        return data


@dataclass
class TxOut:
    """Output of an unsigned transaction."""
    value: int
    script: bytes

    def serialize(self) -> bytes:
        return struct.pack('<Q', self.value) + varbytes(self.script)


class UnsignedTransaction:
    """
    An unsigned Bitcoin transaction.

    Each input's script_sig holds the output script being spent, the
    placeholder signers replace when signing legacy inputs.
    """

    def __init__(self, version: int = 1, locktime: int = 0):
        """
        Initialize an empty transaction.

        Args:
            version: Transaction version (default: 1)
            locktime: Transaction locktime (default: 0)
        """
        self.version = version
        self.locktime = locktime
        self.inputs: List[TxIn] = []
        self.outputs: List[TxOut] = []

    def add_input(
        self,
        txid: str,
        vout: int,
        script_sig: bytes = b'',
        sequence: int = 0xffffffff,
        value: Optional[int] = None,
        prev_script: bytes = b''
    ) -> None:
        """
        Add an input to the transaction.

        Args:
            txid: Transaction ID of the output to spend
            vout: Output index of the output to spend
            script_sig: Unlocking script placeholder
            sequence: Sequence number
            value: Value of the spent output, if known
            prev_script: Script of the spent output, if known
        """
        self.inputs.append(TxIn(txid, vout, script_sig, sequence, value, prev_script))

    def add_output(self, value: int, script: bytes) -> None:
        """
        Add an output to the transaction.

        Args:
            value: Amount in satoshis
            script: Output script
        """
        if value < 0:
            raise ValueError(f"Output value cannot be negative: {value}")
        self.outputs.append(TxOut(value, script))

    def serialize(self, include_script_sigs: bool = True) -> bytes:
        """
        Serialize the transaction in the legacy (non-witness) format.

        Args:
            include_script_sigs: Write the input script_sig placeholders;
                when False every script_sig is empty, as PSBT requires

        Returns:
            Serialized transaction
        """
        result = BytesIO()
        result.write(struct.pack('<I', self.version))

        result.write(serialize_compact_size(len(self.inputs)))
        for tx_in in self.inputs:
            result.write(tx_in.serialize(include_script_sigs))

        result.write(serialize_compact_size(len(self.outputs)))
        for tx_out in self.outputs:
            result.write(tx_out.serialize())

        result.write(struct.pack('<I', self.locktime))
        return result.getvalue()

    def to_hex(self) -> str:
        return self.serialize().hex()

    def get_transaction_id(self) -> str:
        """
        Get the transaction ID of the transaction with empty script_sigs.

        Returns:
            Transaction ID as hex string
        """
        tx_hash = double_sha256(self.serialize(include_script_sigs=False))
        # Reverse bytes for display (big endian)
        return tx_hash[::-1].hex()

    @property
    def total_output_value(self) -> int:
        return sum(tx_out.value for tx_out in self.outputs)

    def to_psbt(self) -> bytes:
        """
        Serialize the transaction as a BIP-174 PSBT.

        Inputs whose spent value is known carry a witness UTXO record.

        Returns:
            Serialized PSBT
        """
        result = BytesIO()
        result.write(b'psbt\xff')

        # Global map
        kv = PSBTKeyValue(PSBTKeyType.PSBT_GLOBAL_UNSIGNED_TX.value, b'',
                          self.serialize(include_script_sigs=False))
        result.write(kv.serialize())
        kv = PSBTKeyValue(PSBTKeyType.PSBT_GLOBAL_VERSION.value, b'', struct.pack('<I', 0))
        result.write(kv.serialize())
        result.write(b'\x00')

        for tx_in in self.inputs:
            if tx_in.value is not None:
                utxo = TxOut(tx_in.value, tx_in.prev_script).serialize()
                kv = PSBTKeyValue(PSBTKeyType.PSBT_IN_WITNESS_UTXO.value, b'', utxo)
                result.write(kv.serialize())
            result.write(b'\x00')

        for _ in self.outputs:
            result.write(b'\x00')

        return result.getvalue()

    def to_base64(self) -> str:
        """
        Serialize the transaction as a base64 PSBT.

        Returns:
            Base64-encoded PSBT string
        """
        return base64.b64encode(self.to_psbt()).decode('ascii')

    def __repr__(self):
        return f"UnsignedTransaction(inputs={len(self.inputs)}, outputs={len(self.outputs)})"


def build_transaction(
    inputs: Sequence[SpendableOutput],
    outputs: Sequence[TxOut],
    version: int = 1,
    locktime: int = 0
) -> UnsignedTransaction:
    """
    Build an unsigned transaction spending the given outputs.

    Args:
        inputs: Spendable outputs to consume, in order
        outputs: Outputs to create, in order
        version: Transaction version
        locktime: Transaction locktime

    Returns:
        Unsigned transaction
    """
    tx = UnsignedTransaction(version, locktime)
    for spendable in inputs:
        tx.add_input(
            spendable.out_point.txid,
            spendable.out_point.index,
            script_sig=spendable.output.script,
            value=spendable.output.value,
            prev_script=spendable.output.script
        )
    for tx_out in outputs:
        tx.add_output(tx_out.value, tx_out.script)
    return tx
