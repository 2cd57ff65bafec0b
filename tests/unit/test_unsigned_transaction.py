"""
Tests for Unsigned Transaction Serialization
"""

import base64

import pytest

from transaction.unsigned import (
    UnsignedTransaction,
    TxOut,
    build_transaction,
    double_sha256,
    serialize_compact_size,
    varbytes
)


TXID = "11" * 31 + "22"


class TestCompactSize:
    """Test Bitcoin compact size integers."""

    @pytest.mark.parametrize("value,encoded", [
        (0, "00"),
        (0xfc, "fc"),
        (0xfd, "fdfd00"),
        (0xffff, "fdffff"),
        (0x10000, "fe00000100"),
        (0x100000000, "ff0000000001000000"),
    ])
    def test_encoding(self, value, encoded):
        assert serialize_compact_size(value).hex() == encoded

    def test_varbytes(self):
        assert varbytes(b'\x6a') == b'\x01\x6a'
        assert varbytes(b'') == b'\x00'


class TestUnsignedTransaction:
    """Test UnsignedTransaction serialization."""

    def setup_method(self):
        """Set up a one-input one-output transaction."""
        self.tx = UnsignedTransaction()
        self.tx.add_input(TXID, 1, script_sig=b'\x51', value=5000, prev_script=b'\x51')
        self.tx.add_output(1000, b'\x6a')

    def test_serialize(self):
        """Test the legacy serialization layout."""
        expected = (
            "01000000"
            "01"
            + "22" + "11" * 31 +
            "01000000"
            "0151"
            "ffffffff"
            "01"
            "e803000000000000"
            "016a"
            "00000000"
        )
        assert self.tx.to_hex() == expected

    def test_serialize_without_script_sigs(self):
        unsigned = self.tx.serialize(include_script_sigs=False)
        assert b'\x00\xff\xff\xff\xff' in unsigned
        assert len(unsigned) == len(self.tx.serialize()) - 1

    def test_transaction_id(self):
        """Test the ID hashes the transaction with empty script_sigs."""
        expected = double_sha256(self.tx.serialize(include_script_sigs=False))[::-1].hex()

        assert self.tx.get_transaction_id() == expected
        assert len(expected) == 64

    def test_transaction_id_ignores_script_sigs(self):
        other = UnsignedTransaction()
        other.add_input(TXID, 1, script_sig=b'\x52\x53')
        other.add_output(1000, b'\x6a')

        assert other.get_transaction_id() == self.tx.get_transaction_id()

    def test_negative_output(self):
        with pytest.raises(ValueError, match="cannot be negative"):
            self.tx.add_output(-1, b'\x6a')

    def test_total_output_value(self):
        self.tx.add_output(250, b'\x51')
        assert self.tx.total_output_value == 1250

    def test_psbt_layout(self):
        """Test the BIP-174 global, input and output maps."""
        psbt = self.tx.to_psbt()
        unsigned = self.tx.serialize(include_script_sigs=False)

        expected = b'psbt\xff'
        expected += varbytes(b'\x00') + varbytes(unsigned)
        expected += varbytes(b'\xfb') + varbytes(b'\x00\x00\x00\x00')
        expected += b'\x00'
        expected += varbytes(b'\x01') + varbytes(TxOut(5000, b'\x51').serialize())
        expected += b'\x00'
        expected += b'\x00'

        assert psbt == expected

    def test_psbt_input_without_value(self):
        """Test inputs of unknown value get an empty map."""
        tx = UnsignedTransaction()
        tx.add_input(TXID, 0)
        tx.add_output(1000, b'\x6a')

        unsigned = tx.serialize(include_script_sigs=False)
        assert tx.to_psbt().endswith(varbytes(unsigned) + varbytes(b'\xfb') + varbytes(b'\x00' * 4) + b'\x00\x00\x00')

    def test_base64(self):
        assert base64.b64decode(self.tx.to_base64()) == self.tx.to_psbt()
        assert self.tx.to_base64().startswith("cHNidP8")

    def test_repr(self):
        assert repr(self.tx) == "UnsignedTransaction(inputs=1, outputs=1)"


class TestBuildTransaction:
    """Test building transactions from spendable outputs."""

    def test_inputs_carry_spent_output(self, uncolored):
        spendable = uncolored(7, 12345)

        tx = build_transaction([spendable], [TxOut(12000, b'\x6a')])

        tx_in = tx.inputs[0]
        assert tx_in.prev_txid == spendable.out_point.txid
        assert tx_in.output_n == 0
        assert tx_in.script_sig == spendable.output.script
        assert tx_in.value == 12345
        assert tx.outputs[0].value == 12000

    def test_version_and_locktime(self):
        tx = build_transaction([], [], version=2, locktime=500000)

        assert tx.to_hex() == "02000000" "00" "00" "20a10700"
