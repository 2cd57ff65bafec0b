"""
Pytest configuration and fixtures for Open Assets tests.
"""

import json

import pytest

from transaction.address import create_p2pkh_script
from transaction.builder import TransactionBuilder
from transaction.models import OutPoint, SpendableOutput, TransactionOutput


def make_txid(n: int) -> str:
    """Deterministic transaction ID for test outputs."""
    return f"{n:064x}"


def make_script(n: int) -> bytes:
    """Deterministic P2PKH script for test outputs."""
    return create_p2pkh_script(bytes([n]) * 20)


@pytest.fixture
def uncolored():
    """Factory for uncolored spendable outputs."""
    def _uncolored(n: int, value: int) -> SpendableOutput:
        return SpendableOutput(
            OutPoint(make_txid(n), 0),
            TransactionOutput(value, make_script(n))
        )
    return _uncolored


@pytest.fixture
def colored():
    """Factory for colored spendable outputs."""
    def _colored(n: int, asset_id: str, quantity: int, value: int = 600) -> SpendableOutput:
        return SpendableOutput(
            OutPoint(make_txid(n), 1),
            TransactionOutput(value, make_script(n), asset_id, quantity)
        )
    return _colored


@pytest.fixture
def builder():
    """Transaction builder with the default 600 satoshi output amount."""
    return TransactionBuilder(600)


@pytest.fixture
def to_script():
    return make_script(0xaa)


@pytest.fixture
def change_script():
    return make_script(0xbb)


@pytest.fixture
def utxo_file(tmp_path):
    """Write an unspent output file and return its path."""
    def _write(unspent_outputs):
        path = tmp_path / "utxos.json"
        path.write_text(json.dumps({"unspent_outputs": unspent_outputs}))
        return str(path)
    return _write
