"""
Tests for the Open Assets Command Line Interface
"""

import json
import logging
import os

import pytest
import yaml
from click.testing import CliRunner

from cli import config as config_module
from cli.context import LOGGER_NAMES
from cli.main import cli


BTC_ADDRESS = "16UwLL9Risc3QfPqBUvKofHmBQ7wMtjvM"
OA_ADDRESS = "akB4NBW9UuCmHuepksob6yfZs6naHtRCPNy"
CHANGE_ADDRESS = "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa"
ASSET_ID = "ALn3aK1fSuG27N96UGYB1kUYUpGKRhBuBC"
P2PKH_SCRIPT = "76a914" + "33" * 20 + "88ac"
METADATA = "u=https://cpr.sm/5YgSU1Pg-q"


@pytest.fixture(autouse=True)
def isolated_cli(monkeypatch, tmp_path):
    """Isolate configuration lookup and restore logger handlers."""
    monkeypatch.setattr(config_module, 'CONFIG_SEARCH_PATHS', [tmp_path / '.openassets.yml'])
    for key in list(os.environ):
        if key.startswith(config_module.ENV_PREFIX):
            monkeypatch.delenv(key)

    yield

    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.handlers = []
        logger.setLevel(logging.NOTSET)


def utxo(n, value, asset_id=None, asset_quantity=0):
    entry = {"txid": f"{n:064x}", "vout": 0, "value": value, "script": P2PKH_SCRIPT}
    if asset_id is not None:
        entry["asset_id"] = asset_id
        entry["asset_quantity"] = asset_quantity
    return entry


class TestCLIBasics:
    """Test global options."""

    def setup_method(self):
        self.runner = CliRunner()

    def test_version(self):
        result = self.runner.invoke(cli, ['--version'])

        assert result.exit_code == 0
        assert "Open Assets CLI v1.0.0" in result.output

    def test_help(self):
        result = self.runner.invoke(cli, ['--help'])

        assert result.exit_code == 0
        assert "marker" in result.output
        assert "tx" in result.output

    def test_missing_config_file(self, tmp_path):
        result = self.runner.invoke(
            cli, ['-c', str(tmp_path / 'missing.yml'), 'marker', 'decode', '4f4101000000'])

        assert result.exit_code == 2
        assert "Config file not found" in result.output

    def test_invalid_config(self, tmp_path):
        path = tmp_path / 'bad.yml'
        path.write_text("builder:\n  dust_amount: -5\n")

        result = self.runner.invoke(cli, ['-c', str(path), 'marker', 'decode', '4f4101000000'])

        assert result.exit_code == 2
        assert "Dust amount must be a positive integer" in result.output


class TestMarkerCommands:
    """Test marker encode, decode and parse-script."""

    def setup_method(self):
        self.runner = CliRunner()

    def test_encode(self):
        result = self.runner.invoke(
            cli, ['-o', 'json', 'marker', 'encode', '-q', '10000', '-m', METADATA])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["payload"] == (
            "4f41010001904e1b753d68747470733a2f2f6370722e736d2f35596753553150672d71"
        )
        assert data["script"].startswith("6a23")

    def test_encode_empty(self):
        result = self.runner.invoke(cli, ['-o', 'json', 'marker', 'encode'])

        assert result.exit_code == 0
        assert json.loads(result.output)["payload"] == "4f4101000000"

    def test_decode(self):
        result = self.runner.invoke(cli, ['-o', 'json', 'marker', 'decode', '4f41010001904e00'])

        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "asset_quantities": [10000],
            "metadata_hex": "",
            "metadata": "",
        }

    def test_decode_yaml(self):
        result = self.runner.invoke(cli, ['-o', 'yaml', 'marker', 'decode', '4f41010002014400'])

        assert result.exit_code == 0
        assert yaml.safe_load(result.output)["asset_quantities"] == [1, 68]

    def test_decode_table(self):
        result = self.runner.invoke(cli, ['marker', 'decode', '4f41010002014400'])

        assert result.exit_code == 0
        assert "asset_quantities" in result.output
        assert "1, 68" in result.output

    def test_decode_malformed(self):
        result = self.runner.invoke(cli, ['marker', 'decode', '4f41010001904e00ff'])

        assert result.exit_code == 1
        assert "Error: Unexpected 1 trailing bytes" in result.output
        assert "Use -vv for detailed error information." in result.output

    def test_decode_not_hex(self):
        result = self.runner.invoke(cli, ['marker', 'decode', 'zz'])

        assert result.exit_code == 2
        assert "must be a hex string" in result.output

    def test_parse_script(self):
        result = self.runner.invoke(cli, ['-o', 'json', 'marker', 'parse-script', '6a084f41010002014400'])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["payload"] == "4f41010002014400"
        assert data["asset_quantities"] == [1, 68]

    def test_parse_script_not_marker(self):
        result = self.runner.invoke(cli, ['marker', 'parse-script', '6a04deadbeef'])

        assert result.exit_code == 2
        assert "No marker output found" in result.output


class TestTxCommands:
    """Test transaction building commands."""

    def setup_method(self):
        self.runner = CliRunner()

    def invoke_json(self, args):
        result = self.runner.invoke(cli, ['-o', 'json'] + args)
        assert result.exit_code == 0, result.output
        return json.loads(result.output)

    def test_send_btc(self, utxo_file):
        path = utxo_file([utxo(1, 10000)])

        data = self.invoke_json([
            'tx', 'send-btc', '-u', path, '--to', BTC_ADDRESS, '--change', CHANGE_ADDRESS,
            '--amount', '3000', '--fees', '1000'])

        assert data["inputs"] == 1
        assert data["output_values"] == [6000, 3000]
        assert len(data["txid"]) == 64
        assert data["psbt"].startswith("cHNidP8")
        assert data["hex"].startswith("01000000")

    def test_send_btc_default_fees(self, utxo_file):
        path = utxo_file([utxo(1, 20000)])

        data = self.invoke_json([
            'tx', 'send-btc', '-u', path, '--to', BTC_ADDRESS, '--change', CHANGE_ADDRESS,
            '--amount', '3000'])

        assert data["output_values"] == [7000, 3000]

    def test_issue(self, utxo_file):
        path = utxo_file([utxo(1, 10000)])

        data = self.invoke_json([
            'tx', 'issue', '-u', path, '--to', OA_ADDRESS, '--change', CHANGE_ADDRESS,
            '-q', '10000', '-m', METADATA, '--fees', '1000'])

        assert data["outputs"] == 3
        assert data["output_values"] == [600, 0, 8400]
        assert "4f41010001904e1b" in data["hex"]

    def test_issue_dust_amount_from_config(self, utxo_file, tmp_path):
        path = utxo_file([utxo(1, 10000)])
        config_path = tmp_path / 'config.yml'
        config_path.write_text("builder:\n  dust_amount: 1000\n  default_fees: 500\n")

        data = self.invoke_json([
            '-c', str(config_path), 'tx', 'issue', '-u', path, '--to', OA_ADDRESS,
            '--change', CHANGE_ADDRESS, '-q', '5'])

        assert data["output_values"] == [1000, 0, 8500]

    def test_transfer(self, utxo_file):
        path = utxo_file([utxo(1, 600, ASSET_ID, 100), utxo(2, 10000)])

        data = self.invoke_json([
            'tx', 'transfer', '-u', path, '-a', ASSET_ID, '--to', OA_ADDRESS,
            '--change', CHANGE_ADDRESS, '-q', '60', '--fees', '1000'])

        assert data["inputs"] == 2
        assert data["output_values"] == [0, 600, 600, 8400]

    def test_insufficient_funds(self, utxo_file):
        path = utxo_file([utxo(1, 1000)])

        result = self.runner.invoke(cli, [
            'tx', 'send-btc', '-u', path, '--to', BTC_ADDRESS, '--change', CHANGE_ADDRESS,
            '--amount', '3000', '--fees', '1000'])

        assert result.exit_code == 1
        assert "Insufficient funds" in result.output

    def test_invalid_address(self, utxo_file):
        path = utxo_file([utxo(1, 10000)])

        result = self.runner.invoke(cli, [
            'tx', 'send-btc', '-u', path, '--to', 'bogus', '--change', CHANGE_ADDRESS,
            '--amount', '3000'])

        assert result.exit_code == 1
        assert "Invalid address 'bogus'" in result.output

    def test_invalid_utxo_file(self, utxo_file):
        path = utxo_file([{"txid": "xyz", "vout": 0, "value": 1000, "script": P2PKH_SCRIPT}])

        result = self.runner.invoke(cli, [
            'tx', 'send-btc', '-u', path, '--to', BTC_ADDRESS, '--change', CHANGE_ADDRESS,
            '--amount', '3000'])

        assert result.exit_code == 1
        assert "64-character hex string" in result.output

    def test_uncolored_with_quantity(self, utxo_file):
        entry = utxo(1, 10000)
        entry["asset_quantity"] = 5
        path = utxo_file([entry])

        result = self.runner.invoke(cli, [
            'tx', 'send-btc', '-u', path, '--to', BTC_ADDRESS, '--change', CHANGE_ADDRESS,
            '--amount', '3000'])

        assert result.exit_code == 1
        assert "cannot carry an asset quantity" in result.output
