"""
Tests for CLI Configuration Management
"""

import json
import os

import pytest
import yaml

from cli import config as config_module
from cli.config import ConfigurationManager, DEFAULT_CONFIG


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep the host's config files and environment out of the tests."""
    monkeypatch.setattr(config_module, 'CONFIG_SEARCH_PATHS', [tmp_path / '.openassets.yml'])
    for key in list(os.environ):
        if key.startswith(config_module.ENV_PREFIX):
            monkeypatch.delenv(key)


class TestConfigurationManager:
    """Test hierarchical configuration loading."""

    def test_defaults(self):
        manager = ConfigurationManager()

        assert manager.get('builder.dust_amount') == 600
        assert manager.get('builder.default_fees') == 10000
        assert manager.get('network.type') == 'mainnet'
        assert manager.get_sources() == ['defaults']
        assert manager.validate() == []

    def test_missing_key_default(self):
        manager = ConfigurationManager()

        assert manager.get('builder.unknown', 'fallback') == 'fallback'
        assert manager.get('nothing.here') is None

    def test_profile(self):
        manager = ConfigurationManager(profile='testnet')

        assert manager.get('network.type') == 'testnet'
        assert manager.get('builder.default_fees') == 1000
        assert manager.get('builder.dust_amount') == 600
        assert 'profile:testnet' in manager.get_sources()

    def test_unknown_profile(self):
        with pytest.raises(ValueError, match="Unknown configuration profile"):
            ConfigurationManager(profile='simnet').load()

    def test_yaml_file(self, tmp_path):
        path = tmp_path / 'custom.yml'
        path.write_text(yaml.dump({'builder': {'dust_amount': 1000}}))

        manager = ConfigurationManager(config_file=str(path))

        assert manager.get('builder.dust_amount') == 1000
        assert manager.get('builder.default_fees') == 10000

    def test_json_file_overrides_profile(self, tmp_path):
        path = tmp_path / 'custom.json'
        path.write_text(json.dumps({'builder': {'default_fees': 2500}}))

        manager = ConfigurationManager(config_file=str(path), profile='regtest')

        assert manager.get('builder.default_fees') == 2500
        assert manager.get('network.type') == 'regtest'

    def test_search_path(self, tmp_path):
        (tmp_path / '.openassets.yml').write_text("cli:\n  output_format: json\n")

        manager = ConfigurationManager()

        assert manager.get('cli.output_format') == 'json'
        assert f"file:{tmp_path / '.openassets.yml'}" in manager.get_sources()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigurationManager(config_file=str(tmp_path / 'missing.yml')).load()

    def test_unknown_file_format(self, tmp_path):
        path = tmp_path / 'config.ini'
        path.write_text("[builder]\n")

        with pytest.raises(ValueError, match="Unknown config file format"):
            ConfigurationManager(config_file=str(path)).load()

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / 'custom.yml'
        path.write_text(yaml.dump({'builder': {'dust_amount': 1000}}))
        monkeypatch.setenv('OPENASSETS_BUILDER_DUST_AMOUNT', '800')
        monkeypatch.setenv('OPENASSETS_NETWORK_TYPE', 'regtest')

        manager = ConfigurationManager(config_file=str(path))

        assert manager.get('builder.dust_amount') == 800
        assert manager.get('network.type') == 'regtest'
        assert manager.get_sources()[-1] == 'environment'

    def test_env_value_parsing(self):
        manager = ConfigurationManager()

        assert manager._parse_env_value('true') is True
        assert manager._parse_env_value('No') is False
        assert manager._parse_env_value('42') == 42
        assert manager._parse_env_value('1.5') == 1.5
        assert manager._parse_env_value('json') == 'json'

    def test_validate_errors(self, monkeypatch):
        monkeypatch.setenv('OPENASSETS_BUILDER_DUST_AMOUNT', '0')
        monkeypatch.setenv('OPENASSETS_BUILDER_DEFAULT_FEES', '-1')
        monkeypatch.setenv('OPENASSETS_CLI_OUTPUT_FORMAT', 'xml')

        errors = ConfigurationManager().validate()

        assert len(errors) == 3
        assert any("Dust amount" in error for error in errors)
        assert any("Default fees" in error for error in errors)
        assert any("output format" in error for error in errors)

    def test_defaults_not_mutated(self, monkeypatch):
        monkeypatch.setenv('OPENASSETS_BUILDER_DUST_AMOUNT', '900')

        ConfigurationManager().load()

        assert DEFAULT_CONFIG['builder']['dust_amount'] == 600

    def test_reset(self, monkeypatch):
        manager = ConfigurationManager()
        assert manager.get('builder.dust_amount') == 600

        monkeypatch.setenv('OPENASSETS_BUILDER_DUST_AMOUNT', '700')
        assert manager.get('builder.dust_amount') == 600

        manager.reset()
        assert manager.get('builder.dust_amount') == 700
