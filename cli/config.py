#!/usr/bin/env python3
"""
Configuration Management Module for the Open Assets CLI

Handles hierarchical configuration loading, environment variable mapping and
validation of the settings used to build transactions.
"""

import os
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional, List, Union

import yaml

# Configuration file locations in order of precedence (highest to lowest)
CONFIG_SEARCH_PATHS = [
    Path.cwd() / '.openassets.yml',
    Path.cwd() / '.openassets.json',
    Path.home() / '.openassets' / 'config.yml',
    Path.home() / '.openassets' / 'config.json',
]

# Environment variable prefix
ENV_PREFIX = 'OPENASSETS_'

# Default configuration values
DEFAULT_CONFIG = {
    'network': {
        'type': 'mainnet',  # mainnet, testnet, regtest
    },
    'builder': {
        'dust_amount': 600,
        'default_fees': 10000,
    },
    'cli': {
        'output_format': 'table',  # table, json, yaml
        'verbose': 0,
    },
}

# Configuration profiles
PROFILES = {
    'mainnet': {
        'network': {'type': 'mainnet'},
    },
    'testnet': {
        'network': {'type': 'testnet'},
        'builder': {'default_fees': 1000},
    },
    'regtest': {
        'network': {'type': 'regtest'},
        'builder': {'default_fees': 1000},
        'cli': {'verbose': 1},
    },
}


class ConfigurationManager:
    """Manages hierarchical configuration with environment variable support."""

    def __init__(self, config_file: Optional[str] = None, profile: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Explicit configuration file path
            profile: Configuration profile to load (mainnet, testnet, regtest)
        """
        self.logger = logging.getLogger('openassets-cli.config')
        self.config_file = config_file
        self.profile = profile
        self._config_cache = None
        self._config_sources = []

    def load(self) -> Dict[str, Any]:
        """
        Load configuration from all sources in hierarchical order.

        Returns:
            Merged configuration dictionary
        """
        if self._config_cache is not None:
            return self._config_cache

        configs = [DEFAULT_CONFIG]
        self._config_sources = ["defaults"]

        if self.profile:
            if self.profile not in PROFILES:
                raise ValueError(f"Unknown configuration profile: {self.profile}")
            configs.append(PROFILES[self.profile])
            self._config_sources.append(f"profile:{self.profile}")
            self.logger.debug(f"Applied profile: {self.profile}")

        if self.config_file:
            configs.append(self._load_config_file(Path(self.config_file)))
            self._config_sources.append(f"file:{self.config_file}")
        else:
            for config_path in CONFIG_SEARCH_PATHS:
                if config_path.exists():
                    configs.append(self._load_config_file(config_path))
                    self._config_sources.append(f"file:{config_path}")
                    self.logger.debug(f"Loaded config from {config_path}")
                    break  # Use first found config file

        env_config = self._load_environment_variables()
        if env_config:
            configs.append(env_config)
            self._config_sources.append("environment")

        # Later sources override earlier ones
        self._config_cache = self._deep_merge(*configs)
        return self._config_cache

    def _load_config_file(self, path: Path) -> Dict[str, Any]:
        """Load configuration from a YAML or JSON file."""
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, 'r') as f:
            if path.suffix in ['.yml', '.yaml']:
                data = yaml.safe_load(f)
            elif path.suffix == '.json':
                data = json.load(f)
            else:
                raise ValueError(f"Unknown config file format: {path}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {path}")
        return data

    def _load_environment_variables(self) -> Dict[str, Any]:
        """
        Load configuration from environment variables.

        The first segment after the prefix names the section, the rest the
        key: OPENASSETS_BUILDER_DUST_AMOUNT -> {'builder': {'dust_amount': ...}}
        """
        env_config = {}

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            parts = key[len(ENV_PREFIX):].lower().split('_', 1)
            if len(parts) != 2 or not all(parts):
                self.logger.warning(f"Ignoring environment variable without section: {key}")
                continue

            section, option = parts
            env_config.setdefault(section, {})[option] = self._parse_env_value(value)

        return env_config

    def _parse_env_value(self, value: str) -> Union[str, int, float, bool]:
        """Parse environment variable value to appropriate type."""
        if value.lower() in ['true', 'yes']:
            return True
        elif value.lower() in ['false', 'no']:
            return False

        try:
            if '.' in value:
                return float(value)
            return int(value)
        except ValueError:
            return value

    def _deep_merge(self, *dicts: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge multiple dictionaries."""
        result = {}

        for dictionary in dicts:
            for key, value in dictionary.items():
                if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                    result[key] = self._deep_merge(result[key], value)
                elif isinstance(value, dict):
                    result[key] = self._deep_merge(value)
                else:
                    result[key] = value

        return result

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        Args:
            key_path: Dot-separated path (e.g., 'builder.dust_amount')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        current = self.load()

        for key in key_path.split('.'):
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default

        return current

    def validate(self) -> List[str]:
        """
        Validate current configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        config = self.load()
        errors = []

        network_type = config.get('network', {}).get('type')
        if network_type not in ['mainnet', 'testnet', 'regtest']:
            errors.append(f"Invalid network type: {network_type}")

        dust_amount = config.get('builder', {}).get('dust_amount')
        if not isinstance(dust_amount, int) or isinstance(dust_amount, bool) or dust_amount <= 0:
            errors.append(f"Dust amount must be a positive integer: {dust_amount}")

        default_fees = config.get('builder', {}).get('default_fees')
        if not isinstance(default_fees, int) or isinstance(default_fees, bool) or default_fees < 0:
            errors.append(f"Default fees must be a non-negative integer: {default_fees}")

        output_format = config.get('cli', {}).get('output_format')
        if output_format not in ['table', 'json', 'yaml']:
            errors.append(f"Invalid output format: {output_format}")

        return errors

    def get_sources(self) -> List[str]:
        """Get list of configuration sources that were loaded."""
        self.load()
        return self._config_sources

    def reset(self):
        """Reset configuration cache."""
        self._config_cache = None
        self._config_sources = []
