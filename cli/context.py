"""
Open Assets CLI - Shared Context

Global CLI context shared by the command groups: logging, configuration,
output formatting and error reporting.
"""

import sys
import json
import logging
import traceback
from functools import wraps
from typing import Any, Dict, Optional

import click
import yaml

from protocol.exceptions import ProtocolError
from transaction.exceptions import TransactionBuilderError

from .config import ConfigurationManager


# Loggers configured by the CLI: its own and the library packages
LOGGER_NAMES = ('openassets-cli', 'protocol', 'transaction')


class CLIContext:
    """Global CLI context for sharing state across commands."""

    def __init__(self):
        self.config_file: Optional[str] = None
        self.profile: Optional[str] = None
        self.output_format: Optional[str] = None
        self.verbose: int = 0
        self.config_manager: Optional[ConfigurationManager] = None
        self.logger: logging.Logger = logging.getLogger('openassets-cli')

    def setup_logging(self):
        """Configure logging based on verbosity level."""
        log_levels = {
            0: logging.WARNING,
            1: logging.INFO,
            2: logging.DEBUG
        }

        level = log_levels.get(min(self.verbose, 2), logging.DEBUG)

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)

        for name in LOGGER_NAMES:
            logger = logging.getLogger(name)
            logger.handlers = [handler]
            logger.setLevel(level)

    def load_config(self):
        """Load configuration from defaults, profile, file and environment."""
        self.config_manager = ConfigurationManager(self.config_file, self.profile)
        self.config_manager.load()

        errors = self.config_manager.validate()
        if errors:
            raise click.UsageError("Invalid configuration: " + "; ".join(errors))

        if self.output_format is None:
            self.output_format = self.get_config('cli.output_format', 'table')

        self.logger.debug(f"Configuration sources: {', '.join(self.config_manager.get_sources())}")

    def get_config(self, key: str, default: Any = None) -> Any:
        """Get configuration value with fallback to default."""
        if self.config_manager is None:
            return default
        return self.config_manager.get(key, default)

    def output(self, data: Any, format_override: Optional[str] = None):
        """Output data in specified format."""
        format_type = format_override or self.output_format or 'table'

        if format_type == "json":
            click.echo(json.dumps(data, indent=2, default=str))
        elif format_type == "yaml":
            click.echo(yaml.dump(data, default_flow_style=False, sort_keys=False).rstrip())
        else:
            self._output_table(data)

    def _output_table(self, data: Any):
        """Output data in table format."""
        if isinstance(data, dict):
            # Simple key-value table
            for key, value in data.items():
                if isinstance(value, list):
                    value = ", ".join(str(item) for item in value)
                click.echo(f"{key:20} {value}")
        elif isinstance(data, list):
            for item in data:
                click.echo(str(item))
        else:
            click.echo(str(data))


# Global context instance
pass_context = click.make_pass_decorator(CLIContext, ensure=True)


def handle_cli_error(func):
    """Decorator reporting protocol and builder errors without a traceback."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (ProtocolError, TransactionBuilderError, ValueError) as e:
            ctx = click.get_current_context().find_object(CLIContext)

            click.echo(f"Error: {e}", err=True)
            if ctx and ctx.verbose >= 2:
                click.echo(traceback.format_exc(), err=True)
            else:
                click.echo("Use -vv for detailed error information.", err=True)

            sys.exit(1)

    return wrapper


def load_json_file(file_path: str) -> Dict[str, Any]:
    """Load a JSON file."""
    try:
        with open(file_path, 'r') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise click.FileError(file_path, hint=f"invalid JSON: {e}")
