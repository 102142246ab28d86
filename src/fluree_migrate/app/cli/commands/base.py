"""
Base command class.

This module contains the base command class that all CLI commands inherit
from, and the mapping from fatal errors to exit codes.
"""

import argparse
import logging
import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ....config import MigrationConfig
from ....constants import ExitCode
from ....core.errors import (
    ConfigError,
    LedgerAPIError,
    SchemaError,
    SinkError,
)
from ....core.platform.auth import (
    CredentialProvider,
    PromptCredentialProvider,
    StaticCredentialProvider,
)
from ..helpers import parse_context_flags, setup_logging

logger = logging.getLogger(__name__)


def exit_code_for(error: BaseException) -> ExitCode:
    """Exit code for a fatal error."""
    if isinstance(error, ConfigError):
        return ExitCode.CONFIG_ERROR
    if isinstance(error, SchemaError):
        return ExitCode.SCHEMA_ERROR
    if isinstance(error, SinkError):
        return ExitCode.ERROR
    if isinstance(error, LedgerAPIError):
        return ExitCode.API_ERROR
    if isinstance(error, FileNotFoundError):
        return ExitCode.FILE_NOT_FOUND
    if isinstance(error, PermissionError):
        return ExitCode.PERMISSION_DENIED
    return ExitCode.ERROR


class BaseCommand(ABC):
    """
    Base class for CLI commands.

    Provides configuration loading (file, then flag overrides) and logging
    setup. Subclasses implement ``execute()``.
    """

    def __init__(self, credential_provider: Optional[CredentialProvider] = None):
        """
        Args:
            credential_provider: Provider used on HTTP 401 (for dependency injection).
                Defaults to a terminal prompt when stdin is interactive.
        """
        self._credential_provider = credential_provider

    def load_config(self, args: argparse.Namespace) -> MigrationConfig:
        """
        Build the configuration from ``--config`` and command-line flags.

        Raises:
            ConfigError: On invalid file contents or flag values.
            FileNotFoundError: If ``--config`` names a missing file.
        """
        config_path = getattr(args, 'config', None)
        config = MigrationConfig.from_file(config_path) if config_path else MigrationConfig()

        extra_context = dict(config.extra_context)
        extra_context.update(parse_context_flags(getattr(args, 'context', None)))

        logging_config: Dict[str, Any] = dict(config.logging)
        for key, attr in (('level', 'log_level'), ('file', 'log_file'), ('format', 'log_format')):
            value = getattr(args, attr, None)
            if value is not None:
                logging_config[key] = value

        return config.with_overrides(
            source_url=getattr(args, 'source_url', None),
            source_api_key=getattr(args, 'source_api_key', None),
            base=getattr(args, 'base', None),
            vocab=getattr(args, 'vocab', None),
            shacl=getattr(args, 'shacl', None),
            closed_shapes=getattr(args, 'closed_shapes', None),
            target_url=getattr(args, 'target_url', None),
            target_api_key=getattr(args, 'target_api_key', None),
            create_ledger=getattr(args, 'create_ledger', None),
            ledger=getattr(args, 'ledger', None),
            output_dir=getattr(args, 'output_dir', None),
            batch_size=getattr(args, 'batch_size', None),
            strict_schema=False if getattr(args, 'lenient_schema', False) else None,
            extra_context=extra_context,
            logging=logging_config,
        )

    def setup_logging_from_config(self, config: MigrationConfig) -> None:
        setup_logging(config=config.logging)

    def get_credential_provider(self, args: argparse.Namespace) -> CredentialProvider:
        """Prompting provider on an interactive terminal, otherwise one that refuses."""
        if self._credential_provider is not None:
            return self._credential_provider
        if getattr(args, 'no_prompt', False) or not sys.stdin.isatty():
            return StaticCredentialProvider()
        return PromptCredentialProvider()

    @abstractmethod
    def execute(self, args: argparse.Namespace) -> int:
        """
        Execute the command.

        Args:
            args: Parsed command-line arguments.

        Returns:
            Exit code (0 for success, non-zero for error).
        """
