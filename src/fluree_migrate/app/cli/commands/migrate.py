"""
Migrate command: v2 ledger to JSON-LD vocabulary and data.
"""

import argparse
import logging
import sys
from typing import Optional

from ....constants import ExitCode
from ....core.platform.auth import CredentialProvider
from ....core.services.orchestrator import MigrationOrchestrator, MigrationResult
from ....core.services.sinks import OutputSink
from ..helpers import format_count_summary, print_footer, print_header, split_warnings
from .base import BaseCommand, exit_code_for

logger = logging.getLogger(__name__)

MAX_LISTED_WARNINGS = 20


class MigrateCommand(BaseCommand):
    """Run a full migration and print its summary."""

    def __init__(
        self,
        credential_provider: Optional[CredentialProvider] = None,
        sink: Optional[OutputSink] = None,
    ):
        """
        Args:
            credential_provider: Provider used on HTTP 401.
            sink: Output sink override (for dependency injection).
        """
        super().__init__(credential_provider)
        self._sink = sink

    def execute(self, args: argparse.Namespace) -> int:
        config = self.load_config(args)
        self.setup_logging_from_config(config)
        config.validate()

        orchestrator = MigrationOrchestrator.from_config(
            config,
            credential_provider=self.get_credential_provider(args),
            show_progress=not getattr(args, 'no_progress', False) and sys.stderr.isatty(),
            sink=self._sink,
        )
        result = orchestrator.run()
        self.print_result(result)

        if result.error is not None:
            return exit_code_for(result.error)
        return ExitCode.SUCCESS

    @staticmethod
    def print_result(result: MigrationResult) -> None:
        """Print the run summary and the first warnings to stderr."""
        print_header("MIGRATION COMPLETE" if result.success else "MIGRATION FAILED")
        print(result.get_summary(), file=sys.stderr)

        schema_warnings, hidden_schema = split_warnings(result.warnings.schema_warnings, MAX_LISTED_WARNINGS)
        transform_warnings, hidden_transform = split_warnings(
            result.warnings.transform_warnings, MAX_LISTED_WARNINGS
        )
        if schema_warnings or transform_warnings:
            print("\nWarnings:", file=sys.stderr)
            for warning in schema_warnings:
                print(f"  [SchemaWarning] {warning}", file=sys.stderr)
            for warning in transform_warnings:
                print(f"  {warning}", file=sys.stderr)
            hidden = hidden_schema + hidden_transform
            if hidden:
                print(f"  ... and {hidden} more (see the log)", file=sys.stderr)
                print(format_count_summary(result.warnings.counts(), prefix="    "), file=sys.stderr)
        print_footer()
